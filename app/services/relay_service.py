# app/services/relay_service.py
"""
Relay de webhooks nos dois sentidos.

- enviar_webhook: chamada interna -> destino configurado pelo usuário, com o
  mesmo método HTTP da chamada original (direction = 'sent').
- receber_webhook: sistema externo -> destino configurado, sempre via POST
  (direction = 'received').

As duas funções devolvem (corpo, status) e levantam erros de app.errors para
as falhas esperadas. Toda tentativa que chega ao encaminhamento gera
exatamente um WebhookLog.
"""

import json
import socket
import threading

import requests
from flask import current_app
from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool

from app import db
from app.errors import InvalidJson, NoActiveConfig, UnsafeDestination, UpstreamTimeout
from app.models import WebhookConfig, WebhookLog
from app.services import identity_service, payload_service, url_safety_service

MAX_RAW_RESPONSE_CHARS = 1000
MAX_ERROR_MESSAGE_CHARS = 500
CHUNK_SIZE = 8192


# --- Passos compartilhados ---

def parse_json_body(corpo: bytes, vazio_permitido=False):
    if not corpo or not corpo.strip():
        if vazio_permitido:
            return {}
        raise InvalidJson()
    try:
        return json.loads(corpo)
    except ValueError:
        raise InvalidJson()


def buscar_config_ativa(user_id: str) -> WebhookConfig:
    config = WebhookConfig.query.filter_by(
        user_id=user_id, is_active=True
    ).order_by(WebhookConfig.updated_at.desc(), WebhookConfig.id.desc()).first()

    if config is None:
        current_app.logger.warning(f"RELAY_SERVICE: Nenhuma configuração de webhook ativa para o usuário {user_id}.")
        raise NoActiveConfig()
    return config


def validar_destino(url: str):
    logger = current_app.logger
    if not url_safety_service.is_forwardable(url):
        logger.warning(f"RELAY_SERVICE: URL de destino bloqueada pela proteção SSRF: {url}")
        raise UnsafeDestination()

    if current_app.config.get('WEBHOOK_RESOLVE_DNS') and url_safety_service.resolves_to_blocked_address(url):
        logger.warning(f"RELAY_SERVICE: URL de destino resolve para endereço bloqueado: {url}")
        raise UnsafeDestination()


def parse_resposta_para_log(texto: str):
    if not texto:
        return None
    try:
        return json.loads(texto)
    except ValueError:
        return {"raw": texto[:MAX_RAW_RESPONSE_CHARS]}


def mensagem_de_erro(status_code, texto):
    return f"HTTP {status_code}: {texto}"[:MAX_ERROR_MESSAGE_CHARS]


def registrar_log(user_id, direction, endpoint, payload, response=None,
                  status_code=None, success=False, error_message=None):
    """
    Grava o WebhookLog. Falha na gravação não altera a resposta ao chamador:
    só é registrada no logger da aplicação.
    """
    logger = current_app.logger
    try:
        entrada = WebhookLog(
            user_id=user_id,
            direction=direction,
            endpoint=endpoint,
            payload=payload,
            response=response,
            status_code=status_code,
            success=success,
            error_message=error_message[:MAX_ERROR_MESSAGE_CHARS] if error_message else None,
        )
        db.session.add(entrada)
        db.session.commit()
        return entrada
    except Exception as e:
        logger.error(f"RELAY_SERVICE: Falha ao gravar o log do webhook ({direction}): {e}", exc_info=True)
        db.session.rollback()
        return None


def _decodificar(corpo: bytes, encoding):
    try:
        return corpo.decode(encoding or 'utf-8', errors='replace')
    except LookupError:
        # charset desconhecido informado pelo destino
        return corpo.decode('utf-8', errors='replace')


def _ler_corpo(resposta, limite_bytes):
    partes = []
    total = 0
    for pedaco in resposta.iter_content(chunk_size=CHUNK_SIZE):
        if not pedaco:
            continue
        restante = limite_bytes - total
        partes.append(pedaco[:restante])
        total += min(len(pedaco), restante)
        if total >= limite_bytes:
            current_app.logger.warning(
                f"RELAY_SERVICE: Resposta do destino truncada em {limite_bytes} bytes.")
            break
    return _decodificar(b''.join(partes), resposta.encoding)


class AdaptadorComPrazo(HTTPAdapter):
    """
    HTTPAdapter que guarda os sockets que abre, para que o vigia do prazo
    possa derrubá-los. Um shutdown no socket interrompe a leitura em curso,
    seja dos cabeçalhos ou do corpo.
    """

    def __init__(self, *args, **kwargs):
        self._sockets = []
        self._lock = threading.Lock()
        self.derrubado = False
        super().__init__(*args, **kwargs)

    def init_poolmanager(self, *args, **kwargs):
        super().init_poolmanager(*args, **kwargs)
        registrar = self._registrar_socket

        class Conexao(HTTPConnection):
            def _new_conn(self):
                sock = super()._new_conn()
                registrar(sock)
                return sock

        class ConexaoTLS(HTTPSConnection):
            def _new_conn(self):
                sock = super()._new_conn()
                registrar(sock)
                return sock

        self.poolmanager.pool_classes_by_scheme = {
            'http': type('PoolComPrazo', (HTTPConnectionPool,), {'ConnectionCls': Conexao}),
            'https': type('PoolTLSComPrazo', (HTTPSConnectionPool,), {'ConnectionCls': ConexaoTLS}),
        }

    def _registrar_socket(self, sock):
        with self._lock:
            self._sockets.append(sock)
            derrubar = self.derrubado
        if derrubar:
            _shutdown(sock)

    def derrubar_conexoes(self):
        with self._lock:
            self.derrubado = True
            sockets = list(self._sockets)
        for sock in sockets:
            _shutdown(sock)


def _shutdown(sock):
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        # já fechado
        pass


def encaminhar(method, url, payload, api_key, timeout):
    """
    Faz a requisição ao destino. Devolve (status_code, texto).
    Levanta UpstreamTimeout quando o prazo total estoura; outras falhas de
    rede sobem como requests.exceptions.RequestException.
    """
    headers = {'Content-Type': 'application/json'}
    if api_key:
        headers['Authorization'] = f'Bearer {api_key}'

    kwargs = {
        'headers': headers,
        'timeout': (timeout, timeout),
        'allow_redirects': False,
        'stream': True,
    }
    if method != 'GET':
        kwargs['data'] = json.dumps(payload, ensure_ascii=False).encode('utf-8')

    limite = current_app.config.get('WEBHOOK_MAX_RESPONSE_BYTES', 1_000_000)
    fabrica = current_app.config.get('WEBHOOK_HTTP_SESSION_FACTORY') or requests.Session

    with fabrica() as sessao:
        adaptador = AdaptadorComPrazo()
        sessao.mount('http://', adaptador)
        sessao.mount('https://', adaptador)

        # O timeout do requests vale por leitura; o vigia limita o total
        vigia = threading.Timer(timeout, adaptador.derrubar_conexoes)
        vigia.daemon = True
        vigia.start()
        try:
            resposta = sessao.request(method, url, **kwargs)
            try:
                texto = _ler_corpo(resposta, limite)
            finally:
                resposta.close()
        except requests.exceptions.Timeout:
            raise UpstreamTimeout(timeout)
        except requests.exceptions.RequestException:
            if adaptador.derrubado:
                raise UpstreamTimeout(timeout)
            raise
        finally:
            vigia.cancel()

    # Corpo sem Content-Length termina "normalmente" quando o socket cai
    if adaptador.derrubado:
        raise UpstreamTimeout(timeout)

    return resposta.status_code, texto


def _encaminhar_e_registrar(user_id, direction, method, config, payload, timeout):
    logger = current_app.logger
    # Envio registra "METODO url"; recebimento registra só a url
    endpoint = f"{method} {config.webhook_url}" if direction == 'sent' else config.webhook_url

    try:
        status_code, texto = encaminhar(method, config.webhook_url, payload, config.api_key, timeout)
    except UpstreamTimeout as e:
        logger.error(f"RELAY_SERVICE: Timeout ao encaminhar webhook ({direction}) para {config.webhook_url}.")
        registrar_log(user_id, direction, endpoint, payload, error_message=e.message)
        raise

    ok = 200 <= status_code < 300
    logger.info(f"RELAY_SERVICE: Destino respondeu {status_code} ({direction}).")

    registrar_log(
        user_id, direction, endpoint, payload,
        response=parse_resposta_para_log(texto),
        status_code=status_code,
        success=ok,
        error_message=None if ok else mensagem_de_erro(status_code, texto),
    )
    return status_code, texto, ok


# --- Saída: webhook-enviar ---

ENVIAR_METHODS = ('POST', 'GET', 'PUT', 'DELETE')


def enviar_webhook(method, auth_header, query_params, corpo):
    """
    Encaminha um payload interno para o webhook do usuário autenticado,
    usando o mesmo método HTTP. O status da resposta espelha o do destino.
    """
    logger = current_app.logger

    user_id = identity_service.resolve_user_id(auth_header)
    logger.info(f"RELAY_SERVICE: Usuário autenticado para envio: {user_id}")

    if method == 'GET':
        payload = dict(query_params or {})
    else:
        payload = parse_json_body(corpo, vazio_permitido=True)

    # Payload vazio ({} ou GET sem parâmetros) não tem o que limitar
    if not (isinstance(payload, dict) and not payload):
        payload_service.validate_payload(payload, current_app.config['WEBHOOK_MAX_PAYLOAD_CHARS'])

    config = buscar_config_ativa(user_id)
    validar_destino(config.webhook_url)

    logger.info(f"RELAY_SERVICE: Enviando para o webhook via {method}.")
    status_code, texto, ok = _encaminhar_e_registrar(
        user_id, 'sent', method, config, payload, current_app.config['WEBHOOK_ENVIAR_TIMEOUT'])

    if not ok:
        return {
            "error": "Failed to send webhook",
            "status": status_code,
            "response": texto,
        }, status_code

    return {
        "success": True,
        "message": f"Webhook sent successfully via {method}",
        "method": method,
        "status": status_code,
        "response": texto,
    }, 200


def registrar_falha_envio(auth_header, mensagem):
    """
    Log de melhor esforço para erros inesperados do envio. Nunca levanta:
    a resposta de erro original tem prioridade.
    """
    logger = current_app.logger
    if not auth_header:
        return
    try:
        db.session.rollback()
        user_id = identity_service.resolve_user_id(auth_header)
    except Exception as e:
        logger.error(f"RELAY_SERVICE: Não foi possível registrar o erro do envio: {e}")
        return
    registrar_log(user_id, 'sent', 'error', {}, success=False, error_message=mensagem)


# --- Entrada: webhook-receber ---

def receber_webhook(auth_header, corpo):
    """
    Recebe um payload externo e encaminha via POST ao webhook do usuário.
    Responde 200 sempre que o encaminhamento aconteceu, mesmo que o destino
    tenha respondido com erro.
    """
    logger = current_app.logger

    payload = parse_json_body(corpo)
    payload_service.validate_payload(payload, current_app.config['WEBHOOK_MAX_PAYLOAD_CHARS'])
    logger.info(f"RELAY_SERVICE: Webhook recebido, tamanho do payload: {payload_service.serialized_length(payload)}")

    user_id = identity_service.resolve_user_id(auth_header)
    logger.info(f"RELAY_SERVICE: Usuário autenticado para recebimento: {user_id}")

    config = buscar_config_ativa(user_id)
    validar_destino(config.webhook_url)

    logger.info("RELAY_SERVICE: Encaminhando webhook recebido.")
    status_code, texto, _ = _encaminhar_e_registrar(
        user_id, 'received', 'POST', config, payload, current_app.config['WEBHOOK_RECEBER_TIMEOUT'])

    return {
        "success": True,
        "message": "Webhook forwarded successfully",
        "destination_status": status_code,
        "destination_response": texto,
        "n8n_status": status_code,
        "n8n_response": texto,
    }, 200
