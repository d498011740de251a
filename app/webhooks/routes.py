# app/webhooks/routes.py

import requests
from flask import request, jsonify, current_app
from werkzeug.exceptions import RequestEntityTooLarge
from app.webhooks import bp
from app.errors import RelayError, MethodNotAllowed, PayloadTooLarge
from app.services import relay_service

# Falhas de rede não expõem detalhes do requests/urllib3 ao chamador
FALHA_DE_REDE = 'Failed to reach webhook destination'

TODOS_OS_METODOS = ['GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'OPTIONS']


@bp.after_request
def adicionar_cabecalhos_cors(response):
    response.headers['Access-Control-Allow-Origin'] = '*'
    response.headers['Access-Control-Allow-Headers'] = current_app.config['CORS_ALLOW_HEADERS']
    return response


def _ler_corpo():
    try:
        return request.get_data(cache=False)
    except RequestEntityTooLarge:
        raise PayloadTooLarge()


@bp.route('/webhook-enviar', methods=TODOS_OS_METODOS)
def webhook_enviar():
    """
    Envia um payload ao webhook configurado pelo usuário autenticado,
    repetindo o método HTTP da chamada.
    """
    logger = current_app.logger
    if request.method == 'OPTIONS':
        return '', 204

    if request.method not in relay_service.ENVIAR_METHODS:
        erro = MethodNotAllowed(request.method)
        logger.warning(f"WEBHOOK_ENVIAR: {erro.message}")
        return jsonify(erro.to_dict()), erro.status_code

    auth_header = request.headers.get('Authorization')
    try:
        corpo = _ler_corpo() if request.method != 'GET' else b''
        query_params = {chave: valor for chave, valor in request.args.items(multi=True)}
        resultado, status = relay_service.enviar_webhook(request.method, auth_header, query_params, corpo)
        return jsonify(resultado), status
    except RelayError as e:
        return jsonify(e.to_dict()), e.status_code
    except requests.exceptions.RequestException as e:
        logger.error(f"WEBHOOK_ENVIAR: Falha de rede ao encaminhar: {e}", exc_info=True)
        relay_service.registrar_falha_envio(auth_header, FALHA_DE_REDE)
        return jsonify({"error": FALHA_DE_REDE}), 500
    except Exception as e:
        logger.error(f"WEBHOOK_ENVIAR: Erro inesperado: {e}", exc_info=True)
        mensagem = str(e) or 'Unknown error'
        relay_service.registrar_falha_envio(auth_header, mensagem)
        return jsonify({"error": mensagem}), 500


@bp.route('/webhook-receber', methods=TODOS_OS_METODOS)
def webhook_receber():
    """
    Recebe um webhook externo e o encaminha ao destino do usuário.
    """
    logger = current_app.logger
    if request.method == 'OPTIONS':
        return '', 204

    if request.method != 'POST':
        erro = MethodNotAllowed(request.method, allowed=('POST',))
        logger.warning(f"WEBHOOK_RECEBER: {erro.message}")
        return jsonify(erro.to_dict()), erro.status_code

    try:
        resultado, status = relay_service.receber_webhook(request.headers.get('Authorization'), _ler_corpo())
        return jsonify(resultado), status
    except RelayError as e:
        return jsonify(e.to_dict()), e.status_code
    except requests.exceptions.RequestException as e:
        logger.error(f"WEBHOOK_RECEBER: Falha de rede ao encaminhar: {e}", exc_info=True)
        return jsonify({"error": FALHA_DE_REDE}), 500
    except Exception as e:
        logger.error(f"WEBHOOK_RECEBER: Erro inesperado: {e}", exc_info=True)
        return jsonify({"error": str(e) or 'Unknown error'}), 500
