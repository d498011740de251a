# app/services/cnpj_service.py
import re
import requests
from datetime import datetime, timezone
from flask import current_app


def limpar_cnpj(cnpj: str) -> str:
    return re.sub(r'\D', '', cnpj or '')


def consultar_cnpj(cnpj: str):
    """
    Consulta um CNPJ na BrasilAPI e retorna os dados de forma estruturada.
    """
    logger = current_app.logger
    cnpj_limpo = limpar_cnpj(cnpj)
    if len(cnpj_limpo) != 14:
        return {"sucesso": False, "status_code": 400, "erro": "CNPJ inválido. Informe os 14 dígitos."}

    try:
        brasil_api_url = f"{current_app.config['BRASILAPI_BASE_URL']}{cnpj_limpo}"
        response = requests.get(brasil_api_url, timeout=current_app.config.get('BRASILAPI_TIMEOUT', 10))

        # Adiciona informações de diagnóstico no retorno
        consulta_info = {
            "fonte_dos_dados": "BrasilAPI",
            "data_consulta_utc": datetime.now(timezone.utc).isoformat()
        }

        if response.status_code == 200:
            dados_api = response.json()
            if not isinstance(dados_api, dict):
                logger.error(f"CNPJ_SERVICE: BrasilAPI devolveu um JSON que não é objeto para o CNPJ {cnpj_limpo}.")
                return {
                    "sucesso": False,
                    "status_code": 502,
                    "erro": "Resposta inesperada da API de consulta.",
                    "detalhes": consulta_info
                }
            dados_api.update(consulta_info)
            logger.info(f"CNPJ_SERVICE: CNPJ {cnpj_limpo} encontrado na BrasilAPI.")
            return {"sucesso": True, "dados": dados_api}

        logger.warning(f"CNPJ_SERVICE: BrasilAPI respondeu {response.status_code} para o CNPJ {cnpj_limpo}.")
        return {
            "sucesso": False,
            "status_code": 404 if response.status_code == 404 else 502,
            "erro": "CNPJ não encontrado ou serviço indisponível.",
            "detalhes": consulta_info
        }

    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"CNPJ_SERVICE: Falha de comunicação com a BrasilAPI: {e}")
        return {
            "sucesso": False,
            "status_code": 502,
            "erro": "Falha de comunicação com a API de consulta.",
            "detalhes": str(e)
        }
