# app/services/identity_service.py

from flask import current_app
from app.errors import Unauthorized
from app.models import TokenAcesso, hash_token


def extract_bearer_token(auth_header):
    if not auth_header:
        return None
    partes = auth_header.strip().split(None, 1)
    if len(partes) == 2 and partes[0].lower() == 'bearer':
        return partes[1].strip() or None
    # Sem o prefixo, o cabeçalho inteiro é tratado como token
    return partes[0] if len(partes) == 1 else None


def resolve_user_id(auth_header) -> str:
    """
    Troca o cabeçalho Authorization pelo identificador do usuário.
    Falha fechada: qualquer dúvida resulta em Unauthorized.
    """
    logger = current_app.logger

    if not auth_header:
        logger.warning("IDENTITY_SERVICE: Requisição sem cabeçalho de autorização.")
        raise Unauthorized('Authorization required')

    token = extract_bearer_token(auth_header)
    if not token:
        logger.warning("IDENTITY_SERVICE: Cabeçalho de autorização malformado.")
        raise Unauthorized('Invalid authorization')

    registro = TokenAcesso.query.filter_by(token_hash=hash_token(token), ativo=True).first()
    if registro is None:
        logger.warning("IDENTITY_SERVICE: Token inválido ou revogado.")
        raise Unauthorized('Invalid authorization')

    return registro.user_id
