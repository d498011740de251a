# app/services/payload_service.py

import json
from app.errors import PayloadNotObject, PayloadTooLarge

MAX_PAYLOAD_CHARS = 100000


def serialized_length(payload) -> int:
    # Conta caracteres do JSON compacto, não bytes: "é" vale 1
    return len(json.dumps(payload, ensure_ascii=False, separators=(',', ':')))


def validate_payload(payload, max_chars: int = MAX_PAYLOAD_CHARS):
    """
    Garante que o payload é um objeto JSON e que a sua serialização não passa
    de `max_chars` caracteres. Não altera o payload.
    """
    if payload is None or not isinstance(payload, dict):
        raise PayloadNotObject()

    if serialized_length(payload) > max_chars:
        raise PayloadTooLarge()
