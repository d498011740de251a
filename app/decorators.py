# app/decorators.py
from functools import wraps
from flask import request, jsonify, g
from app.errors import Unauthorized
from app.services import identity_service


def require_bearer_token(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            g.user_id = identity_service.resolve_user_id(request.headers.get('Authorization'))
        except Unauthorized as e:
            return jsonify(e.to_dict()), e.status_code
        return f(*args, **kwargs)
    return decorated_function
