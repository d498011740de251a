# app/models.py

import hashlib
from datetime import datetime
from app import db


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


class TokenAcesso(db.Model):
    __tablename__ = 'tokens_acesso'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), index=True, nullable=False)
    # Apenas o hash do token é guardado; o token em si é exibido uma única vez.
    token_hash = db.Column(db.String(64), unique=True, nullable=False)
    ativo = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<TokenAcesso {self.id} [{self.user_id}] ativo={self.ativo}>'


class WebhookConfig(db.Model):
    __tablename__ = 'webhook_config'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), index=True, nullable=False)
    webhook_url = db.Column(db.Text, nullable=False)
    api_key = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<WebhookConfig {self.id} [{self.user_id}] ativo={self.is_active}>'

    def to_dict(self):
        # O api_key nunca sai da base; só indicamos se existe.
        return {
            'id': self.id,
            'webhook_url': self.webhook_url,
            'has_api_key': bool(self.api_key),
            'is_active': self.is_active,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class WebhookLog(db.Model):
    __tablename__ = 'webhook_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), index=True, nullable=False)
    direction = db.Column(db.String(10), index=True, nullable=False)  # sent, received
    endpoint = db.Column(db.Text)
    payload = db.Column(db.JSON)
    response = db.Column(db.JSON, nullable=True)
    status_code = db.Column(db.Integer, nullable=True)
    success = db.Column(db.Boolean, default=False, nullable=False)
    error_message = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, index=True, default=datetime.utcnow)

    def __repr__(self):
        return f'<WebhookLog {self.id} [{self.direction}] {self.status_code}>'

    def to_dict(self):
        return {
            'id': self.id,
            'direction': self.direction,
            'endpoint': self.endpoint,
            'payload': self.payload,
            'response': self.response,
            'status_code': self.status_code,
            'success': self.success,
            'error_message': self.error_message,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
