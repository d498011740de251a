# tests/conftest.py

import json

import pytest

from app import create_app, db
from app.models import TokenAcesso, WebhookConfig, hash_token
from config import TestConfig

TOKEN = 'token-do-usuario-1'
OUTRO_TOKEN = 'token-do-usuario-2'


class FakeResponse:
    def __init__(self, status_code=200, body=b'', encoding='utf-8'):
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode('utf-8')
        elif isinstance(body, str):
            body = body.encode('utf-8')
        self.status_code = status_code
        self.encoding = encoding
        self._body = body
        self.closed = False

    def iter_content(self, chunk_size=1):
        for inicio in range(0, len(self._body), chunk_size):
            yield self._body[inicio:inicio + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """Sessão HTTP falsa: registra as chamadas e devolve respostas pré-definidas."""

    def __init__(self):
        self.calls = []
        self.responses = []
        self.error = None
        self.closed = False
        self.opened = 0
        self.adapters = {}

    def __enter__(self):
        self.opened += 1
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def mount(self, prefixo, adaptador):
        self.adapters[prefixo] = adaptador

    def respond(self, status_code=200, body=b'', encoding='utf-8'):
        resposta = FakeResponse(status_code, body, encoding)
        self.responses.append(resposta)
        return resposta

    def request(self, method, url, **kwargs):
        self.calls.append({'method': method, 'url': url, **kwargs})
        if self.error is not None:
            raise self.error
        if not self.responses:
            return FakeResponse(200, b'')
        return self.responses.pop(0)


@pytest.fixture
def http():
    return FakeSession()


@pytest.fixture
def app(http):
    app = create_app(TestConfig)
    app.config['WEBHOOK_HTTP_SESSION_FACTORY'] = lambda: http
    with app.app_context():
        db.create_all()
        db.session.add(TokenAcesso(user_id='usuario-1', token_hash=hash_token(TOKEN)))
        db.session.add(TokenAcesso(user_id='usuario-2', token_hash=hash_token(OUTRO_TOKEN)))
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth():
    return {'Authorization': f'Bearer {TOKEN}'}


@pytest.fixture
def make_config(app):
    def _make_config(webhook_url='https://example.com/webhook/abc123', api_key=None,
                     is_active=True, user_id='usuario-1'):
        config = WebhookConfig(user_id=user_id, webhook_url=webhook_url,
                               api_key=api_key, is_active=is_active)
        db.session.add(config)
        db.session.commit()
        return config
    return _make_config
