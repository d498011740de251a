# tests/test_configuracoes.py

from app import db
from app.models import WebhookConfig, WebhookLog

URL_CONFIG = '/api/webhook-config'
URL_LOGS = '/api/webhook-logs'


def test_put_cria_e_depois_atualiza(client, auth):
    resp = client.put(URL_CONFIG, json={
        'webhook_url': 'https://n8n.example.com/webhook/1',
        'api_key': 'segredo',
        'is_active': True,
    }, headers=auth)
    assert resp.status_code == 201
    assert resp.get_json()['has_api_key'] is True
    assert 'api_key' not in resp.get_json()

    resp = client.put(URL_CONFIG, json={
        'webhook_url': 'https://n8n.example.com/webhook/2',
        'is_active': False,
    }, headers=auth)
    assert resp.status_code == 200

    configs = WebhookConfig.query.filter_by(user_id='usuario-1').all()
    assert len(configs) == 1
    assert configs[0].webhook_url == 'https://n8n.example.com/webhook/2'
    assert configs[0].api_key == 'segredo'
    assert configs[0].is_active is False


def test_put_rejeita_url_insegura(client, auth):
    resp = client.put(URL_CONFIG, json={'webhook_url': 'http://localhost:5678/webhook'}, headers=auth)
    assert resp.status_code == 400
    assert WebhookConfig.query.count() == 0


def test_put_exige_url(client, auth):
    resp = client.put(URL_CONFIG, json={'is_active': True}, headers=auth)
    assert resp.status_code == 400


def test_put_exige_autenticacao(client):
    resp = client.put(URL_CONFIG, json={'webhook_url': 'https://example.com/'})
    assert resp.status_code == 401


def test_get_sem_config(client, auth):
    assert client.get(URL_CONFIG, headers=auth).status_code == 404


def test_get_nao_expoe_api_key(client, auth, make_config):
    make_config(api_key='segredo')
    corpo = client.get(URL_CONFIG, headers=auth).get_json()
    assert corpo['webhook_url'] == 'https://example.com/webhook/abc123'
    assert corpo['has_api_key'] is True
    assert 'segredo' not in str(corpo)


def test_logs_sao_do_proprio_usuario_e_limitados(client, auth):
    for i in range(3):
        db.session.add(WebhookLog(user_id='usuario-1', direction='sent', endpoint=f'POST /{i}',
                                  payload={'i': i}, success=True, status_code=200))
    db.session.add(WebhookLog(user_id='usuario-2', direction='received', endpoint='POST /x',
                              payload={}, success=True, status_code=200))
    db.session.commit()

    logs = client.get(URL_LOGS, headers=auth).get_json()
    assert len(logs) == 3
    assert {log['endpoint'] for log in logs} == {'POST /0', 'POST /1', 'POST /2'}
    assert logs[0]['id'] > logs[-1]['id']

    assert len(client.get(URL_LOGS + '?limit=2', headers=auth).get_json()) == 2
