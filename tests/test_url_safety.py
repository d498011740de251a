# tests/test_url_safety.py

import socket

import pytest

from app.services import url_safety_service
from app.services.url_safety_service import is_forwardable


@pytest.mark.parametrize('host', ['169.254.169.254', 'localhost', '127.0.0.1', '0.0.0.0', '[::1]', 'LOCALHOST'])
@pytest.mark.parametrize('scheme', ['http', 'https', 'ftp'])
def test_hosts_bloqueados_em_qualquer_esquema(scheme, host):
    assert not is_forwardable(f'{scheme}://{host}/latest/meta-data/')


@pytest.mark.parametrize('host', [
    '10.0.0.1', '10.255.1.1',
    '172.16.0.1', '172.20.5.5', '172.31.255.255',
    '192.168.0.1', '192.168.100.20',
])
def test_faixas_privadas_bloqueadas(host):
    assert not is_forwardable(f'https://{host}:8443/hook')


@pytest.mark.parametrize('host', ['172.15.0.1', '172.32.0.1', '11.0.0.1', '192.169.0.1'])
def test_vizinhos_das_faixas_privadas_passam(host):
    assert is_forwardable(f'http://{host}/hook')


@pytest.mark.parametrize('url', [
    'ftp://example.com/file',
    'file:///etc/passwd',
    'gopher://example.com/',
    'javascript:alert(1)',
])
def test_esquemas_nao_http_rejeitados(url):
    assert not is_forwardable(url)


@pytest.mark.parametrize('url', ['', 'not a url', '/relative/path', 'http://', 'http://example.com:porta/', None, 42])
def test_entradas_invalidas_rejeitadas(url):
    assert not is_forwardable(url)


def test_url_publica_aceita():
    assert is_forwardable('https://example.com/webhook/abc123')
    assert is_forwardable('http://n8n.minhaempresa.com.br:5678/webhook/xyz')


def test_hostname_que_so_contem_prefixo_privado_no_meio_passa():
    # A verificação é por prefixo textual do hostname
    assert is_forwardable('https://hooks.10.example.com/x')


def _fake_getaddrinfo(endereco):
    def getaddrinfo(host, port, *args, **kwargs):
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, '', (endereco, 0))]
    return getaddrinfo


def test_resolucao_para_ip_privado_e_bloqueada(monkeypatch):
    monkeypatch.setattr(url_safety_service.socket, 'getaddrinfo', _fake_getaddrinfo('10.1.2.3'))
    assert url_safety_service.resolves_to_blocked_address('https://evil.example.com/hook')


def test_resolucao_para_ip_publico_passa(monkeypatch):
    monkeypatch.setattr(url_safety_service.socket, 'getaddrinfo', _fake_getaddrinfo('93.184.216.34'))
    assert not url_safety_service.resolves_to_blocked_address('https://example.com/hook')


def test_falha_de_resolucao_conta_como_bloqueado(monkeypatch):
    def getaddrinfo(*args, **kwargs):
        raise socket.gaierror('nome desconhecido')
    monkeypatch.setattr(url_safety_service.socket, 'getaddrinfo', getaddrinfo)
    assert url_safety_service.resolves_to_blocked_address('https://nao-existe.invalid/')
