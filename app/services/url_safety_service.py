# app/services/url_safety_service.py
"""
Proteção contra SSRF para as URLs de destino dos webhooks.

`is_forwardable` é um predicado puro sobre o texto da URL: não resolve DNS.
Um hostname público que resolva para um IP privado passa por ele; para esse
caso existe `resolves_to_blocked_address`, ligado pela configuração
WEBHOOK_RESOLVE_DNS.
"""

import ipaddress
import re
import socket
from urllib.parse import urlsplit

ALLOWED_SCHEMES = ('http', 'https')

BLOCKED_HOSTS = frozenset({
    'localhost',
    '127.0.0.1',
    '0.0.0.0',
    '169.254.169.254',  # metadados da nuvem
    '::1',
})

# 10.x.x.x, 172.16-31.x.x, 192.168.x.x (prefixo textual)
PRIVATE_PREFIX = re.compile(r'^(10\.|172\.(1[6-9]|2[0-9]|3[01])\.|192\.168\.)')


def _hostname(url):
    try:
        partes = urlsplit(url)
        # .hostname já vem em minúsculas e sem os colchetes de IPv6
        hostname = partes.hostname
        # Acessar .port valida a porta; uma porta inválida torna a URL inválida
        partes.port
    except (ValueError, TypeError, AttributeError):
        return None, None
    return partes.scheme.lower(), hostname


def is_forwardable(url) -> bool:
    """Decide se é seguro encaminhar uma requisição para `url`."""
    if not isinstance(url, str):
        return False

    scheme, hostname = _hostname(url.strip())
    if not scheme or not hostname:
        return False

    if scheme not in ALLOWED_SCHEMES:
        return False

    hostname = hostname.lower()
    if hostname in BLOCKED_HOSTS:
        return False

    if PRIVATE_PREFIX.match(hostname):
        return False

    return True


def _endereco_bloqueado(ip):
    return (ip.is_private or ip.is_loopback or ip.is_link_local
            or ip.is_reserved or ip.is_multicast or ip.is_unspecified)


def resolves_to_blocked_address(url) -> bool:
    """
    Resolve o hostname da URL e verifica se algum endereço cai em faixa
    privada, loopback, link-local ou reservada. Falha de resolução conta como
    bloqueado.
    """
    _, hostname = _hostname(url)
    if not hostname:
        return True

    try:
        infos = socket.getaddrinfo(hostname, None, proto=socket.IPPROTO_TCP)
    except socket.gaierror:
        return True

    for _family, _type, _proto, _canonname, sockaddr in infos:
        try:
            ip = ipaddress.ip_address(sockaddr[0])
        except ValueError:
            continue
        if _endereco_bloqueado(ip):
            return True
    return False
