# config.py
import os
import requests
from dotenv import load_dotenv

# Pega o caminho absoluto do diretório do projeto.
basedir = os.path.abspath(os.path.dirname(__file__))

# Carrega as variáveis de ambiente do arquivo .env na pasta raiz do projeto
load_dotenv(os.path.join(basedir, '.env'))


def _env_bool(nome, padrao=False):
    valor = os.environ.get(nome)
    if valor is None:
        return padrao
    return valor.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'uma-chave-secreta-muito-dificil-de-adivinhar'
    BRASILAPI_BASE_URL = "https://brasilapi.com.br/api/cnpj/v1/"
    BRASILAPI_TIMEOUT = 10

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Pega a DATABASE_URL do ambiente
    DATABASE_URL = os.environ.get('DATABASE_URL')

    # Corrige o prefixo para o SQLAlchemy (importante para Heroku/Vercel)
    if DATABASE_URL and DATABASE_URL.startswith("postgres://"):
        DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

    SQLALCHEMY_DATABASE_URI = DATABASE_URL or 'sqlite:///' + os.path.join(basedir, 'webhooks.db')

    # --- RELAY DE WEBHOOKS ---
    WEBHOOK_MAX_PAYLOAD_CHARS = 100000
    WEBHOOK_RECEBER_TIMEOUT = int(os.environ.get('WEBHOOK_RECEBER_TIMEOUT', 30))
    WEBHOOK_ENVIAR_TIMEOUT = int(os.environ.get('WEBHOOK_ENVIAR_TIMEOUT', 30))
    WEBHOOK_MAX_RESPONSE_BYTES = int(os.environ.get('WEBHOOK_MAX_RESPONSE_BYTES', 1_000_000))

    # Verificação de SSRF com resolução de DNS (desligada por padrão)
    WEBHOOK_RESOLVE_DNS = _env_bool('WEBHOOK_RESOLVE_DNS')

    # Fábrica da sessão HTTP usada para encaminhar os webhooks
    WEBHOOK_HTTP_SESSION_FACTORY = requests.Session

    CORS_ALLOW_HEADERS = 'authorization, x-client-info, apikey, content-type'

    # Teto para o corpo bruto das requisições (o limite do payload é checado depois do parse)
    MAX_CONTENT_LENGTH = 1_000_000


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WEBHOOK_RESOLVE_DNS = False
