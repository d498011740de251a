# app/webhooks/__init__.py

from flask import Blueprint

bp = Blueprint('webhooks', __name__)

# Importa as rotas no final para evitar dependências circulares
from app.webhooks import routes
