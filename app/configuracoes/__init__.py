# app/configuracoes/__init__.py

from flask import Blueprint

bp = Blueprint('configuracoes', __name__)

from app.configuracoes import routes
