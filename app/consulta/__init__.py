# app/consulta/__init__.py

from flask import Blueprint

bp = Blueprint('consulta', __name__)

from app.consulta import routes
