# app/__init__.py

from flask import Flask, jsonify
from config import Config
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    db.init_app(app)

    # Importa os modelos para que o create_all os conheça
    from app import models

    # --- REGISTRO DOS BLUEPRINTS ---
    from app.webhooks import bp as webhooks_bp
    app.register_blueprint(webhooks_bp, url_prefix='/functions/v1')
    from app.configuracoes import bp as configuracoes_bp
    app.register_blueprint(configuracoes_bp, url_prefix='/api')
    from app.consulta import bp as consulta_bp
    app.register_blueprint(consulta_bp, url_prefix='/api')

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    return app
