# app/configuracoes/routes.py

from flask import request, jsonify, current_app, g
from app import db
from app.configuracoes import bp
from app.decorators import require_bearer_token
from app.models import WebhookConfig, WebhookLog
from app.services import url_safety_service

LIMITE_LOGS = 100


@bp.route('/webhook-config', methods=['GET'])
@require_bearer_token
def obter_config():
    config = WebhookConfig.query.filter_by(user_id=g.user_id).order_by(WebhookConfig.id.desc()).first()
    if config is None:
        return jsonify({"error": "No webhook configuration found"}), 404
    return jsonify(config.to_dict())


@bp.route('/webhook-config', methods=['PUT'])
@require_bearer_token
def salvar_config():
    """
    Cria ou atualiza a configuração de webhook do usuário autenticado.
    """
    logger = current_app.logger
    dados = request.get_json(silent=True)
    if not isinstance(dados, dict):
        return jsonify({"error": "Invalid JSON in request body"}), 400

    webhook_url = (dados.get('webhook_url') or '').strip()
    if not webhook_url:
        return jsonify({"error": "O campo 'webhook_url' é obrigatório."}), 400
    if not url_safety_service.is_forwardable(webhook_url):
        logger.warning(f"CONFIGURACOES: URL de webhook recusada para o usuário {g.user_id}.")
        return jsonify({"error": "URLs pointing to localhost, private networks, or metadata endpoints are not allowed."}), 400

    is_active = dados.get('is_active', True)
    if not isinstance(is_active, bool):
        return jsonify({"error": "O campo 'is_active' deve ser booleano."}), 400

    config = WebhookConfig.query.filter_by(user_id=g.user_id).order_by(WebhookConfig.id.desc()).first()
    status = 200
    if config is None:
        config = WebhookConfig(user_id=g.user_id)
        db.session.add(config)
        status = 201

    config.webhook_url = webhook_url
    if 'api_key' in dados:
        config.api_key = dados.get('api_key') or None
    config.is_active = is_active

    try:
        db.session.commit()
    except Exception as e:
        logger.error(f"CONFIGURACOES: Falha ao salvar a configuração: {e}", exc_info=True)
        db.session.rollback()
        return jsonify({"error": "Não foi possível salvar as configurações."}), 500

    logger.info(f"CONFIGURACOES: Configuração de webhook salva para o usuário {g.user_id}.")
    return jsonify(config.to_dict()), status


@bp.route('/webhook-logs', methods=['GET'])
@require_bearer_token
def listar_logs():
    limite = request.args.get('limit', LIMITE_LOGS, type=int)
    limite = max(1, min(limite, LIMITE_LOGS))

    logs = WebhookLog.query.filter_by(user_id=g.user_id).order_by(
        WebhookLog.created_at.desc(), WebhookLog.id.desc()
    ).limit(limite).all()
    return jsonify([log.to_dict() for log in logs])
