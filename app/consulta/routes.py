# app/consulta/routes.py

from flask import jsonify
from app.consulta import bp
from app.services import cnpj_service


@bp.route('/cnpj/<path:cnpj>', methods=['GET'])
def consultar(cnpj):
    resultado = cnpj_service.consultar_cnpj(cnpj)
    if resultado.get('sucesso'):
        return jsonify(resultado['dados'])
    return jsonify({"error": resultado['erro']}), resultado.get('status_code', 502)
