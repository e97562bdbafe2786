# controllers/main_controller.py

"""
Public pages and the read-only JSON API.

Browsers get rendered templates; API/XHR callers (Accept: application/json,
X-Requested-With or ?format=json) get the same data as JSON.
"""

import logging

from flask import Blueprint, current_app, jsonify, render_template, send_from_directory

from bs_release.extensions import db
from bs_release.services.release_service import ReleaseService
from bs_release.utils.http import wants_json

# Configuração do logger para este módulo
logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)


def _service() -> ReleaseService:
    return ReleaseService(db.session)


@main_bp.route('/', methods=['GET'])
def index():
    """Página inicial: produtos com a release mais recente."""
    products = _service().product_overview()
    if wants_json():
        return jsonify({'products': products})
    return render_template('index.html', products=products)


@main_bp.route('/products', methods=['GET'])
def list_products():
    """Lista de produtos do catálogo (sempre JSON)."""
    return jsonify(_service().list_products())


@main_bp.route('/releases/<string:product>', methods=['GET'])
def product_releases(product: str):
    """Histórico de releases de um produto, mais recentes primeiro."""
    data = _service().list_releases(product)
    if wants_json():
        return jsonify(data)
    return render_template('releases.html', product=data['product'], releases=data['releases'])


@main_bp.route('/releases/<string:product>/<string:version>', methods=['GET'])
def release_detail(product: str, version: str):
    data = _service().get_release(product, version)
    if wants_json():
        return jsonify(data)
    return render_template('release.html', product=data['product'], release=data['release'])


@main_bp.route('/uploads/<path:filename>', methods=['GET'])
def uploaded_file(filename: str):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)


@main_bp.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok'})
