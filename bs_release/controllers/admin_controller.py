# controllers/admin_controller.py

import logging

from flask import Blueprint, render_template
from flask_login import current_user, login_required

from bs_release.extensions import db
from bs_release.services.release_service import ReleaseService

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


@admin_bp.after_request
def _no_store(response):
    # Páginas administrativas nunca ficam em cache (nem no histórico do navegador)
    response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, private'
    response.headers['Pragma'] = 'no-cache'
    response.headers['Expires'] = '0'
    return response


@admin_bp.route('/', methods=['GET'])
@admin_bp.route('/dashboard', methods=['GET'])
@login_required
def dashboard():
    """Dashboard: produtos e totais de releases/features."""
    stats = ReleaseService(db.session).dashboard_stats()
    return render_template('admin/dashboard.html', stats=stats, admin=current_user)


@admin_bp.route('/releases/<string:product>', methods=['GET'])
@login_required
def product_releases(product: str):
    data = ReleaseService(db.session).list_releases(product)
    return render_template('admin/releases.html', product=data['product'], releases=data['releases'])


@admin_bp.route('/releases/<string:product>/new', methods=['GET'])
@login_required
def new_release(product: str):
    data = {'product': ReleaseService(db.session).get_product(product), 'release': None}
    return render_template('admin/release_form.html', **data)


@admin_bp.route('/releases/<string:product>/<string:version>', methods=['GET'])
@login_required
def edit_release(product: str, version: str):
    data = ReleaseService(db.session).get_release(product, version)
    return render_template('admin/release_form.html', product=data['product'], release=data['release'])
