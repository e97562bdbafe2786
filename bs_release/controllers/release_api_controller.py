# controllers/release_api_controller.py

"""
Admin write API for releases, features and images.

Every mutating route requires an authenticated admin session (401) and a
valid CSRF token (403), and is rate limited per client IP (429).
"""

import logging
import re

from flask import Blueprint, current_app, jsonify, request, url_for
from flask_wtf.csrf import generate_csrf

from bs_release.exceptions import ValidationError
from bs_release.extensions import db
from bs_release.extensions.middleware import admin_api_required, audit_log
from bs_release.schemas.release_schema import (
    VERSION_MAX_LENGTH, VERSION_PATTERN, FeatureSchema, ReleaseCreateSchema, ReleaseUpdateSchema,
    load_or_raise,
)
from bs_release.services.release_service import ReleaseService
from bs_release.services.upload_service import UploadService
from bs_release.utils.security import require_rate_limit

logger = logging.getLogger(__name__)

release_api_bp = Blueprint('release_api', __name__)

_VERSION_RE = re.compile(VERSION_PATTERN)


def api_rate_limit(f):
    return require_rate_limit(scope='api', config_prefix='API_RATE_LIMIT',
                              max_attempts=100, window_minutes=15, count_requests=True)(f)


def _service() -> ReleaseService:
    return ReleaseService(db.session)


def _check_version(version: str) -> None:
    if len(version or '') > VERSION_MAX_LENGTH or not _VERSION_RE.match(version or ''):
        raise ValidationError('Validation failed', errors={'version': ['Invalid version format']})


@release_api_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    """Token CSRF da sessão atual, para chamadas fetch/XHR do editor."""
    return jsonify({'csrfToken': generate_csrf()})


@release_api_bp.route('/releases', methods=['POST'])
@admin_api_required
@api_rate_limit
def create_release():
    data = load_or_raise(ReleaseCreateSchema(), request.get_json(silent=True))
    release_id = _service().create_release(
        data['product'], data['version'], data['release_date'], data['features']
    )
    audit_log('create', 'release', f"{data['product']}/{data['version']}", {'release_id': release_id})
    return jsonify({'message': 'Release created successfully', 'releaseId': release_id}), 201


@release_api_bp.route('/releases/<string:product>/<string:version>', methods=['PUT'])
@admin_api_required
@api_rate_limit
def update_release(product: str, version: str):
    _check_version(version)
    data = load_or_raise(ReleaseUpdateSchema(), request.get_json(silent=True))
    release = _service().update_release(product, version, data['release_date'], data['features'])
    audit_log('update', 'release', f"{product}/{version}", {'features': len(release['release']['features'])})
    return jsonify({'message': 'Release updated successfully', **release})


@release_api_bp.route('/releases/<string:product>/<string:version>', methods=['DELETE'])
@admin_api_required
@api_rate_limit
def delete_release(product: str, version: str):
    _check_version(version)
    _service().delete_release(product, version)
    audit_log('delete', 'release', f"{product}/{version}")
    return jsonify({'message': 'Release deleted successfully'})


@release_api_bp.route('/releases/<string:product>/<string:version>/features', methods=['POST'])
@admin_api_required
@api_rate_limit
def create_feature(product: str, version: str):
    _check_version(version)
    data = load_or_raise(FeatureSchema(), request.get_json(silent=True))
    feature_id = _service().add_feature(product, version, data['title'], data.get('content'))
    audit_log('create', 'feature', str(feature_id), {'release': f"{product}/{version}"})
    return jsonify({'message': 'Feature created successfully', 'id': feature_id}), 201


@release_api_bp.route('/releases/<string:product>/<string:version>/features/<int:feature_id>', methods=['PUT'])
@admin_api_required
@api_rate_limit
def update_feature(product: str, version: str, feature_id: int):
    _check_version(version)
    data = load_or_raise(FeatureSchema(), request.get_json(silent=True))
    feature = _service().update_feature(product, version, feature_id, data['title'], data.get('content'))
    audit_log('update', 'feature', str(feature_id), {'release': f"{product}/{version}"})
    return jsonify({'message': 'Feature updated successfully', 'feature': feature})


@release_api_bp.route('/releases/<string:product>/<string:version>/features/<int:feature_id>', methods=['DELETE'])
@admin_api_required
@api_rate_limit
def delete_feature(product: str, version: str, feature_id: int):
    _check_version(version)
    _service().delete_feature(product, version, feature_id)
    audit_log('delete', 'feature', str(feature_id), {'release': f"{product}/{version}"})
    return jsonify({'message': 'Feature deleted successfully'})


@release_api_bp.route('/upload-image', methods=['POST'])
@admin_api_required
@api_rate_limit
def upload_image():
    filename = UploadService.from_config(current_app.config).save_image(request.files.get('image'))
    audit_log('upload', 'image', filename)
    return jsonify({'url': url_for('main.uploaded_file', filename=filename)})
