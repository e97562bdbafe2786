"""Testes do upload de imagens (rota e UploadService)."""

import io
import re

import pytest
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import RequestEntityTooLarge

from bs_release.exceptions import ValidationError
from bs_release.services import UploadService

JSON = {'Accept': 'application/json'}
PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64


def _post_image(client, payload=PNG_BYTES, filename='shot.png', content_type='image/png'):
    return client.post(
        '/upload-image',
        data={'image': (io.BytesIO(payload), filename, content_type)},
        content_type='multipart/form-data',
        headers=JSON,
    )


def test_upload_stores_file_and_serves_it(admin_client, client, app):
    response = _post_image(admin_client)
    assert response.status_code == 200

    url = response.get_json()['url']
    assert re.match(r'^/uploads/\d+-\d+\.png$', url)
    stored = app.config['UPLOAD_FOLDER'] / url.rsplit('/', 1)[1]
    assert stored.read_bytes() == PNG_BYTES

    served = client.get(url)
    assert served.status_code == 200
    assert served.data == PNG_BYTES


def test_upload_rejects_non_images(admin_client, app):
    response = _post_image(admin_client, payload=b'hello', filename='notes.txt', content_type='text/plain')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Only image files are allowed'
    assert not app.config['UPLOAD_FOLDER'].exists() or not any(app.config['UPLOAD_FOLDER'].iterdir())


def test_upload_without_file_is_400(admin_client):
    response = admin_client.post('/upload-image', data={}, content_type='multipart/form-data', headers=JSON)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'No file uploaded'


def test_upload_over_limit_is_413(admin_client):
    payload = b'\x00' * (5 * 1024 * 1024 + 1)
    response = _post_image(admin_client, payload=payload)
    assert response.status_code == 413


def test_upload_requires_login(client):
    assert _post_image(client).status_code == 401


def test_service_rejects_oversized_stream(tmp_path):
    service = UploadService(tmp_path, ['image/png'], max_bytes=10)
    file = FileStorage(stream=io.BytesIO(b'x' * 20), filename='big.png', content_type='image/png')

    with pytest.raises(RequestEntityTooLarge):
        service.save_image(file)
    assert list(tmp_path.iterdir()) == []


def test_service_uses_extension_for_mimetype(tmp_path):
    service = UploadService(tmp_path, ['image/jpeg'], max_bytes=None)
    # nome sem extensão: a extensão vem do tipo
    file = FileStorage(stream=io.BytesIO(b'jpeg-data'), filename='clipboard', content_type='image/jpeg')

    filename = service.save_image(file)
    assert filename.endswith('.jpg')
    assert (tmp_path / filename).read_bytes() == b'jpeg-data'


def test_service_requires_a_file(tmp_path):
    service = UploadService(tmp_path, ['image/png'], max_bytes=None)
    with pytest.raises(ValidationError):
        service.save_image(None)
