"""
Testes de integração da API HTTP: leitura pública, escrita administrativa
e mapeamento de erros (400/401/403/404/409).
"""

import pytest

from bs_release.extensions import db
from bs_release.models import Feature, Release

JSON = {'Accept': 'application/json'}


def _create(client, product='marcom', version='2.1.0', date='2024-03-15', features=None):
    return client.post('/releases', json={
        'product': product,
        'version': version,
        'date': date,
        'features': features if features is not None else [],
    }, headers=JSON)


def _counts(app):
    with app.app_context():
        return db.session.query(Release).count(), db.session.query(Feature).count()


# ---------------------------------------------------------------------------
# Leitura pública
# ---------------------------------------------------------------------------

def test_products_list(client):
    response = client.get('/products')
    assert response.status_code == 200
    slugs = {p['slug'] for p in response.get_json()}
    assert slugs == {'marcom', 'collaborate', 'lam'}


def test_product_releases_unknown_product_is_404(client):
    response = client.get('/releases/unknown', headers=JSON)
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Product not found'


def test_release_detail_unknown_version_is_404(client):
    response = client.get('/releases/marcom/9.9.9', headers=JSON)
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Release not found'


def test_scenario_create_then_read_in_order(admin_client, client):
    response = _create(admin_client, features=[
        {'title': 'A', 'content': '<p>Feature A</p>'},
        {'title': 'B', 'content': '<p>Feature B</p>'},
    ])
    assert response.status_code == 201
    body = response.get_json()
    assert body['message'] == 'Release created successfully'
    assert isinstance(body['releaseId'], int)

    response = client.get('/releases/marcom/2.1.0', headers=JSON)
    assert response.status_code == 200
    release = response.get_json()['release']
    assert release['version'] == '2.1.0'
    assert release['release_date'] == '2024-03-15'
    assert [(f['title'], f['content']) for f in release['features']] == [
        ('A', '<p>Feature A</p>'), ('B', '<p>Feature B</p>'),
    ]


def test_release_with_zero_features_returns_empty_list(admin_client, client):
    assert _create(admin_client, product='lam', version='1.0.0').status_code == 201

    release = client.get('/releases/lam/1.0.0', headers=JSON).get_json()['release']
    assert release['features'] == []

    listing = client.get('/releases/lam?format=json').get_json()
    assert listing['product']['slug'] == 'lam'
    assert listing['releases'][0]['features'] == []


def test_releases_listing_newest_first(admin_client, client):
    _create(admin_client, version='1.0.0', date='2024-01-01')
    _create(admin_client, version='2.0.0', date='2024-02-01')

    releases = client.get('/releases/marcom', headers=JSON).get_json()['releases']
    assert [r['version'] for r in releases] == ['2.0.0', '1.0.0']


# ---------------------------------------------------------------------------
# Criação
# ---------------------------------------------------------------------------

def test_create_rejects_short_version(admin_client, app):
    response = _create(admin_client, version='1.0')
    assert response.status_code == 400
    body = response.get_json()
    assert body['code'] == 'VALIDATION_ERROR'
    assert 'version' in body['errors']
    assert _counts(app) == (0, 0)


@pytest.mark.parametrize('version', ['1.0.0\n', '١.0.0', '1' * 40 + '.0.0'])
def test_create_rejects_lookalike_versions(admin_client, app, version):
    assert _create(admin_client, version='1.0.0').status_code == 201

    response = _create(admin_client, version=version)
    assert response.status_code == 400
    assert 'version' in response.get_json()['errors']
    assert _counts(app) == (1, 0)


@pytest.mark.parametrize('version', ['%D9%A1.0.0', '1' * 40 + '.0.0'])
def test_path_versions_are_checked_strictly(admin_client, version):
    response = admin_client.put(f'/releases/marcom/{version}', json={'date': '2024-01-01'}, headers=JSON)
    assert response.status_code == 400
    assert 'version' in response.get_json()['errors']


def test_create_rejects_long_feature_title(admin_client, app):
    response = _create(admin_client, features=[{'title': 'x' * 256, 'content': '<p>x</p>'}])
    assert response.status_code == 400
    assert 'features' in response.get_json()['errors']
    assert _counts(app) == (0, 0)


@pytest.mark.parametrize('payload, field', [
    ({'product': 'marcom', 'version': '1.0.0', 'date': 'yesterday'}, 'date'),
    ({'product': 'marcom', 'version': '1.0.0'}, 'date'),
    ({'version': '1.0.0', 'date': '2024-01-01'}, 'product'),
    ({'product': 'Bad Slug!', 'version': '1.0.0', 'date': '2024-01-01'}, 'product'),
])
def test_create_validation_errors(admin_client, payload, field):
    response = admin_client.post('/releases', json=payload, headers=JSON)
    assert response.status_code == 400
    assert field in response.get_json()['errors']


def test_create_with_non_object_body_is_400(admin_client):
    response = admin_client.post('/releases', json=['not', 'an', 'object'], headers=JSON)
    assert response.status_code == 400


def test_create_unknown_product_is_404(admin_client, app):
    response = _create(admin_client, product='unknown')
    assert response.status_code == 404
    assert _counts(app) == (0, 0)


def test_duplicate_create_is_409_and_store_unchanged(admin_client, client, app):
    _create(admin_client, features=[{'title': 'Original'}])
    before = _counts(app)

    response = _create(admin_client, date='2025-01-01', features=[{'title': 'Duplicate'}])
    assert response.status_code == 409
    assert response.get_json()['error'] == 'Release with this version already exists'

    assert _counts(app) == before
    release = client.get('/releases/marcom/2.1.0', headers=JSON).get_json()['release']
    assert release['release_date'] == '2024-03-15'
    assert [f['title'] for f in release['features']] == ['Original']


# ---------------------------------------------------------------------------
# Atualização e remoção
# ---------------------------------------------------------------------------

def test_update_replaces_features_and_is_idempotent(admin_client, client):
    _create(admin_client, features=[{'title': 'Old'}])
    payload = {'date': '2024-04-01', 'features': [{'title': 'X'}, {'title': 'Y', 'content': '<p>y</p>'}]}

    first = admin_client.put('/releases/marcom/2.1.0', json=payload, headers=JSON)
    second = admin_client.put('/releases/marcom/2.1.0', json=payload, headers=JSON)
    assert first.status_code == second.status_code == 200
    assert second.get_json()['message'] == 'Release updated successfully'

    release = client.get('/releases/marcom/2.1.0', headers=JSON).get_json()['release']
    assert release['release_date'] == '2024-04-01'
    assert [(f['title'], f['content']) for f in release['features']] == [('X', None), ('Y', '<p>y</p>')]


def test_put_missing_release_is_404_and_creates_nothing(admin_client, app):
    response = admin_client.put('/releases/collaborate/9.9.9',
                                json={'date': '2024-01-01', 'features': [{'title': 'A'}]},
                                headers=JSON)
    assert response.status_code == 404
    assert _counts(app) == (0, 0)


def test_put_with_malformed_path_version_is_400(admin_client):
    response = admin_client.put('/releases/marcom/latest', json={'date': '2024-01-01'}, headers=JSON)
    assert response.status_code == 400


def test_delete_release_removes_features(admin_client, client, app):
    _create(admin_client, features=[{'title': 'A'}, {'title': 'B'}])

    response = admin_client.delete('/releases/marcom/2.1.0', headers=JSON)
    assert response.status_code == 200
    assert response.get_json()['message'] == 'Release deleted successfully'
    assert _counts(app) == (0, 0)
    assert client.get('/releases/marcom/2.1.0', headers=JSON).status_code == 404


def test_delete_missing_release_is_404(admin_client):
    assert admin_client.delete('/releases/marcom/1.2.3', headers=JSON).status_code == 404


# ---------------------------------------------------------------------------
# Features individuais
# ---------------------------------------------------------------------------

def test_feature_endpoints(admin_client, client):
    _create(admin_client, features=[{'title': 'A'}])

    response = admin_client.post('/releases/marcom/2.1.0/features',
                                 json={'title': 'B', 'content': '<p>b</p>'}, headers=JSON)
    assert response.status_code == 201
    feature_id = response.get_json()['id']

    response = admin_client.put(f'/releases/marcom/2.1.0/features/{feature_id}',
                                json={'title': 'B2'}, headers=JSON)
    assert response.status_code == 200
    assert response.get_json()['feature']['title'] == 'B2'

    titles = [f['title'] for f in client.get('/releases/marcom/2.1.0', headers=JSON).get_json()['release']['features']]
    assert titles == ['A', 'B2']

    response = admin_client.delete(f'/releases/marcom/2.1.0/features/{feature_id}', headers=JSON)
    assert response.status_code == 200
    assert admin_client.delete(f'/releases/marcom/2.1.0/features/{feature_id}', headers=JSON).status_code == 404


def test_feature_without_title_is_400(admin_client):
    _create(admin_client)
    response = admin_client.post('/releases/marcom/2.1.0/features', json={'content': '<p>x</p>'}, headers=JSON)
    assert response.status_code == 400
    assert 'title' in response.get_json()['errors']


def test_feature_on_missing_release_is_404(admin_client):
    response = admin_client.post('/releases/marcom/5.5.5/features', json={'title': 'A'}, headers=JSON)
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Autenticação e CSRF
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('method, url', [
    ('post', '/releases'),
    ('put', '/releases/marcom/1.0.0'),
    ('delete', '/releases/marcom/1.0.0'),
    ('post', '/releases/marcom/1.0.0/features'),
    ('put', '/releases/marcom/1.0.0/features/1'),
    ('delete', '/releases/marcom/1.0.0/features/1'),
    ('post', '/upload-image'),
])
def test_admin_writes_require_login(client, method, url):
    response = getattr(client, method)(url, json={}, headers=JSON)
    assert response.status_code == 401
    assert response.get_json()['code'] == 'UNAUTHORIZED'


def test_csrf_token_endpoint(client):
    response = client.get('/csrf-token')
    assert response.status_code == 200
    assert response.get_json()['csrfToken']


def test_write_without_csrf_token_is_403(app, admin_client):
    app.config['WTF_CSRF_ENABLED'] = True
    response = _create(admin_client)
    assert response.status_code == 403
    assert response.get_json()['error'] == 'Invalid CSRF token'
    assert _counts(app) == (0, 0)


def test_write_with_csrf_token_succeeds(app, admin_client):
    app.config['WTF_CSRF_ENABLED'] = True
    token = admin_client.get('/csrf-token').get_json()['csrfToken']

    response = admin_client.post('/releases', json={
        'product': 'marcom', 'version': '1.0.0', 'date': '2024-01-01',
    }, headers={**JSON, 'X-CSRFToken': token})
    assert response.status_code == 201


def test_unauthenticated_is_401_even_without_csrf(app, client):
    app.config['WTF_CSRF_ENABLED'] = True
    assert _create(client).status_code == 401


# ---------------------------------------------------------------------------
# Negociação de conteúdo e limites
# ---------------------------------------------------------------------------

def test_browser_gets_html_pages(admin_client, client):
    _create(admin_client, features=[{'title': 'Shiny', 'content': '<p>new</p>'}])

    response = client.get('/releases/marcom')
    assert response.status_code == 200
    assert response.mimetype == 'text/html'
    assert b'Shiny' in response.data

    response = client.get('/releases/marcom/2.1.0')
    assert response.status_code == 200
    assert b'<p>new</p>' in response.data


def test_browser_gets_html_error_page(client):
    response = client.get('/releases/unknown')
    assert response.status_code == 404
    assert response.mimetype == 'text/html'
    assert b'Product not found' in response.data


def test_xhr_gets_json(client):
    response = client.get('/releases/unknown', headers={'X-Requested-With': 'XMLHttpRequest'})
    assert response.status_code == 404
    assert response.is_json


def test_index_and_health(client):
    assert client.get('/').status_code == 200
    assert client.get('/health').get_json() == {'status': 'ok'}
    assert {p['slug'] for p in client.get('/?format=json').get_json()['products']} == {'marcom', 'collaborate', 'lam'}


def test_api_rate_limit_returns_429(app, admin_client):
    app.config.update(RATE_LIMIT_ENABLED=True, API_RATE_LIMIT_MAX=2)
    statuses = [admin_client.delete('/releases/marcom/1.0.0', headers=JSON).status_code for _ in range(3)]
    assert statuses == [404, 404, 429]


def test_store_failure_is_generic_500(app, client, monkeypatch):
    from bs_release.exceptions import StoreError
    from bs_release.services.release_service import ReleaseService

    def _broken(self, slug):
        raise StoreError('disk I/O error on releases')

    monkeypatch.setattr(ReleaseService, 'list_releases', _broken)
    response = client.get('/releases/marcom', headers=JSON)
    assert response.status_code == 500
    body = response.get_json()
    assert body['error'] == 'Internal server error'
    assert 'disk I/O' not in response.get_data(as_text=True)
