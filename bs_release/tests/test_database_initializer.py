"""Testes da inicialização idempotente do banco (catálogo e exemplos)."""

from bs_release.extensions import db
from bs_release.main_startup import create_app
from bs_release.models import Feature, Product, Release
from bs_release.settings.testing import TestingConfig
from bs_release.utils.database_initializer import (
    SAMPLE_RELEASES, initialize_database, seed_products, seed_sample_releases,
)


class SampleDataConfig(TestingConfig):
    SEED_SAMPLE_RELEASES = True


def test_seed_products_is_idempotent(app):
    with app.app_context():
        assert seed_products(app.config['PRODUCT_CATALOG']) == 0
        assert db.session.query(Product).count() == 3


def test_initialize_database_with_samples():
    app = create_app(config_class=SampleDataConfig)
    assert initialize_database(app)
    assert initialize_database(app)

    with app.app_context():
        assert db.session.query(Release).count() == len(SAMPLE_RELEASES)
        assert db.session.query(Feature).count() == sum(len(s['features']) for s in SAMPLE_RELEASES)

    response = app.test_client().get('/releases/marcom', headers={'Accept': 'application/json'})
    assert [r['version'] for r in response.get_json()['releases']] == ['2.1.0', '2.0.0']


def test_samples_for_unknown_products_are_skipped(app):
    with app.app_context():
        created = seed_sample_releases([
            {'product': 'ghost', 'version': '1.0.0', 'release_date': '2024-01-01', 'features': []},
        ])
        assert created == 0
        assert db.session.query(Release).count() == 0
