# tests/conftest.py

import pytest

from bs_release.extensions import db
from bs_release.main_startup import create_app
from bs_release.settings.testing import TestingConfig
from bs_release.utils.database_initializer import seed_products
from bs_release.utils.security import rate_limiter


@pytest.fixture
def app(tmp_path):
    """Aplicação de teste com banco em memória e catálogo semeado."""
    app = create_app(config_class=TestingConfig)
    app.config['UPLOAD_FOLDER'] = tmp_path / 'uploads'
    with app.app_context():
        db.drop_all()
        db.create_all()
        seed_products(app.config['PRODUCT_CATALOG'])
    # Sem app context ativo: cada requisição do client abre o seu (g e sessão limpos)
    yield app
    rate_limiter.reset()


@pytest.fixture
def session(app):
    """Sessão do banco dentro de um app context (testes de repositório/serviço)."""
    with app.app_context():
        yield db.session
        db.session.rollback()


@pytest.fixture
def client(app):
    """Fixture para cliente de teste (sem login)."""
    return app.test_client()


@pytest.fixture
def admin_client(app):
    """Cliente autenticado como administrador."""
    client = app.test_client()
    response = client.post('/admin/login', data={'username': 'admin', 'password': 'secret123'})
    assert response.status_code == 302
    return client


def pytest_configure(config):
    """Configuração do pytest."""
    import warnings
    warnings.filterwarnings("ignore", category=DeprecationWarning)
    warnings.filterwarnings("ignore", category=PendingDeprecationWarning)
