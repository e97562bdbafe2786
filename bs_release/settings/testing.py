# settings/testing.py

import logging
from .base import BaseConfig

class TestingConfig(BaseConfig):
    """
    Configurações específicas para o ambiente de Teste.
    Ativa TESTING.
    Desativa CSRF (os testes do gate de CSRF religam explicitamente).
    Usa SQLite em memória e credenciais fixas.
    """
    DEBUG = False
    TESTING = True
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = 'ERROR'

    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    CREDENTIAL_STORE = 'static'
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'secret123'
    ADMIN_PASSWORD_HASH = None

    SEED_SAMPLE_RELEASES = False
    RATE_LIMIT_ENABLED = False

    @classmethod
    def init_app(cls, app):
        # Em testes, nenhum handler de arquivo: apenas o nível
        app.logger.setLevel(getattr(logging, cls.LOG_LEVEL))
        logging.getLogger('bs_release').setLevel(getattr(logging, cls.LOG_LEVEL))
