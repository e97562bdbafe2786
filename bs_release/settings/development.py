# settings/development.py

from .base import BaseConfig

class DevelopmentConfig(BaseConfig):
    """
    Desenvolvimento local: DEBUG ligado, logs em DEBUG e releases de exemplo
    no primeiro start. Sem senha configurada, o admin usa 'secret123'.
    """

    DEBUG: bool = True
    SQLALCHEMY_ECHO: bool = False
    LOG_LEVEL: str = 'DEBUG'

    SEED_SAMPLE_RELEASES: bool = True
    ADMIN_PASSWORD = BaseConfig.ADMIN_PASSWORD or 'secret123'
