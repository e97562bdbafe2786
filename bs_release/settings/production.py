# settings/production.py

import os
from .base import BaseConfig, ConfigError, getenv_typed, _as_bool

class ProductionConfig(BaseConfig):
    """
    Produção: sem DEBUG (500 sem detalhes), cookies seguros e pool de conexões.
    SECRET_KEY e a senha do admin precisam vir do ambiente.
    """
    DEBUG = False
    SESSION_COOKIE_SECURE = getenv_typed('SESSION_COOKIE_SECURE', _as_bool, True)
    REMEMBER_COOKIE_SECURE = SESSION_COOKIE_SECURE

    # Só faz sentido para PostgreSQL/MySQL (DATABASE_URL)
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': getenv_typed('DB_POOL_SIZE', int, 10),
        'max_overflow': getenv_typed('DB_MAX_OVERFLOW', int, 20),
        'pool_recycle': getenv_typed('DB_POOL_RECYCLE', int, 3600),
        'pool_pre_ping': True,
    }

    @classmethod
    def validate(cls) -> None:
        super().validate()
        missing = []
        if not os.getenv('SECRET_KEY'):
            missing.append('SECRET_KEY')
        if cls.CREDENTIAL_STORE == 'static' and not (os.getenv('ADMIN_PASSWORD_HASH') or os.getenv('ADMIN_PASSWORD')):
            missing.append('ADMIN_PASSWORD_HASH (or ADMIN_PASSWORD)')
        if missing:
            raise ConfigError(f"Production requires: {', '.join(missing)}")
