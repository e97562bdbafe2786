"""
Extensões Flask do BS-Release.

As instâncias são globais (importáveis pelos models e controllers) e ligadas
à aplicação por `init_extensions`, chamado pela factory.
"""

import logging
from flask import Flask

from .db import db, init_db
from .migrate import migrate, init_migrate
from .login import login_manager, init_login
from .csrf import csrf, init_csrf
from .middleware import session_middleware

logger = logging.getLogger(__name__)

__all__ = ['db', 'migrate', 'login_manager', 'csrf', 'session_middleware', 'init_extensions']


def init_extensions(app: Flask) -> None:
    """Liga banco, migrações, login, CSRF e o middleware de sessão à app."""
    init_db(app)
    init_migrate(app, db)
    # Login sempre ativo: a área admin e a API de escrita dependem dele
    init_login(app)
    init_csrf(app)
    session_middleware.init_app(app)
    logger.debug("Extensions initialized: db, migrate, login, csrf, session middleware")
