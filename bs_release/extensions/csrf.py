import logging
from flask import Flask, current_app
from flask_wtf.csrf import CSRFProtect

logger = logging.getLogger(__name__)

csrf: CSRFProtect = CSRFProtect()


def init_csrf(app: Flask) -> None:
    """Initializes Flask-WTF CSRF protection.

    WTF_CSRF_CHECK_DEFAULT is off: forms validate their own token and the
    admin API calls `protect_request()` once the session is authenticated.
    """
    try:
        csrf.init_app(app)
        logger.debug("Flask-WTF CSRF protection initialized successfully.")
    except Exception as e:
        logger.error("Flask-WTF CSRF initialization failed.", exc_info=True)
        raise RuntimeError(f"CSRF initialization failed: {e}") from e


def protect_request() -> None:
    """Valida o token CSRF da requisição atual (levanta CSRFError se inválido)."""
    if not current_app.config.get('WTF_CSRF_ENABLED', True):
        return
    csrf.protect()
