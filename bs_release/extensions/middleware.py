import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import g, request
from flask_login import current_user

from bs_release.exceptions import Unauthorized
from bs_release.extensions.csrf import protect_request

logger = logging.getLogger(__name__)

class SessionMiddleware:
    """
    Log de cada requisição (DEBUG) com método, endpoint, IP e duração.
    """

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.before_request(self._start)
        app.after_request(self._finish)

    def _start(self):
        g.request_started = time.perf_counter()

    def _finish(self, response):
        started = g.pop("request_started", None)
        if started is not None:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.debug(
                f"{request.method} {request.path} -> {response.status_code} "
                f"({request.endpoint}, {request.remote_addr}, {elapsed_ms:.1f} ms)"
            )
        return response


def admin_api_required(f: Callable) -> Callable:
    """
    Protege rotas de escrita da API administrativa.

    Ordem das verificações: sessão autenticada (401) e depois token CSRF
    (403, via handler de CSRFError). Responde sempre em JSON.
    """
    @wraps(f)
    def decorated_function(*args: Any, **kwargs: Any):
        if not current_user.is_authenticated:
            logger.info(f"Unauthenticated admin call to {request.endpoint} from {request.remote_addr}")
            raise Unauthorized()
        protect_request()
        return f(*args, **kwargs)
    return decorated_function


def audit_log(action: str, resource_type: Optional[str] = None, resource_id: Optional[str] = None,
              details: Optional[Dict[str, Any]] = None) -> None:
    """
    Registra ações administrativas para auditoria.

    Args:
        action: Ação realizada (create, update, delete, upload)
        resource_type: Tipo do recurso (release, feature, image)
        resource_id: Identificador do recurso
        details: Detalhes adicionais da ação
    """
    log_data = {
        'user': current_user.get_id() if current_user.is_authenticated else None,
        'action': action,
        'resource_type': resource_type,
        'resource_id': resource_id,
        'ip_address': request.remote_addr,
        'endpoint': request.endpoint,
        'details': details or {},
    }
    logger.info(f"AUDIT: {action} {resource_type} {resource_id}", extra={"audit": log_data})


# Instância global do middleware
session_middleware = SessionMiddleware()
