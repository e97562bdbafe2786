# utils/security.py

import logging
import threading
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Dict, Optional

from flask import abort, current_app, jsonify, request

logger = logging.getLogger(__name__)

class RateLimiter:
    """Rate limiting em memória (janela deslizante) por identificador."""

    def __init__(self):
        self.attempts = defaultdict(list)
        self.blocked = {}
        self._lock = threading.Lock()

    def is_rate_limited(self, identifier: str, max_attempts: int = 5, window_minutes: int = 15) -> bool:
        """Verifica se um identificador (escopo + IP) está limitado."""
        now = datetime.now(timezone.utc)
        with self._lock:
            # Verificar se está bloqueado
            until = self.blocked.get(identifier)
            if until is not None:
                if now < until:
                    return True
                del self.blocked[identifier]

            cutoff_time = now - timedelta(minutes=window_minutes)
            self._prune(identifier.split(':', 1)[0] + ':', cutoff_time, now)
            recent = [t for t in self.attempts.get(identifier, ()) if t > cutoff_time]
            if recent:
                self.attempts[identifier] = recent
            else:
                self.attempts.pop(identifier, None)

            if len(recent) >= max_attempts:
                # Bloqueia até o fim da janela
                self.blocked[identifier] = now + timedelta(minutes=window_minutes)
                logger.warning(f"Rate limit exceeded for {identifier}. Blocked for {window_minutes} minutes.")
                return True
        return False

    def _prune(self, prefix: str, cutoff_time: datetime, now: datetime):
        # Remove chaves do mesmo escopo sem tentativas na janela (chamar com o lock)
        for key in [k for k, times in self.attempts.items()
                    if k.startswith(prefix) and not any(t > cutoff_time for t in times)]:
            del self.attempts[key]
        for key in [k for k, until in self.blocked.items() if k.startswith(prefix) and until <= now]:
            del self.blocked[key]

    def tracked_keys(self) -> int:
        with self._lock:
            return len(set(self.attempts) | set(self.blocked))

    def record_attempt(self, identifier: str):
        """Registra uma tentativa (login) ou requisição (API)."""
        with self._lock:
            self.attempts[identifier].append(datetime.now(timezone.utc))

    def clear_attempts(self, identifier: str):
        """Limpa as tentativas de um identificador após login bem-sucedido."""
        with self._lock:
            self.attempts.pop(identifier, None)
            self.blocked.pop(identifier, None)

    def attempts_count(self, identifier: str) -> int:
        with self._lock:
            return len(self.attempts.get(identifier, []))

    def reset(self):
        with self._lock:
            self.attempts.clear()
            self.blocked.clear()

# Instância global do rate limiter
rate_limiter = RateLimiter()

def get_client_ip() -> str:
    """
    IP do cliente usado nas chaves de rate limit.

    Só `remote_addr`; X-Forwarded-For do cliente é ignorado. Atrás de proxy,
    PROXY_FIX_X_FOR liga o ProxyFix na factory.
    """
    return request.remote_addr or 'unknown'

def rate_limit_key(scope: str, client_ip: Optional[str] = None) -> str:
    return f"{scope}:{client_ip or get_client_ip()}"

def log_security_event(event_type: str, username: Optional[str] = None, details: Optional[Dict] = None):
    """Registra eventos de segurança para auditoria."""
    log_data = {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'event_type': event_type,
        'client_ip': get_client_ip(),
        'user_agent': request.headers.get('User-Agent', 'Unknown'),
        'request_method': request.method,
        'request_endpoint': request.endpoint,
        'username': username,
        'details': details or {},
    }

    if event_type in ('login_failed', 'rate_limit_exceeded', 'csrf_failed'):
        logger.warning(f"Security Event: {event_type}", extra={'security': log_data})
    elif event_type in ('login_success', 'logout'):
        logger.info(f"Security Event: {event_type}", extra={'security': log_data})
    else:
        logger.debug(f"Security Event: {event_type}", extra={'security': log_data})

def require_rate_limit(scope: str = 'login', config_prefix: Optional[str] = None,
                       max_attempts: int = 5, window_minutes: int = 15,
                       count_requests: bool = False):
    """
    Decorador para aplicar rate limiting a rotas.

    Limites vêm de `<config_prefix>_MAX` / `<config_prefix>_WINDOW_MINUTES`
    quando definidos. Com count_requests=True toda requisição conta; caso
    contrário a rota registra as próprias tentativas (ex.: login).
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_app.config.get('RATE_LIMIT_ENABLED', True):
                return f(*args, **kwargs)

            limit, window = max_attempts, window_minutes
            if config_prefix:
                limit = int(current_app.config.get(f'{config_prefix}_MAX', limit))
                window = int(current_app.config.get(f'{config_prefix}_WINDOW_MINUTES', window))

            key = rate_limit_key(scope)
            if rate_limiter.is_rate_limited(key, limit, window):
                log_security_event('rate_limit_exceeded', details={
                    'scope': scope,
                    'max_attempts': limit,
                    'window_minutes': window
                })
                from bs_release.utils.http import wants_json
                if wants_json():
                    response = jsonify({
                        'error': 'Too many requests, please try again later.',
                        'retry_after': window * 60
                    })
                    response.status_code = 429
                    response.headers['Retry-After'] = str(window * 60)
                    return response
                abort(429)

            if count_requests:
                rate_limiter.record_attempt(key)
            return f(*args, **kwargs)
        return decorated_function
    return decorator

def sanitize_input(value: str, max_length: int = 255) -> str:
    """Remove caracteres de controle e limita o tamanho (após o strip)."""
    if not isinstance(value, str):
        return ''
    printable = ''.join(ch for ch in value if ch in '\t\n\r' or ord(ch) >= 32)
    return printable.strip()[:max_length]
