"""
BS-Release - domain exceptions and application-wide error handlers.

Services and the data layer raise these; the handlers registered by
`register_error_handlers` turn them into JSON bodies for API/XHR callers
and into the error page for browser navigation.
"""
import logging
from typing import Any, Dict, Optional

from flask import jsonify, render_template
from flask_wtf.csrf import CSRFError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ReleaseNotesError(Exception):
    """Base exception for BS-Release"""
    status_code = 500
    code = "ERROR"
    default_message = "Unexpected error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'error': self.message, 'code': self.code}
        if self.details:
            data.update(self.details)
        return data


class ValidationError(ReleaseNotesError):
    """Malformed input (bad version, date, empty title, unknown slug)."""
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, Any]] = None):
        super().__init__(message, {'errors': errors} if errors else None)
        self.errors = errors or {}


class NotFound(ReleaseNotesError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class Conflict(ReleaseNotesError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource already exists"


class Unauthorized(ReleaseNotesError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class Forbidden(ReleaseNotesError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class StoreError(ReleaseNotesError):
    """Underlying store failure. The client only ever sees a generic message."""
    status_code = 500
    code = "STORE_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        return {'error': self.default_message, 'code': self.code}


class ConstraintViolation(StoreError):
    """Unique or foreign-key constraint rejected a write."""
    code = "CONSTRAINT_VIOLATION"


def _error_response(status: int, payload: Dict[str, Any]):
    from bs_release.utils.http import wants_json

    if wants_json():
        return jsonify(payload), status
    return render_template(
        'error.html',
        error_code=status,
        error_message=payload.get('error'),
        errors=payload.get('errors'),
        details=payload.get('details'),
    ), status


def register_error_handlers(app) -> None:
    """Register exception handlers with Flask app"""

    @app.errorhandler(StoreError)
    def handle_store_error(e: StoreError):
        logger.error(f"Store error: {e.message}", exc_info=e.cause or e)
        payload = e.to_dict()
        if app.debug:
            payload['details'] = str(e.cause or e.message)
        return _error_response(e.status_code, payload)

    @app.errorhandler(ReleaseNotesError)
    def handle_release_notes_error(e: ReleaseNotesError):
        if e.status_code >= 500:
            logger.error(f"{e.code}: {e.message}")
        else:
            logger.info(f"{e.code}: {e.message}")
        return _error_response(e.status_code, e.to_dict())

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e: CSRFError):
        from bs_release.utils.security import log_security_event

        log_security_event('csrf_failed', details={'reason': e.description})
        return _error_response(403, {'error': 'Invalid CSRF token', 'code': Forbidden.code})

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(e: SQLAlchemyError):
        logger.error("Database error", exc_info=e)
        payload: Dict[str, Any] = {'error': StoreError.default_message, 'code': StoreError.code}
        if app.debug:
            payload['details'] = str(getattr(e, 'orig', e))
        return _error_response(500, payload)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        if e.code and e.code >= 500:
            logger.error(f"HTTP {e.code}: {e.description}")
        return _error_response(e.code or 500, {
            'error': e.name,
            'code': e.name.upper().replace(' ', '_'),
            'message': e.description,
        })

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.exception(f"Unhandled exception: {e}")
        payload: Dict[str, Any] = {'error': 'Internal server error', 'code': 'INTERNAL_ERROR'}
        if app.debug:
            payload['details'] = str(e)
        return _error_response(500, payload)
