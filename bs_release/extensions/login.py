import logging
from flask import Flask, current_app, jsonify, redirect, request, url_for
from flask_login import LoginManager

from bs_release.utils.http import wants_json

logger = logging.getLogger(__name__)

login_manager: LoginManager = LoginManager()


def init_login(app: Flask) -> None:
    """
    Initializes the Flask-Login extension.

    Configures login view, session protection, and the user loader, which
    delegates to the credential store registered on the application.
    """
    try:
        login_manager.login_view = 'auth.login'
        login_manager.session_protection = 'strong'
        login_manager.login_message_category = 'warning'
        login_manager.login_message = 'Please log in to access the admin area.'
        login_manager.init_app(app)

        @login_manager.user_loader
        def load_user(user_id):
            """Load the admin identity for Flask-Login."""
            from bs_release.services.credential_store import get_credential_store
            return get_credential_store(current_app).load_user(user_id)

        logger.debug("Flask-Login initialized successfully.")
    except Exception as e:
        logger.error("Flask-Login initialization failed.", exc_info=True)
        raise RuntimeError(f"LoginManager initialization failed: {e}") from e

    @login_manager.unauthorized_handler
    def _unauthorized():
        if wants_json():
            return jsonify({'error': 'Unauthorized', 'message': 'Authentication required'}), 401
        return redirect(url_for(login_manager.login_view, next=request.full_path))
