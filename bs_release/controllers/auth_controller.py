# controllers/auth_controller.py

import logging
from urllib.parse import urlparse

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_user, logout_user

from bs_release.extensions.csrf import protect_request
from bs_release.forms.auth_form import LoginForm
from bs_release.services.credential_store import get_credential_store
from bs_release.utils.security import (
    get_client_ip, log_security_event, rate_limit_key, rate_limiter,
    require_rate_limit, sanitize_input,
)

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/admin')


def _safe_next(next_page):
    """Só aceita redirecionamentos para o próprio host."""
    if next_page and urlparse(next_page).netloc in ('', urlparse(request.host_url).netloc):
        return next_page
    return url_for('admin.dashboard')


@auth_bp.route('/login', methods=['GET', 'POST'])
@require_rate_limit(scope='login', config_prefix='LOGIN_RATE_LIMIT', max_attempts=5, window_minutes=15)
def login():
    """Rota de login do administrador."""
    if current_user.is_authenticated:
        return redirect(url_for('admin.dashboard'))

    form = LoginForm()
    if form.validate_on_submit():
        key = rate_limit_key('login', get_client_ip())
        username = sanitize_input(form.username.data, max_length=50)

        # Cada submissão conta; login bem-sucedido zera o contador
        if current_app.config.get('RATE_LIMIT_ENABLED', True):
            rate_limiter.record_attempt(key)

        user = get_credential_store(current_app).authenticate(username, form.password.data)
        if user is not None:
            rate_limiter.clear_attempts(key)
            login_user(user, remember=form.remember_me.data)
            log_security_event('login_success', username=username)
            return redirect(_safe_next(request.args.get('next')))

        log_security_event('login_failed', username=username, details={
            'attempts': rate_limiter.attempts_count(key),
        })
        flash('Invalid credentials', 'danger')
        return render_template('admin/login.html', form=form), 401

    if request.method == 'POST':
        for field, errors in form.errors.items():
            for error in errors:
                flash(error, 'danger')
        return render_template('admin/login.html', form=form), 400

    return render_template('admin/login.html', form=form)


@auth_bp.route('/logout', methods=['POST'])  # A rota logout DEVE ser POST por segurança
def logout():
    """Rota de logout do administrador."""
    protect_request()
    if current_user.is_authenticated:
        username = getattr(current_user, 'username', None)
        logout_user()
        log_security_event('logout', username=username)
    return redirect(url_for('auth.login'))
