#!/usr/bin/env python3
"""
Script principal de inicialização do BS-Release.
Cria a aplicação Flask e prepara o banco (tabelas + catálogo de produtos).
"""

import logging
import os
import sys
from datetime import date, datetime
from typing import Optional, Type

import click
from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

load_dotenv()

from bs_release.exceptions import register_error_handlers
from bs_release.extensions import db, init_extensions
from bs_release.services.credential_store import build_credential_store, set_credential_store
from bs_release.settings import config_map
from bs_release.settings.base import BaseConfig
from bs_release.settings.development import DevelopmentConfig
from bs_release.utils.database_initializer import initialize_database

logger = logging.getLogger(__name__)


def _select_config(env_name: Optional[str], config_class) -> Type[BaseConfig]:
    if config_class is None:
        env = (env_name or os.getenv('FLASK_ENV', 'development') or 'development').strip().lower()
        return config_map.get(env, DevelopmentConfig)
    if isinstance(config_class, str):
        return config_map.get(config_class.strip().lower(), BaseConfig)
    return config_class


def create_app(env_name: Optional[str] = None, config_class=None) -> Flask:
    """
    Factory para criar a aplicação Flask.
    """
    selected_config = _select_config(env_name, config_class)
    selected_config.validate()

    app = Flask('bs_release', instance_path=str(BaseConfig.INSTANCE_PATH))
    app.config.from_object(selected_config)
    selected_config.init_app(app)

    # Validar configurações críticas
    for config_key in ('SECRET_KEY', 'SQLALCHEMY_DATABASE_URI'):
        if not app.config.get(config_key):
            raise ValueError(f"Configuração obrigatória '{config_key}' não encontrada")

    proxies = int(app.config.get('PROXY_FIX_X_FOR') or 0)
    if proxies > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxies)

    init_extensions(app)
    set_credential_store(app, build_credential_store(app))
    register_error_handlers(app)

    # Registrar blueprints
    from bs_release.controllers.main_controller import main_bp
    from bs_release.controllers.release_api_controller import release_api_bp
    from bs_release.controllers.admin_controller import admin_bp
    from bs_release.controllers.auth_controller import auth_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(release_api_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(auth_bp)

    def _datetimeformat(value, fmt='%B %d, %Y'):
        if isinstance(value, (date, datetime)):
            return value.strftime(fmt)
        if isinstance(value, str):
            try:
                return date.fromisoformat(value[:10]).strftime(fmt)
            except ValueError:
                return value
        return value
    app.jinja_env.filters['datetimeformat'] = _datetimeformat

    @app.cli.command('init-db')
    @click.option('--with-samples', is_flag=True, help='Also insert the sample releases.')
    def init_db_command(with_samples: bool):
        """Create tables and seed the product catalog."""
        if with_samples:
            app.config['SEED_SAMPLE_RELEASES'] = True
        initialize_database(app)
        click.echo('Database initialized.')

    logger.debug(f"Application created with {selected_config.__name__}")
    return app


def main() -> bool:
    """
    Função principal de inicialização: cria a app e prepara o banco.
    """
    try:
        app = create_app()
        if not initialize_database(app):
            logger.error("Database initialization failed")
            return False
        with app.app_context():
            logger.info(f"Database ready at {db.engine.url.render_as_string(hide_password=True)}")
        logger.info("Run 'python wsgi.py' or 'flask --app bs_release run' to start the server")
        return True
    except Exception:
        logger.exception("Startup failed")
        return False


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
