"""
Ponto de entrada WSGI do BS-Release.

Em produção aponte o servidor WSGI para `wsgi:app`; `python wsgi.py` sobe o servidor do
Werkzeug (porta 3000 por padrão) para uso local.
"""

import os

from werkzeug.serving import run_simple

from bs_release.main_startup import create_app
from bs_release.settings.base import ConfigError, _as_bool, getenv_typed
from bs_release.utils.database_initializer import initialize_database

app = create_app(os.getenv("FLASK_ENV") or "development")
initialize_database(app)


def _server_options():
    try:
        port = getenv_typed("PORT", int, 3000)
    except ConfigError:
        port = 3000
    return {
        "hostname": os.getenv("BIND_HOST", "127.0.0.1"),
        "port": port,
        "use_reloader": getenv_typed("USE_RELOADER", _as_bool, False),
    }


if __name__ == "__main__":
    options = _server_options()
    app.logger.info(
        f"Serving release notes on http://{options['hostname']}:{options['port']}/"
    )
    run_simple(application=app, use_debugger=app.debug, **options)
