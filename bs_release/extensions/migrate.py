import logging
from pathlib import Path
from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

logger = logging.getLogger(__name__)

migrate: Migrate = Migrate()

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / 'migrations'


def init_migrate(app: Flask, db: SQLAlchemy) -> None:
    """Initializes Flask-Migrate.

    The migrations directory is resolved from the package location so the
    `flask db` commands work from any working directory.
    """
    try:
        migrate.init_app(app, db, directory=str(MIGRATIONS_DIR))
        logger.debug("Flask-Migrate initialized (directory=%s)", MIGRATIONS_DIR)
    except Exception as e:
        logger.error("Flask-Migrate initialization failed", exc_info=True)
        raise RuntimeError(f"Migrate initialization failed: {e}") from e
