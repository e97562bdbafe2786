import logging
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

db: SQLAlchemy = SQLAlchemy()


@event.listens_for(Engine, "connect")
def _set_sqlite_pragmas(dbapi_connection, connection_record):
    """Liga as foreign keys (e ajustes de concorrência) em conexões SQLite."""
    module = type(dbapi_connection).__module__
    if not module.startswith('sqlite3'):
        return
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=5000")
    finally:
        cursor.close()


def init_db(app: Flask) -> None:
    """Initializes SQLAlchemy."""
    try:
        db.init_app(app)
        logger.debug("SQLAlchemy initialized (%s)", app.config.get('SQLALCHEMY_DATABASE_URI', '').split('://')[0])
    except Exception as e:
        logger.error("SQLAlchemy initialization failed", exc_info=True)
        raise RuntimeError(f"Database initialization failed: {e}") from e
