"""
Credential stores for the admin login.

The application never hardcodes an admin account: `create_app` builds the
store selected by CREDENTIAL_STORE and registers it on the app, and
anything else (tests, an SSO bridge) can swap it with
`set_credential_store`.
"""

import hmac
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from flask import Flask
from flask_login import UserMixin
from sqlalchemy.orm import Session

from bs_release.extensions.db import db
from bs_release.models.admin_user import AdminUser, hash_password, verify_password
from bs_release.settings.base import ConfigError

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'credential_store'


class AdminIdentity(UserMixin):
    """Administrador configurado por variáveis de ambiente (sem linha no banco)."""

    def __init__(self, username: str):
        self.username = username

    def get_id(self) -> str:
        return f"static:{self.username}"

    def __repr__(self):
        return f"<AdminIdentity username={self.username}>"


class CredentialStore:
    """Interface: autenticação por usuário/senha e recarga pelo id de sessão."""

    def authenticate(self, username: str, password: str) -> Optional[UserMixin]:
        raise NotImplementedError

    def load_user(self, user_id: str) -> Optional[UserMixin]:
        raise NotImplementedError


class StaticCredentialStore(CredentialStore):
    def __init__(self, username: str, password_hash: Optional[str]):
        self.username = username
        self.password_hash = password_hash
        if not password_hash:
            logger.warning("No admin password configured; admin login is disabled.")

    @classmethod
    def from_config(cls, config) -> 'StaticCredentialStore':
        password_hash = config.get('ADMIN_PASSWORD_HASH')
        if not password_hash and config.get('ADMIN_PASSWORD'):
            password_hash = hash_password(config['ADMIN_PASSWORD'])
        return cls(config.get('ADMIN_USERNAME') or 'admin', password_hash)

    def authenticate(self, username: str, password: str) -> Optional[AdminIdentity]:
        same_user = hmac.compare_digest((username or '').encode('utf-8'), self.username.encode('utf-8'))
        # Sempre verifica o hash para não revelar usuários válidos pelo tempo de resposta
        password_ok = verify_password(password, self.password_hash)
        if same_user and password_ok:
            return AdminIdentity(self.username)
        return None

    def load_user(self, user_id: str) -> Optional[AdminIdentity]:
        if user_id == f"static:{self.username}":
            return AdminIdentity(self.username)
        return None


class DatabaseCredentialStore(CredentialStore):
    def __init__(self, session_factory: Callable[[], Session] = lambda: db.session):
        self._session_factory = session_factory

    @property
    def session(self) -> Session:
        return self._session_factory()

    def authenticate(self, username: str, password: str) -> Optional[AdminUser]:
        user = self.session.query(AdminUser).filter(AdminUser.username == username).one_or_none()
        if user is None or not user.is_active or not user.check_password(password):
            return None
        user.last_login_at = datetime.now(timezone.utc).replace(tzinfo=None)
        self.session.commit()
        return user

    def load_user(self, user_id: str) -> Optional[AdminUser]:
        if not user_id or not user_id.startswith('db:'):
            return None
        try:
            pk = int(user_id[3:])
        except ValueError:
            return None
        user = self.session.get(AdminUser, pk)
        return user if user is not None and user.is_active else None

    def ensure_default_admin(self, username: str, password: Optional[str] = None,
                             password_hash: Optional[str] = None) -> Optional[AdminUser]:
        """Cria o administrador inicial quando a tabela está vazia."""
        if self.session.query(AdminUser).count() > 0:
            return None
        if not (password or password_hash):
            logger.warning("admin_users is empty and no ADMIN_PASSWORD/ADMIN_PASSWORD_HASH is set.")
            return None
        user = AdminUser(username=username)
        user.password_hash = password_hash or hash_password(password)
        self.session.add(user)
        self.session.commit()
        logger.info(f"Default admin '{username}' created")
        return user

    def set_password(self, username: str, password: str) -> bool:
        user = self.session.query(AdminUser).filter(AdminUser.username == username).one_or_none()
        if user is None:
            return False
        user.set_password(password)
        self.session.commit()
        return True


def build_credential_store(app: Flask) -> CredentialStore:
    kind = (app.config.get('CREDENTIAL_STORE') or 'static').lower()
    if kind == 'static':
        return StaticCredentialStore.from_config(app.config)
    if kind == 'database':
        return DatabaseCredentialStore()
    raise ConfigError(f"Unknown CREDENTIAL_STORE {kind!r}")


def set_credential_store(app: Flask, store: CredentialStore) -> None:
    app.extensions[EXTENSION_KEY] = store


def get_credential_store(app: Flask) -> CredentialStore:
    return app.extensions[EXTENSION_KEY]
