# models/admin_user.py

import logging
from datetime import datetime
from typing import Optional

import bcrypt
from flask_login import UserMixin
from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bs_release.models.base_model import BaseModel

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Gera o hash bcrypt (string) de uma senha em texto claro."""
    if not isinstance(password, str) or not password:
        raise ValueError("Password must be a non-empty string.")
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Compara a senha com o hash armazenado; hashes malformados retornam False."""
    if not isinstance(password, str) or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        logger.error("Invalid password hash format detected.")
        return False


class AdminUser(BaseModel, UserMixin):
    """
    Administrador persistido no banco.

    Usado apenas quando CREDENTIAL_STORE='database'.
    """
    __tablename__ = 'admin_users'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    # Atributo de coluna sobrepõe UserMixin.is_active
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __init__(self, username: str, password: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.username = username
        if password:
            self.set_password(password)

    # ---------- Senha segura com bcrypt ----------
    def set_password(self, password: str) -> None:
        """Define a senha, hasheando-a com bcrypt."""
        self.password_hash = hash_password(password)

    def check_password(self, password: str) -> bool:
        """Verifica se a senha fornecida corresponde ao hash armazenado."""
        return verify_password(password, self.password_hash)

    def get_id(self) -> str:
        return f"db:{self.id}"

    def __repr__(self):
        return f"<AdminUser id={self.id} username={self.username}>"
