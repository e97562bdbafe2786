# base_model.py

import logging
from datetime import date, datetime
from typing import Any, Dict, TypeVar

from bs_release.extensions.db import db

logger = logging.getLogger(__name__)
T = TypeVar('T', bound='BaseModel')

class BaseModel(db.Model):
    """
    Base abstrata: chave primária, data de criação e serialização simples.
    Nada aqui faz commit; as transações são do ReleaseRepository.
    """
    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        nullable=False,
        doc='Data de criação'
    )

    def update(self: T, **kwargs: Any) -> T:
        """Atribui os campos informados; chaves desconhecidas só geram warning."""
        for key, value in kwargs.items():
            if not hasattr(self, key):
                logger.warning(f"{type(self).__name__} has no attribute '{key}'")
                continue
            setattr(self, key, value)
        return self

    def to_dict(self, exclude: tuple = ()) -> Dict[str, Any]:
        """Colunas em dict; date/datetime viram ISO 8601."""
        data: Dict[str, Any] = {}
        for column in self.__table__.columns:
            if column.name in exclude:
                continue
            value = getattr(self, column.name)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            data[column.name] = value
        return data
