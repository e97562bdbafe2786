"""Registra todos os modelos no metadata do SQLAlchemy."""

from .base_model import BaseModel
from .product import Product
from .release import Release
from .feature import Feature
from .admin_user import AdminUser

__all__ = ['BaseModel', 'Product', 'Release', 'Feature', 'AdminUser']
