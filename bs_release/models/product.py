from sqlalchemy import Column, String, Text

from bs_release.extensions.db import db
from bs_release.models.base_model import BaseModel

class Product(BaseModel):
    """Produto do catálogo. Dados semente: não há escrita pela API."""
    __tablename__ = 'products'

    slug = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Relationships
    releases = db.relationship(
        'Release',
        back_populates='product',
        lazy='dynamic',
        passive_deletes=True,
    )

    def to_dict(self, exclude: tuple = ('created_at',)):
        return super().to_dict(exclude)

    def __repr__(self):
        return f"<Product id={self.id} slug={self.slug}>"
