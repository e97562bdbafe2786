from sqlalchemy import Column, Integer, String, Date, ForeignKey, UniqueConstraint, Index

from bs_release.extensions.db import db
from bs_release.models.base_model import BaseModel

class Release(BaseModel):
    __tablename__ = 'releases'
    __table_args__ = (
        UniqueConstraint('product_id', 'version', name='uq_release_product_version'),
        Index('ix_release_product_date', 'product_id', 'release_date'),
    )

    product_id = Column(
        Integer,
        ForeignKey('products.id'),
        nullable=False,
        index=True
    )
    # Versão semântica "X.Y.Z" (validada na borda da API)
    version = Column(String(32), nullable=False)
    release_date = Column(Date, nullable=False)

    # Relationships
    product = db.relationship('Product', back_populates='releases')
    features = db.relationship(
        'Feature',
        back_populates='release',
        order_by='Feature.id',
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Release id={self.id} product_id={self.product_id} version={self.version}>"
