from sqlalchemy import Column, Integer, String, Text, ForeignKey

from bs_release.extensions.db import db
from bs_release.models.base_model import BaseModel

class Feature(BaseModel):
    __tablename__ = 'features'

    release_id = Column(
        Integer,
        ForeignKey('releases.id'),
        nullable=False,
        index=True
    )
    title = Column(String(255), nullable=False)
    # HTML já sanitizado
    content = Column(Text, nullable=True)

    release = db.relationship('Release', back_populates='features')

    def to_dict(self, exclude: tuple = ('created_at', 'release_id')):
        return super().to_dict(exclude)

    def __repr__(self):
        return f"<Feature id={self.id} release_id={self.release_id} title={self.title!r}>"
