"""
Data access for products, releases and features.

Every multi-statement write runs inside `ReleaseRepository.transaction()`;
SQLAlchemy failures leave this module as `StoreError` (or
`ConstraintViolation` for unique/foreign-key rejections) after rollback.
"""

import logging
from collections import OrderedDict
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bs_release.exceptions import ConstraintViolation, StoreError
from bs_release.models.feature import Feature
from bs_release.models.product import Product
from bs_release.models.release import Release

logger = logging.getLogger(__name__)


def version_key(version: str) -> Tuple[int, ...]:
    """Chave numérica de ordenação para "X.Y.Z" (10.0.0 > 9.9.9)."""
    try:
        return tuple(int(part) for part in version.split('.'))
    except (AttributeError, ValueError):
        return ()


def _release_sort_key(release: Dict[str, Any]) -> Tuple[date, Tuple[int, ...]]:
    return (release['release_date'], version_key(release['version']))


class ReleaseRepository:
    """Repositório de releases sobre uma sessão SQLAlchemy."""

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    # ------------------------------------------------------------------
    # Transações
    # ------------------------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Explicit transaction boundary.

        The outermost block commits on success and rolls back on any error;
        nested blocks join it. SQLAlchemy errors are re-raised as store errors.
        """
        outermost = self._depth == 0
        self._depth += 1
        try:
            yield self.session
            if outermost:
                self.session.commit()
        except IntegrityError as e:
            if outermost:
                self.session.rollback()
            logger.warning(f"Constraint violation: {getattr(e, 'orig', e)}")
            raise ConstraintViolation(str(getattr(e, 'orig', e)), cause=e) from e
        except SQLAlchemyError as e:
            if outermost:
                self.session.rollback()
            logger.error("Store error inside transaction", exc_info=True)
            raise StoreError(str(getattr(e, 'orig', e)), cause=e) from e
        except Exception:
            if outermost:
                self.session.rollback()
            raise
        finally:
            self._depth -= 1

    @contextmanager
    def _reading(self) -> Iterator[Session]:
        try:
            yield self.session
        except SQLAlchemyError as e:
            logger.error("Store error while reading", exc_info=True)
            raise StoreError(str(getattr(e, 'orig', e)), cause=e) from e

    # ------------------------------------------------------------------
    # Produtos (somente leitura)
    # ------------------------------------------------------------------
    def find_product_by_slug(self, slug: str) -> Optional[Product]:
        with self._reading() as s:
            return s.query(Product).filter(Product.slug == slug).one_or_none()

    def list_products(self) -> List[Product]:
        with self._reading() as s:
            return s.query(Product).order_by(Product.name.asc()).all()

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------
    def _grouped_releases(self, product_id: int, version: Optional[str] = None,
                          with_features: bool = True) -> List[Dict[str, Any]]:
        """
        Uma única consulta LEFT OUTER JOIN release/feature, agrupada por
        release id em objetos aninhados. Releases sem features ficam com [].
        """
        with self._reading() as s:
            if with_features:
                query = (
                    s.query(
                        Release.id, Release.version, Release.release_date,
                        Feature.id, Feature.title, Feature.content,
                    )
                    .outerjoin(Feature, Feature.release_id == Release.id)
                )
            else:
                query = s.query(Release.id, Release.version, Release.release_date)
            query = query.filter(Release.product_id == product_id)
            if version is not None:
                query = query.filter(Release.version == version)
            order = [Release.id.asc()]
            if with_features:
                order.append(Feature.id.asc())
            rows = query.order_by(*order).all()

        grouped: "OrderedDict[int, Dict[str, Any]]" = OrderedDict()
        for row in rows:
            release_id, release_version, release_date = row[0], row[1], row[2]
            release = grouped.get(release_id)
            if release is None:
                release = {
                    'id': release_id,
                    'version': release_version,
                    'release_date': release_date,
                    'features': [],
                }
                grouped[release_id] = release
            if with_features and row[3] is not None:
                release['features'].append({
                    'id': row[3],
                    'title': row[4],
                    'content': row[5],
                })
        return sorted(grouped.values(), key=_release_sort_key, reverse=True)

    def list_releases_for_product(self, product_id: int, with_features: bool = True) -> List[Dict[str, Any]]:
        """Releases do produto, mais recentes primeiro (data desc, versão desc)."""
        return self._grouped_releases(product_id, with_features=with_features)

    def get_release_with_features(self, product_id: int, version: str) -> Optional[Dict[str, Any]]:
        releases = self._grouped_releases(product_id, version=version)
        return releases[0] if releases else None

    def find_release(self, product_id: int, version: str) -> Optional[Release]:
        with self._reading() as s:
            return (
                s.query(Release)
                .filter(Release.product_id == product_id, Release.version == version)
                .one_or_none()
            )

    def find_release_by_slug(self, slug: str, version: str) -> Optional[Tuple[Product, Release]]:
        with self._reading() as s:
            row = (
                s.query(Product, Release)
                .join(Release, Release.product_id == Product.id)
                .filter(Product.slug == slug, Release.version == version)
                .one_or_none()
            )
        return (row[0], row[1]) if row else None

    def insert_release(self, product_id: int, version: str, release_date: date) -> int:
        """Insere a release e retorna o id gerado (ConstraintViolation se duplicada)."""
        with self.transaction() as s:
            release = Release(product_id=product_id, version=version, release_date=release_date)
            s.add(release)
            s.flush()
            logger.debug(f"Inserted release {release.id} ({product_id}, {version})")
            return release.id

    def update_release_date(self, release_id: int, release_date: date) -> None:
        with self.transaction() as s:
            s.query(Release).filter(Release.id == release_id).update(
                {Release.release_date: release_date}, synchronize_session='fetch'
            )

    def delete_release(self, release_id: int) -> bool:
        """Remove as features e depois a release, na mesma transação."""
        with self.transaction() as s:
            removed_features = (
                s.query(Feature)
                .filter(Feature.release_id == release_id)
                .delete(synchronize_session='fetch')
            )
            removed = (
                s.query(Release)
                .filter(Release.id == release_id)
                .delete(synchronize_session='fetch')
            )
        logger.debug(f"Deleted release {release_id} with {removed_features} features")
        return removed > 0

    # ------------------------------------------------------------------
    # Features
    # ------------------------------------------------------------------
    def list_features(self, release_id: int) -> List[Feature]:
        with self._reading() as s:
            return (
                s.query(Feature)
                .filter(Feature.release_id == release_id)
                .order_by(Feature.id.asc())
                .all()
            )

    def find_feature(self, release_id: int, feature_id: int) -> Optional[Feature]:
        with self._reading() as s:
            return (
                s.query(Feature)
                .filter(Feature.id == feature_id, Feature.release_id == release_id)
                .one_or_none()
            )

    def insert_feature(self, release_id: int, title: str, content: Optional[str]) -> int:
        with self.transaction() as s:
            feature = Feature(release_id=release_id, title=title, content=content)
            s.add(feature)
            s.flush()
            return feature.id

    def update_feature(self, feature: Feature, title: str, content: Optional[str]) -> None:
        with self.transaction():
            feature.update(title=title, content=content)

    def delete_feature(self, feature: Feature) -> None:
        with self.transaction() as s:
            s.delete(feature)

    def replace_features(self, release_id: int, features: Iterable[Dict[str, Any]]) -> List[int]:
        """
        Substitui o conjunto de features da release (delete + insert).
        Tudo ou nada: qualquer falha desfaz também a remoção.
        """
        with self.transaction() as s:
            s.query(Feature).filter(Feature.release_id == release_id).delete(synchronize_session='fetch')
            new_ids = [
                self.insert_feature(release_id, item['title'], item.get('content'))
                for item in features
            ]
        return new_ids

    # ------------------------------------------------------------------
    # Agregados (página inicial e dashboard)
    # ------------------------------------------------------------------
    def latest_release_per_product(self) -> Dict[int, Dict[str, Any]]:
        with self._reading() as s:
            rows = s.query(Release.product_id, Release.version, Release.release_date).all()
        latest: Dict[int, Dict[str, Any]] = {}
        for product_id, version, release_date in rows:
            candidate = {'version': version, 'release_date': release_date}
            current = latest.get(product_id)
            if current is None or _release_sort_key(candidate) > _release_sort_key(current):
                latest[product_id] = candidate
        return latest

    def count_releases(self) -> int:
        with self._reading() as s:
            return s.query(func.count(Release.id)).scalar() or 0

    def count_features(self) -> int:
        with self._reading() as s:
            return s.query(func.count(Feature.id)).scalar() or 0
