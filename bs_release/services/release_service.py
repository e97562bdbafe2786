"""
ReleaseService holds the business rules for release notes.

Input reaching this service has already been shape-checked by the request
schemas; here we resolve products and releases, enforce uniqueness, and run
each multi-row write inside one repository transaction.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from bs_release.exceptions import Conflict, ConstraintViolation, NotFound, ValidationError
from bs_release.models.product import Product
from bs_release.models.release import Release
from bs_release.repositories.release_repository import ReleaseRepository
from bs_release.utils.html_sanitizer import sanitize_html
from bs_release.utils.security import sanitize_input

logger = logging.getLogger(__name__)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _serialize_release(release: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(release)
    data['release_date'] = _iso(release['release_date'])
    data['features'] = list(release.get('features') or [])
    return data


class ReleaseService:
    """Service for managing releases and their features."""

    def __init__(self, session: Session):
        """
        Initialize the service with a database session.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session
        self.repository = ReleaseRepository(session)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _require_product(self, slug: str) -> Product:
        product = self.repository.find_product_by_slug(slug)
        if product is None:
            raise NotFound('Product not found')
        return product

    def _require_release(self, slug: str, version: str) -> Tuple[Product, Release]:
        product = self._require_product(slug)
        release = self.repository.find_release(product.id, version)
        if release is None:
            raise NotFound('Release not found')
        return product, release

    @staticmethod
    def _clean_features(features: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """Sanitiza e descarta entradas sem título (lista de release)."""
        cleaned = []
        for item in features or []:
            title = sanitize_input(item.get('title') or '')
            if not title:
                continue
            cleaned.append({'title': title, 'content': sanitize_html(item.get('content'))})
        return cleaned

    @staticmethod
    def _clean_feature(title: Optional[str], content: Optional[str]) -> Tuple[str, Optional[str]]:
        clean_title = sanitize_input(title or '')
        if not clean_title:
            raise ValidationError('Feature title is required', errors={'title': ['Title is required']})
        return clean_title, sanitize_html(content)

    # ------------------------------------------------------------------
    # Leitura
    # ------------------------------------------------------------------
    def list_products(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.repository.list_products()]

    def get_product(self, slug: str) -> Dict[str, Any]:
        return self._require_product(slug).to_dict()

    def list_releases(self, slug: str) -> Dict[str, Any]:
        """Produto + releases (mais recentes primeiro) com features aninhadas."""
        product = self._require_product(slug)
        releases = self.repository.list_releases_for_product(product.id)
        return {
            'product': product.to_dict(),
            'releases': [_serialize_release(r) for r in releases],
        }

    def get_release(self, slug: str, version: str) -> Dict[str, Any]:
        product = self._require_product(slug)
        release = self.repository.get_release_with_features(product.id, version)
        if release is None:
            raise NotFound('Release not found')
        return {'product': product.to_dict(), 'release': _serialize_release(release)}

    def product_overview(self) -> List[Dict[str, Any]]:
        """Produtos com a release mais recente de cada um (página inicial)."""
        latest = self.repository.latest_release_per_product()
        overview = []
        for product in self.repository.list_products():
            item = product.to_dict()
            newest = latest.get(product.id)
            item['latest_release'] = (
                {'version': newest['version'], 'release_date': _iso(newest['release_date'])}
                if newest else None
            )
            overview.append(item)
        return overview

    def dashboard_stats(self) -> Dict[str, Any]:
        products = self.list_products()
        return {
            'products': products,
            'total_products': len(products),
            'total_releases': self.repository.count_releases(),
            'total_features': self.repository.count_features(),
        }

    # ------------------------------------------------------------------
    # Escrita de releases
    # ------------------------------------------------------------------
    def create_release(self, slug: str, version: str, release_date: date,
                       features: Optional[Iterable[Dict[str, Any]]] = None) -> int:
        """
        Create a release and its features in one transaction.

        Raises:
            NotFound: unknown product.
            Conflict: (product, version) already exists, including when a
                concurrent insert wins the race.
        """
        product = self._require_product(slug)
        if self.repository.find_release(product.id, version) is not None:
            raise Conflict('Release with this version already exists')

        cleaned = self._clean_features(features)
        try:
            with self.repository.transaction():
                release_id = self.repository.insert_release(product.id, version, release_date)
                for item in cleaned:
                    self.repository.insert_feature(release_id, item['title'], item['content'])
        except ConstraintViolation as e:
            raise Conflict('Release with this version already exists') from e

        logger.info(f"Release {slug} {version} created with {len(cleaned)} features")
        return release_id

    def update_release(self, slug: str, version: str, release_date: date,
                       features: Optional[Iterable[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """Substitui data e todo o conjunto de features (idempotente)."""
        _, release = self._require_release(slug, version)
        cleaned = self._clean_features(features)
        release_id = release.id
        with self.repository.transaction():
            self.repository.update_release_date(release_id, release_date)
            self.repository.replace_features(release_id, cleaned)
        logger.info(f"Release {slug} {version} updated ({len(cleaned)} features)")
        return self.get_release(slug, version)

    def delete_release(self, slug: str, version: str) -> None:
        _, release = self._require_release(slug, version)
        self.repository.delete_release(release.id)
        logger.info(f"Release {slug} {version} deleted")

    # ------------------------------------------------------------------
    # Escrita de features individuais
    # ------------------------------------------------------------------
    def add_feature(self, slug: str, version: str, title: Optional[str], content: Optional[str] = None) -> int:
        _, release = self._require_release(slug, version)
        clean_title, clean_content = self._clean_feature(title, content)
        return self.repository.insert_feature(release.id, clean_title, clean_content)

    def update_feature(self, slug: str, version: str, feature_id: int,
                       title: Optional[str], content: Optional[str] = None) -> Dict[str, Any]:
        _, release = self._require_release(slug, version)
        feature = self.repository.find_feature(release.id, feature_id)
        if feature is None:
            raise NotFound('Feature not found')
        clean_title, clean_content = self._clean_feature(title, content)
        self.repository.update_feature(feature, clean_title, clean_content)
        return {'id': feature_id, 'title': clean_title, 'content': clean_content}

    def delete_feature(self, slug: str, version: str, feature_id: int) -> None:
        _, release = self._require_release(slug, version)
        feature = self.repository.find_feature(release.id, feature_id)
        if feature is None:
            raise NotFound('Feature not found')
        self.repository.delete_feature(feature)
