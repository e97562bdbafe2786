"""
Inicialização do banco: tabelas, catálogo de produtos e releases de exemplo.

Idempotente: pode rodar a cada start sem duplicar linhas.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from flask import Flask
from sqlalchemy import inspect

from bs_release.extensions.db import db
from bs_release.models.product import Product
from bs_release.repositories.release_repository import ReleaseRepository

logger = logging.getLogger(__name__)

SAMPLE_RELEASES: List[Dict[str, Any]] = [
    {
        'product': 'marcom',
        'version': '2.1.0',
        'release_date': '2024-03-15',
        'features': [
            {
                'title': 'Advanced Analytics Dashboard',
                'content': '<p>New analytics dashboard with customizable widgets and real-time data visualization.</p>'
                           '<ul><li>Custom report builder</li><li>Interactive charts</li><li>Export capabilities</li></ul>',
            },
            {
                'title': 'Social Media Integration',
                'content': '<p>Enhanced social media integration with support for multiple platforms.</p>'
                           '<ul><li>Schedule posts across platforms</li><li>Analytics integration</li>'
                           '<li>Content optimization suggestions</li></ul>',
            },
        ],
    },
    {
        'product': 'marcom',
        'version': '2.0.0',
        'release_date': '2024-02-01',
        'features': [
            {
                'title': 'Complete UI Redesign',
                'content': '<p>Major update to the user interface with modern design principles.</p>'
                           '<ul><li>New component library</li><li>Improved accessibility</li><li>Dark mode support</li></ul>',
            },
        ],
    },
    {
        'product': 'collaborate',
        'version': '1.5.0',
        'release_date': '2024-03-10',
        'features': [
            {
                'title': 'Real-time Document Collaboration',
                'content': '<p>Multiple users can now edit documents simultaneously with live updates.</p>'
                           '<ul><li>Conflict resolution</li><li>Change tracking</li><li>Version history</li></ul>',
            },
            {
                'title': 'Team Chat Improvements',
                'content': '<p>Enhanced team chat functionality with new features.</p>'
                           '<ul><li>Thread replies</li><li>Rich text formatting</li><li>File sharing improvements</li></ul>',
            },
        ],
    },
    {
        'product': 'collaborate',
        'version': '1.4.0',
        'release_date': '2024-01-20',
        'features': [
            {
                'title': 'Project Templates',
                'content': '<p>Introduce project templates for quick setup of common project types.</p>'
                           '<ul><li>Custom template builder</li><li>Template sharing</li><li>Import/Export functionality</li></ul>',
            },
        ],
    },
    {
        'product': 'lam',
        'version': '3.2.0',
        'release_date': '2024-03-20',
        'features': [
            {
                'title': 'Interactive Assessment Builder',
                'content': '<p>New assessment creation tool with interactive question types.</p>'
                           '<ul><li>Drag-and-drop interface</li><li>Multiple question types</li><li>Advanced scoring options</li></ul>',
            },
            {
                'title': 'Learning Path Creator',
                'content': '<p>Create custom learning paths with conditional progression.</p>'
                           '<ul><li>Visual path builder</li><li>Prerequisites management</li><li>Progress tracking</li></ul>',
            },
        ],
    },
    {
        'product': 'lam',
        'version': '3.1.0',
        'release_date': '2024-02-15',
        'features': [
            {
                'title': 'Mobile Learning Support',
                'content': '<p>Enhanced mobile support for learning materials and assessments.</p>'
                           '<ul><li>Responsive design</li><li>Offline access</li><li>Progress sync</li></ul>',
            },
        ],
    },
]


def seed_products(catalog: List[Dict[str, str]]) -> int:
    """Insere os produtos do catálogo que ainda não existem. Retorna quantos foram criados."""
    existing = {slug for (slug,) in db.session.query(Product.slug).all()}
    created = 0
    for entry in catalog:
        if entry['slug'] in existing:
            continue
        db.session.add(Product(slug=entry['slug'], name=entry['name'], description=entry.get('description')))
        created += 1
    db.session.commit()
    if created:
        logger.info(f"Seeded {created} products")
    return created


def seed_sample_releases(samples: Optional[List[Dict[str, Any]]] = None) -> int:
    """Cria as releases de exemplo ausentes (releases existentes não são tocadas)."""
    repository = ReleaseRepository(db.session)
    created = 0
    for sample in samples if samples is not None else SAMPLE_RELEASES:
        product = repository.find_product_by_slug(sample['product'])
        if product is None:
            logger.warning(f"Sample release skipped, product not found: {sample['product']}")
            continue
        if repository.find_release(product.id, sample['version']) is not None:
            continue
        with repository.transaction():
            release_id = repository.insert_release(
                product.id, sample['version'], date.fromisoformat(sample['release_date'])
            )
            repository.replace_features(release_id, sample['features'])
        created += 1
    if created:
        logger.info(f"Seeded {created} sample releases")
    return created


def initialize_database(app: Flask) -> bool:
    """
    Cria as tabelas ausentes e popula o catálogo.

    Returns:
        bool: True se o banco ficou pronto para uso.
    """
    with app.app_context():
        import bs_release.models  # noqa: F401  (registra todos os modelos)

        tables = set(inspect(db.engine).get_table_names())
        missing = set(db.metadata.tables) - tables
        if missing:
            logger.info(f"Creating database tables: {', '.join(sorted(missing))}")
            db.create_all()

        seed_products(app.config['PRODUCT_CATALOG'])
        if app.config.get('SEED_SAMPLE_RELEASES'):
            seed_sample_releases()

        if app.config.get('CREDENTIAL_STORE') == 'database':
            from bs_release.services.credential_store import DatabaseCredentialStore
            DatabaseCredentialStore().ensure_default_admin(
                app.config.get('ADMIN_USERNAME') or 'admin',
                password=app.config.get('ADMIN_PASSWORD'),
                password_hash=app.config.get('ADMIN_PASSWORD_HASH'),
            )
    return True
