"""Create products, releases, features and admin_users

Revision ID: 3f1a9c2d7b64
Revises:
Create Date: 2024-03-01 00:00:00

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f1a9c2d7b64'
down_revision = None
branch_labels = None
depends_on = None


def _existing_tables():
    return set(sa.inspect(op.get_bind()).get_table_names())


def upgrade():
    # Bancos criados por initialize_database() já têm as tabelas
    tables = _existing_tables()

    if 'products' not in tables:
        op.create_table(
            'products',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.Column('slug', sa.String(length=64), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_products_slug', 'products', ['slug'], unique=True)

    if 'releases' not in tables:
        op.create_table(
            'releases',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.Column('product_id', sa.Integer(), nullable=False),
            sa.Column('version', sa.String(length=32), nullable=False),
            sa.Column('release_date', sa.Date(), nullable=False),
            sa.ForeignKeyConstraint(['product_id'], ['products.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('product_id', 'version', name='uq_release_product_version'),
        )
        op.create_index('ix_releases_product_id', 'releases', ['product_id'])
        op.create_index('ix_release_product_date', 'releases', ['product_id', 'release_date'])

    if 'features' not in tables:
        op.create_table(
            'features',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.Column('release_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('content', sa.Text(), nullable=True),
            sa.ForeignKeyConstraint(['release_id'], ['releases.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_features_release_id', 'features', ['release_id'])

    if 'admin_users' not in tables:
        op.create_table(
            'admin_users',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.Column('username', sa.String(length=50), nullable=False),
            sa.Column('password_hash', sa.String(length=128), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('last_login_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_admin_users_username', 'admin_users', ['username'], unique=True)


def downgrade():
    tables = _existing_tables()
    # features antes de releases (FK sem ON DELETE)
    for table in ('admin_users', 'features', 'releases', 'products'):
        if table in tables:
            op.drop_table(table)
