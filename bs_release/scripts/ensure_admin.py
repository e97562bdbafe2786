"""
Ensure the database admin exists and has the given password, or print a
bcrypt hash to use as ADMIN_PASSWORD_HASH with the static credential store.

Usage:
    python -m bs_release.scripts.ensure_admin [password] [--username NAME]
    python -m bs_release.scripts.ensure_admin [password] --hash-only
"""

import getpass

import click

from bs_release.models.admin_user import AdminUser, hash_password


@click.command()
@click.argument('password', required=False)
@click.option('--username', default='admin', show_default=True)
@click.option('--hash-only', is_flag=True, help='Only print the bcrypt hash, no database access.')
def ensure_admin(password, username, hash_only):
    if not password:
        password = getpass.getpass('New admin password: ')
    if not password:
        raise click.UsageError('Password must not be empty')

    if hash_only:
        click.echo(hash_password(password))
        return

    from bs_release.main_startup import create_app
    from bs_release.extensions import db
    from bs_release.services.credential_store import DatabaseCredentialStore
    from bs_release.utils.database_initializer import initialize_database

    app = create_app()
    initialize_database(app)
    with app.app_context():
        store = DatabaseCredentialStore()
        if store.set_password(username, password):
            user = db.session.query(AdminUser).filter_by(username=username).one()
            click.echo(f'ADMIN_UPDATED id={user.id}')
        else:
            user = AdminUser(username=username, password=password)
            db.session.add(user)
            db.session.commit()
            click.echo(f'ADMIN_CREATED id={user.id}')

        click.echo(f'PASSWORD_VALID {user.check_password(password)}')


if __name__ == '__main__':
    ensure_admin()
