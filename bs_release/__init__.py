"""
BS-Release: release notes por produto (páginas públicas, API JSON e área admin).
"""

__version__ = '1.0.0'


def create_app(env_name=None, config_class=None):
    """Atalho usado por `flask --app bs_release`; importa a factory sob demanda."""
    from .main_startup import create_app as factory
    return factory(env_name=env_name, config_class=config_class)


__all__ = ['create_app', '__version__']
