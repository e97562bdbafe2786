from .release_repository import ReleaseRepository, version_key

__all__ = ['ReleaseRepository', 'version_key']
