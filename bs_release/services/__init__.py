from .release_service import ReleaseService
from .upload_service import UploadService
from .credential_store import (
    CredentialStore, StaticCredentialStore, DatabaseCredentialStore,
    build_credential_store, get_credential_store, set_credential_store,
)

__all__ = [
    'ReleaseService', 'UploadService', 'CredentialStore', 'StaticCredentialStore',
    'DatabaseCredentialStore', 'build_credential_store', 'get_credential_store',
    'set_credential_store',
]
