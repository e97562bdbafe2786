"""
UploadService stores images attached from the feature editor.

Files land in UPLOAD_FOLDER under a generated name and are served back by
the public `/uploads/<filename>` route.
"""

import logging
import mimetypes
import os
import secrets
import time
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.utils import secure_filename

from bs_release.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Extensões preferidas (mimetypes.guess_extension varia por plataforma)
_EXTENSIONS = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'image/gif': '.gif',
    'image/webp': '.webp',
}


class UploadService:
    """Validação e gravação de imagens enviadas pelo admin."""

    def __init__(self, upload_folder, allowed_mime_types: Iterable[str], max_bytes: Optional[int]):
        self.upload_folder = Path(upload_folder)
        self.allowed_mime_types = {m.lower() for m in allowed_mime_types}
        self.max_bytes = max_bytes

    @classmethod
    def from_config(cls, config) -> 'UploadService':
        return cls(
            config['UPLOAD_FOLDER'],
            config.get('ALLOWED_IMAGE_MIME_TYPES') or (),
            config.get('MAX_CONTENT_LENGTH'),
        )

    def _extension_for(self, file: FileStorage, mimetype: str) -> str:
        suffix = Path(secure_filename(file.filename or '')).suffix.lower()
        if suffix and mimetypes.guess_type(f"x{suffix}")[0] == mimetype:
            return suffix
        return _EXTENSIONS.get(mimetype) or mimetypes.guess_extension(mimetype) or ''

    @staticmethod
    def _size_of(file: FileStorage) -> int:
        stream = file.stream
        position = stream.tell()
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(position)
        return size

    def save_image(self, file: Optional[FileStorage]) -> str:
        """
        Valida e grava a imagem.

        Returns:
            O nome gerado do arquivo (timestamp-aleatório + extensão).

        Raises:
            ValidationError: arquivo ausente ou tipo não permitido.
            RequestEntityTooLarge: arquivo acima do limite.
        """
        if file is None or not file.filename:
            raise ValidationError('No file uploaded')

        mimetype = (file.mimetype or '').lower()
        if mimetype not in self.allowed_mime_types:
            logger.info(f"Rejected upload with type {mimetype!r}")
            raise ValidationError('Only image files are allowed',
                                  errors={'image': [f'Unsupported type {mimetype or "unknown"}']})

        size = self._size_of(file)
        if self.max_bytes and size > self.max_bytes:
            raise RequestEntityTooLarge(f'File exceeds {self.max_bytes // (1024 * 1024)}MB limit')

        filename = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{self._extension_for(file, mimetype)}"
        self.upload_folder.mkdir(parents=True, exist_ok=True)
        file.save(str(self.upload_folder / filename))
        logger.info(f"Stored upload {filename} ({size} bytes)")
        return filename
