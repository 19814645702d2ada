"""
Local image storage for product pictures.

Files are written under UPLOAD_FOLDER and served back at /uploads/<name>.
The stored value on a product is the public path, e.g. '/uploads/product-1712-42.png'.
"""
import logging
import os
import random
import time
from typing import Optional

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from pos_app.exceptions import BusinessLogicError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = '/uploads/'


class StorageService:
    """
    Disk-backed storage for uploaded product images.

    Usage:
        storage = StorageService('/path/to/uploads')
        path = storage.upload_file(request.files['image'])
        storage.delete_file(path)
    """

    def __init__(self, upload_folder: str, max_size: int = 5 * 1024 * 1024,
                 allowed_mime_types: Optional[set] = None, allowed_extensions: Optional[set] = None):
        self.upload_folder = upload_folder
        self.max_size = max_size
        self.allowed_mime_types = allowed_mime_types or set()
        self.allowed_extensions = allowed_extensions or set()

    def upload_file(self, file: FileStorage) -> str:
        """
        Validate and save an uploaded image.

        Returns:
            Public path of the stored file

        Raises:
            BusinessLogicError: If file validation fails
        """
        self._validate_file(file)

        os.makedirs(self.upload_folder, exist_ok=True)
        filename = self._unique_name(file.filename)
        destination = os.path.join(self.upload_folder, filename)

        file.seek(0)
        file.save(destination)
        logger.info(f"[STORAGE] Saved upload '{file.filename}' as '{filename}'")
        return PUBLIC_PREFIX + filename

    def delete_file(self, public_path: Optional[str]) -> bool:
        """
        Delete a previously stored file.

        Returns:
            True if a file was removed, False otherwise
        """
        local_path = self.local_path(public_path)
        if not local_path or not os.path.exists(local_path):
            return False
        try:
            os.remove(local_path)
            logger.info(f"[STORAGE] Deleted '{local_path}'")
            return True
        except OSError as e:
            logger.warning(f"[STORAGE] Could not delete '{local_path}': {e}")
            return False

    def local_path(self, public_path: Optional[str]) -> Optional[str]:
        """Map '/uploads/<name>' back to a path inside the upload folder."""
        if not public_path or not public_path.startswith(PUBLIC_PREFIX):
            return None
        name = secure_filename(public_path[len(PUBLIC_PREFIX):])
        if not name:
            return None
        return os.path.join(self.upload_folder, name)

    def _unique_name(self, original_name: str) -> str:
        extension = os.path.splitext(secure_filename(original_name or ''))[1].lower()
        suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"product-{suffix}{extension}"

    def _validate_file(self, file: FileStorage):
        """
        Validate uploaded file (size, type, extension).

        Raises:
            BusinessLogicError: If validation fails
        """
        if not file or not file.filename:
            raise BusinessLogicError("No file provided")

        file.seek(0, 2)  # Seek to end
        file_size = file.tell()
        file.seek(0)

        if file_size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise BusinessLogicError(f"File too large. Maximum {max_mb:.1f}MB")

        content_type = file.mimetype or ''
        if not content_type.startswith('image/') or (
            self.allowed_mime_types and content_type not in self.allowed_mime_types
        ):
            raise BusinessLogicError('Only image files are allowed!')

        extension = os.path.splitext(file.filename)[1].lower().lstrip('.')
        if self.allowed_extensions and extension not in self.allowed_extensions:
            raise BusinessLogicError(f"File extension not allowed: .{extension}")


def get_storage_service() -> StorageService:
    """Build a StorageService from the current app config."""
    config = current_app.config
    return StorageService(
        upload_folder=config['UPLOAD_FOLDER'],
        max_size=config.get('MAX_UPLOAD_SIZE', 5 * 1024 * 1024),
        allowed_mime_types=config.get('ALLOWED_MIME_TYPES'),
        allowed_extensions=config.get('ALLOWED_EXTENSIONS'),
    )
