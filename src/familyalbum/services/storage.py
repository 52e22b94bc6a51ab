"""Object storage for uploaded photo files.

Two backends share the same small interface:

- ``StorageService`` stores objects in a Google Cloud Storage bucket.
- ``LocalStorageService`` writes them below a local directory, for development.

Both expose ``store(path, file_bytes)`` returning a ``StoredObject`` handle and
``public_url_for(handle)``.
"""

import mimetypes
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath

from google.cloud import storage  # type: ignore[attr-defined]
from google.cloud.exceptions import GoogleCloudError

from ..error_handling import StorageError, ValidationError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Not in every platform's mime.types
mimetypes.add_type("image/heic", ".heic")
mimetypes.add_type("image/heif", ".heif")


@dataclass(frozen=True)
class StoredObject:
    """Handle to a stored object."""

    path: str
    size: int
    content_type: str
    backend: str


def guess_content_type(filename: str) -> str:
    """Guess a MIME type from a filename, defaulting to application/octet-stream."""
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


def build_object_path(user_id: str, filename: str, now: datetime | None = None) -> str:
    """
    Build the object path for an uploaded file.

    The path is ``{user_id}/{epoch_milliseconds}_{basename}``; any directory
    part of ``filename`` is dropped.

    Raises:
        ValidationError: If the user ID or filename is empty
    """
    safe_filename = PurePosixPath(filename.replace("\\", "/")).name
    if not user_id or not safe_filename:
        raise ValidationError(
            "Both a user ID and a filename are required to store a file",
            code="invalid_object_path",
            details={"user_id": user_id, "filename": filename},
        )

    moment = now or datetime.now(UTC)
    return f"{user_id}/{int(moment.timestamp() * 1000)}_{safe_filename}"


class StorageService:
    """Google Cloud Storage backend."""

    backend = "gcs"

    def __init__(self, bucket_name: str | None = None, project_id: str | None = None) -> None:
        """
        Initialize the storage service.

        Args:
            bucket_name: Photos bucket (defaults to GCS_PHOTOS_BUCKET)
            project_id: GCP project ID (defaults to GOOGLE_CLOUD_PROJECT)

        Raises:
            StorageError: If configuration is missing or the client cannot be created
        """
        self.bucket_name = bucket_name or os.getenv("GCS_PHOTOS_BUCKET")
        self.project_id = project_id or os.getenv("GOOGLE_CLOUD_PROJECT")

        if not self.bucket_name:
            raise StorageError("GCS_PHOTOS_BUCKET environment variable is required", code="storage_not_configured")
        if not self.project_id:
            raise StorageError("GOOGLE_CLOUD_PROJECT environment variable is required", code="storage_not_configured")

        try:
            self.client = storage.Client(project=self.project_id)
            self.bucket = self.client.bucket(self.bucket_name)
            logger.info("storage_service_initialized", backend=self.backend, bucket=self.bucket_name)
        except Exception as e:
            raise StorageError(f"Failed to initialize GCS client: {e}", original_exception=e) from e

    def store(self, path: str, file_bytes: bytes, content_type: str | None = None) -> StoredObject:
        """
        Upload bytes to ``path`` in the photos bucket.

        Raises:
            StorageError: If the upload fails
        """
        content_type = content_type or guess_content_type(path)

        try:
            blob = self.bucket.blob(path)
            blob.upload_from_string(file_bytes, content_type=content_type)
        except GoogleCloudError as e:
            raise StorageError(f"Failed to upload '{path}': {e}", original_exception=e) from e
        except Exception as e:
            raise StorageError(f"Unexpected error uploading '{path}': {e}", original_exception=e) from e

        logger.info("object_stored", backend=self.backend, path=path, size=len(file_bytes))
        return StoredObject(path=path, size=len(file_bytes), content_type=content_type, backend=self.backend)

    def public_url_for(self, handle: StoredObject) -> str:
        """
        Get the public URL of a stored object.

        Raises:
            StorageError: If the URL cannot be determined
        """
        url = self.bucket.blob(handle.path).public_url
        if not url:
            raise StorageError(f"Could not get public URL for '{handle.path}'", code="public_url_missing")
        return str(url)


class LocalStorageService:
    """Filesystem backend used in development."""

    backend = "local"

    def __init__(self, root_dir: str | None = None, base_url: str | None = None) -> None:
        """
        Args:
            root_dir: Directory objects are written under (defaults to LOCAL_STORAGE_DIR)
            base_url: URL prefix for public URLs (defaults to LOCAL_STORAGE_BASE_URL)
        """
        self.root_dir = Path(root_dir or os.getenv("LOCAL_STORAGE_DIR", "data/photos")).resolve()
        self.base_url = (base_url or os.getenv("LOCAL_STORAGE_BASE_URL", "/media")).rstrip("/")
        logger.info("storage_service_initialized", backend=self.backend, root_dir=str(self.root_dir))

    def _target(self, path: str) -> Path:
        target = (self.root_dir / path).resolve()
        if not target.is_relative_to(self.root_dir):
            raise StorageError(f"Object path escapes storage root: {path}", code="invalid_object_path")
        return target

    def store(self, path: str, file_bytes: bytes, content_type: str | None = None) -> StoredObject:
        """
        Write bytes to ``path`` below the storage root.

        Raises:
            StorageError: If the path is outside the root or the write fails
        """
        target = self._target(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(file_bytes)
        except OSError as e:
            raise StorageError(f"Failed to write '{path}': {e}", original_exception=e) from e

        logger.info("object_stored", backend=self.backend, path=path, size=len(file_bytes))
        return StoredObject(
            path=path,
            size=len(file_bytes),
            content_type=content_type or guess_content_type(path),
            backend=self.backend,
        )

    def public_url_for(self, handle: StoredObject) -> str:
        return f"{self.base_url}/{handle.path}"

    def read(self, handle: StoredObject) -> bytes:
        """Read back a stored object."""
        return self._target(handle.path).read_bytes()


_storage_service: StorageService | LocalStorageService | None = None


def get_storage_service() -> StorageService | LocalStorageService:
    """
    Get the global storage service for the configured STORAGE_BACKEND.

    Raises:
        StorageError: If the backend is unknown or cannot be initialized
    """
    global _storage_service

    if _storage_service is None:
        from ..config import get_storage_backend

        backend = get_storage_backend()
        if backend == "gcs":
            _storage_service = StorageService()
        elif backend == "local":
            _storage_service = LocalStorageService()
        else:
            raise StorageError(f"Unknown storage backend: {backend}", code="unknown_storage_backend")

    return _storage_service


def reset_storage_service() -> None:
    """Forget the global storage service (used when configuration changes)."""
    global _storage_service
    _storage_service = None
