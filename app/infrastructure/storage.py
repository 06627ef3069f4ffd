"""Object storage — buckets on the local filesystem, served read-only under /storage."""

import os
import re
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple

import structlog

from app.config import get_settings
from app.core.exceptions import BusinessRuleViolationException

settings = get_settings()
logger = structlog.get_logger(__name__)

PROFILES_BUCKET = "profiles"
PROVIDER_IMAGES_BUCKET = "provider-images"
BUCKETS = (PROFILES_BUCKET, PROVIDER_IMAGES_BUCKET)
EXTENSION_RE = re.compile(r"[a-z0-9]{1,8}")


class StorageError(Exception):
    """Raised when an object cannot be written."""


@dataclass
class ImagePayload:
    """An uploaded file read into memory."""
    filename: Optional[str]
    content_type: Optional[str]
    content: bytes


class ObjectStorage:
    """Upload-by-path and public-URL retrieval over local buckets."""

    def __init__(self, root: Optional[str] = None, public_base_url: Optional[str] = None):
        self.root = os.path.abspath(root or settings.STORAGE_DIR)
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    def _resolve(self, bucket: str, path: str) -> str:
        if bucket not in BUCKETS:
            raise StorageError(f"Unknown bucket: {bucket}")
        bucket_root = os.path.join(self.root, bucket)
        full_path = os.path.abspath(os.path.join(bucket_root, path))
        if not full_path.startswith(bucket_root + os.sep):
            raise StorageError(f"Path escapes bucket: {path}")
        return full_path

    def upload(self, bucket: str, path: str, content: bytes) -> str:
        """Write an object and return its storage path. Existing objects are not overwritten."""
        full_path = self._resolve(bucket, path)
        if os.path.exists(full_path):
            raise StorageError(f"Object already exists: {bucket}/{path}")
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise StorageError(f"Failed to write {bucket}/{path}: {e}") from e

        logger.info("Object uploaded", bucket=bucket, path=path, size=len(content))
        return path

    def remove(self, bucket: str, path: str) -> None:
        full_path = self._resolve(bucket, path)
        if os.path.exists(full_path):
            os.remove(full_path)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/storage/{bucket}/{path}"

    def locate(self, url: Optional[str]) -> Optional[Tuple[str, str]]:
        """(bucket, path) for a public URL issued by this storage, else None."""
        prefix = f"{self.public_base_url}/storage/"
        if not url or not url.startswith(prefix):
            return None
        bucket, _, path = url[len(prefix):].partition("/")
        if bucket not in BUCKETS or not path:
            return None
        return bucket, path

    def remove_url(self, url: Optional[str]) -> bool:
        located = self.locate(url)
        if located is None:
            return False
        self.remove(*located)
        return True

    def ensure_buckets(self) -> None:
        for bucket in BUCKETS:
            os.makedirs(os.path.join(self.root, bucket), exist_ok=True)


def build_object_path(prefix: str, owner_id: int, filename: Optional[str]) -> str:
    """Random object name under a per-owner folder, keeping a plain file extension."""
    ext = ""
    if filename and "." in filename:
        candidate = filename.rsplit(".", 1)[-1].lower()
        if EXTENSION_RE.fullmatch(candidate):
            ext = "." + candidate
    return f"{prefix}/{owner_id}/{uuid.uuid4().hex}{ext}"


def validate_image(content_type: Optional[str], size: int, max_file_size_mb: int) -> None:
    """Reject non-image uploads and files above the configured size limit."""
    if not content_type or not content_type.startswith("image/"):
        raise BusinessRuleViolationException(
            "Only image uploads are accepted",
            details={"content_type": content_type},
        )
    if size == 0:
        raise BusinessRuleViolationException("Uploaded file is empty")
    if size > max_file_size_mb * 1024 * 1024:
        raise BusinessRuleViolationException(
            f"File exceeds the {max_file_size_mb} MB limit",
            details={"size": size, "max_file_size_mb": max_file_size_mb},
        )


_storage: Optional[ObjectStorage] = None


def get_storage() -> ObjectStorage:
    global _storage
    if _storage is None:
        _storage = ObjectStorage()
    return _storage


def store_image(storage: ObjectStorage, bucket: str, prefix: str, owner_id: int,
                image: ImagePayload, max_file_size_mb: int) -> str:
    """Validate, upload and return the public URL of an image."""
    validate_image(image.content_type, len(image.content), max_file_size_mb)
    path = build_object_path(prefix, owner_id, image.filename)
    storage.upload(bucket, path, image.content)
    return storage.public_url(bucket, path)
