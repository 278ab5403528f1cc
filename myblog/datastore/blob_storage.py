"""
File storage buckets backed by the local filesystem.
"""
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from ..config import get_settings
from ..logging_config import store_logger
from .errors import BUCKET_NOT_FOUND, DUPLICATE_OBJECT, INVALID_PATH, OBJECT_NOT_FOUND, Result, StoreError

POST_IMAGES_BUCKET = "post-images"
AVATARS_BUCKET = "avatars"
BUCKETS = (POST_IMAGES_BUCKET, AVATARS_BUCKET)


class BlobStorage:
    """Upload objects into named buckets and resolve their public URLs."""

    def __init__(self, root: Union[str, Path], public_base_url: str, buckets=BUCKETS):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")
        self.buckets = tuple(buckets)

    def _object_path(self, bucket: str, path: str) -> Path:
        if bucket not in self.buckets:
            raise StoreError(BUCKET_NOT_FOUND, f"Bucket '{bucket}' not found")
        relative = PurePosixPath(path)
        if not path or relative.is_absolute() or ".." in relative.parts:
            raise StoreError(INVALID_PATH, f"Invalid object path '{path}'")
        return self.root / bucket / Path(*relative.parts)

    def upload(self, bucket: str, path: str, data: bytes, upsert: bool = False) -> Result:
        try:
            target = self._object_path(bucket, path)
        except StoreError as e:
            return Result(error=e)

        if target.exists() and not upsert:
            return Result.failure(DUPLICATE_OBJECT, "The resource already exists", path=path)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            store_logger.error("upload failed", error=e, bucket=bucket, path=path)
            return Result.failure(INVALID_PATH, f"Could not store object: {e}")

        store_logger.info("object stored", bucket=bucket, path=path, size=len(data))
        return Result(data={"path": path, "full_path": f"{bucket}/{path}"})

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/storage/{bucket}/{path}"

    def resolve(self, bucket: str, path: str) -> Optional[Path]:
        """Return the file backing an object, or None when it does not exist."""
        try:
            target = self._object_path(bucket, path)
        except StoreError:
            return None
        return target if target.is_file() else None

    def download(self, bucket: str, path: str) -> Result:
        target = self.resolve(bucket, path)
        if target is None:
            return Result.failure(OBJECT_NOT_FOUND, "Object not found", path=path)
        return Result(data=target.read_bytes())


@lru_cache()
def get_blob_storage() -> BlobStorage:
    """FastAPI dependency returning the configured blob storage."""
    settings = get_settings()
    return BlobStorage(settings.storage_root, settings.public_base_url)
