import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from supabase import Client, create_client

from shared.core.exceptions import ExternalStorageError

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Object storage used for receipts and tenant documents."""

    @abstractmethod
    def upload(self, content: bytes, bucket: str, path: str,
               content_type: str = "application/pdf") -> Dict[str, str]:
        """Store ``content`` at ``path`` (overwriting) and return ``{"path", "url"}``."""

    @abstractmethod
    def download(self, bucket: str, path: str) -> bytes:
        """Return the stored bytes; raise ``ExternalStorageError`` when absent or unreachable."""

    @abstractmethod
    def delete(self, bucket: str, path: str) -> bool:
        ...

    @abstractmethod
    def get_signed_url(self, bucket: str, path: str, ttl: int) -> str:
        ...

    def delete_many(self, bucket: str, paths: List[str]) -> int:
        """Best-effort removal, errors are logged and skipped."""
        deleted = 0
        for path in paths:
            try:
                self.delete(bucket, path)
                deleted += 1
            except ExternalStorageError as e:
                logger.error(f"Could not delete {bucket}/{path}: {e}")
        return deleted


class SupabaseBlobStore(BlobStore):

    def __init__(self, url: str, key: str, signed_url_ttl: int = 3600):
        self.client: Optional[Client] = create_client(url, key) if url and key else None
        self.signed_url_ttl = signed_url_ttl

    def _bucket(self, bucket: str):
        if self.client is None:
            raise ExternalStorageError(
                "Supabase is not configured. Please set SUPABASE_URL and SUPABASE_KEY.")
        return self.client.storage.from_(bucket)

    def upload(self, content, bucket, path, content_type="application/pdf"):
        storage = self._bucket(bucket)
        try:
            storage.upload(
                path=path,
                file=content,
                file_options={"content-type": content_type, "upsert": "true"},
            )
        except Exception as e:
            raise ExternalStorageError(
                f"Upload to {bucket}/{path} failed: {e}") from e

        logger.info("Uploaded %s bytes to %s/%s", len(content), bucket, path)
        return {"path": path, "url": self.get_signed_url(bucket, path, self.signed_url_ttl)}

    def download(self, bucket, path):
        storage = self._bucket(bucket)
        try:
            return storage.download(path)
        except Exception as e:
            raise ExternalStorageError(
                f"Download of {bucket}/{path} failed: {e}") from e

    def delete(self, bucket, path):
        storage = self._bucket(bucket)
        try:
            storage.remove([path])
        except Exception as e:
            raise ExternalStorageError(
                f"Delete of {bucket}/{path} failed: {e}") from e
        return True

    def get_signed_url(self, bucket, path, ttl):
        storage = self._bucket(bucket)
        try:
            signed = storage.create_signed_url(path, ttl)
        except Exception as e:
            raise ExternalStorageError(
                f"Could not sign URL for {bucket}/{path}: {e}") from e
        return signed.get("signedURL") or signed.get("signedUrl")
