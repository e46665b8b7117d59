# =============================================================================
# core/services/media_store.py - Supabase Storage Operations
# =============================================================================
# Handles image upload/delete against a public Supabase Storage bucket.
# Images are written under <STORAGE_FOLDER>/<uuid><ext> and referenced by
# their public URL only; delete() maps a URL back to its storage path.
# =============================================================================

import logging
from typing import Any, Protocol
from urllib.parse import unquote
from uuid import uuid4

import httpx

from app.config import Settings
from app.exceptions import ImageDeleteError, ImageUploadError, MediaUploadTimeout
from core.models.superhero import ImageUpload
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class MediaStore(Protocol):
    """Binary-object storage used by the SuperheroService."""

    def upload(self, image: ImageUpload) -> str:
        """Store the bytes and return a retrievable URL."""
        ...

    def delete(self, url: str) -> None:
        """Remove the object behind url."""
        ...

    def ping(self) -> None: ...


class SupabaseMediaStore:
    """
    MediaStore backed by a public Supabase Storage bucket.

    upload() raises ImageUploadError (MediaUploadTimeout on timeout);
    delete() raises ImageDeleteError, including for URLs that don't point
    into this bucket.
    """

    def __init__(self, settings: Settings, client: Any | None = None):
        self.settings = settings
        self.bucket_name = settings.STORAGE_BUCKET
        self.folder = settings.STORAGE_FOLDER.strip("/")
        self._client = client

    @property
    def client(self) -> Any:
        return self._client or SupabaseClient.get_client()

    def _bucket(self):
        return self.client.storage.from_(self.bucket_name)

    @property
    def _public_prefix(self) -> str:
        return f"/storage/v1/object/public/{self.bucket_name}/"

    def build_path(self, image: ImageUpload) -> str:
        name = f"{uuid4().hex}{image.extension}"
        return f"{self.folder}/{name}" if self.folder else name

    def path_from_url(self, url: str) -> str | None:
        """
        Recover the storage path from a public URL.

        Returns None for URLs that don't belong to this bucket.
        """
        if self._public_prefix not in url:
            return None
        path = url.split(self._public_prefix, 1)[1].split("?", 1)[0]
        return unquote(path) or None

    def upload(self, image: ImageUpload) -> str:
        """
        Upload one image and return its public URL.

        Raises:
            MediaUploadTimeout: If the storage call times out
            ImageUploadError: If the upload fails for any other reason
        """
        path = self.build_path(image)

        try:
            bucket = self._bucket()
            bucket.upload(
                path=path,
                file=image.data,
                file_options={"content-type": image.content_type},
            )
            url = bucket.get_public_url(path)

        except httpx.TimeoutException as e:
            logger.error(f"Image upload timed out: {image.filename}")
            raise MediaUploadTimeout(image.filename, self.settings.MEDIA_TIMEOUT_SECONDS) from e
        except Exception as e:
            logger.error(f"Image upload failed for {image.filename}: {e}")
            raise ImageUploadError(str(e), filename=image.filename) from e

        # Older storage clients append a bare "?" to public URLs
        url = url.rstrip("?")
        logger.info(f"Uploaded image to storage: {path}")
        return url

    def delete(self, url: str) -> None:
        """
        Delete the object behind a public URL.

        Raises:
            ImageDeleteError: If the URL is foreign or removal fails
        """
        path = self.path_from_url(url)
        if path is None:
            raise ImageDeleteError(url, f"URL is not in storage bucket '{self.bucket_name}'")

        try:
            self._bucket().remove([path])
        except Exception as e:
            logger.error(f"Failed to delete image {path}: {e}")
            raise ImageDeleteError(url, str(e)) from e

        logger.info(f"Deleted image from storage: {path}")

    def ping(self) -> None:
        self.client.storage.get_bucket(self.bucket_name)
