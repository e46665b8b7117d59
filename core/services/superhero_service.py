# =============================================================================
# core/services/superhero_service.py - Superhero Business Logic
# =============================================================================
# Orchestrates the record store and the media store:
# - create / update upload new images first, then write the record
# - a failed batch is rolled back by deleting what was already uploaded
# - single-image removal deletes the object before dropping the reference
# - listing is newest-first with page/limit pagination
#
# Separates HTTP concerns from storage and business logic. Everything that
# can go wrong is reported as a SuperheroCatalogException subclass.
# =============================================================================

import logging
import math
from typing import Any, Callable

from app.config import Settings
from app.exceptions import (
    ImageDeleteError,
    ImageUploadError,
    InvalidImageError,
    InvalidSuperheroError,
    RecordStoreError,
    StoreTimeout,
    SuperheroCatalogException,
    SuperheroNotFoundError,
    TooManyImagesError,
)
from core.models.superhero import (
    DeleteConfirmation,
    ImageList,
    ImageUpload,
    SuperheroPage,
    SuperheroRecord,
    SuperheroSubmission,
)
from core.services.media_store import MediaStore
from core.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def _coerce_positive(value: Any, default: int) -> int:
    """Parse a page/limit value, falling back to default for junk or <= 0."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


class SuperheroService:
    """
    Service for superhero lifecycle operations.

    Holds no per-request state; the record store and media store are the
    only shared resources and no lock is held across calls.
    """

    def __init__(
        self,
        record_store: RecordStore,
        media_store: MediaStore,
        settings: Settings,
    ):
        self.record_store = record_store
        self.media_store = media_store
        self.settings = settings

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def validate_submission(self, submission: SuperheroSubmission) -> None:
        """
        Check the image batch before any store call.

        Raises:
            TooManyImagesError: More than MAX_IMAGES_PER_BATCH images
            InvalidImageError: Empty, oversized or disallowed image
        """
        max_images = self.settings.MAX_IMAGES_PER_BATCH
        if len(submission.images) > max_images:
            raise TooManyImagesError(len(submission.images), max_images)

        allowed = self.settings.allowed_image_types_list
        for image in submission.images:
            if image.size == 0:
                raise InvalidImageError(image.filename, "file is empty")
            if image.content_type.lower() not in allowed:
                raise InvalidImageError(
                    image.filename,
                    f"content type {image.content_type} is not allowed",
                    allowed=allowed,
                )
            if image.size > self.settings.max_image_size_bytes:
                raise InvalidImageError(
                    image.filename,
                    f"file is larger than {self.settings.MAX_IMAGE_SIZE_MB}MB",
                )

    def _upload_batch(self, images: list[ImageUpload]) -> list[str]:
        """
        Upload images one by one, keeping request order.

        On the first failure the URLs uploaded so far are deleted again
        and the failure is raised as ImageUploadError.
        """
        urls: list[str] = []
        for image in images:
            try:
                urls.append(self.media_store.upload(image))
            except Exception as e:
                logger.error(
                    f"Upload {len(urls) + 1}/{len(images)} failed, "
                    f"discarding {len(urls)} uploaded images"
                )
                self._discard_uploads(urls)
                if isinstance(e, ImageUploadError):
                    raise
                raise ImageUploadError(str(e), filename=image.filename) from e
        return urls

    def _discard_uploads(self, urls: list[str]) -> None:
        """Best-effort delete; failures are logged and swallowed."""
        for url in urls:
            try:
                self.media_store.delete(url)
            except Exception as e:
                logger.warning(f"Could not clean up orphaned image {url}: {e}")

    def _call_store(self, operation: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except SuperheroCatalogException:
            raise
        except Exception as e:
            logger.error(f"Record store failed during {operation}: {e}")
            raise RecordStoreError(operation, str(e)) from e

    def _write_or_discard(self, operation: str, urls: list[str], fn: Callable[..., Any], *args: Any) -> Any:
        """
        Run a record write that will reference freshly uploaded urls.

        If the write fails the uploads are discarded. A timeout is the
        exception: the write may have landed, so the images are kept.
        """
        try:
            return self._call_store(operation, fn, *args)
        except StoreTimeout:
            if urls:
                logger.warning(f"{operation} timed out; keeping {len(urls)} uploaded images")
            raise
        except RecordStoreError:
            self._discard_uploads(urls)
            raise

    def _fetch_or_raise(self, superhero_id: str) -> dict[str, Any]:
        row = self._call_store("fetch", self.record_store.fetch, superhero_id)
        if row is None:
            raise SuperheroNotFoundError(superhero_id)
        return row

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def create_superhero(self, submission: SuperheroSubmission) -> SuperheroRecord:
        """
        Create a superhero with 0..MAX_IMAGES_PER_BATCH images.

        Args:
            submission: Validated fields plus the image batch

        Returns:
            The persisted record, including id and created_at

        Raises:
            TooManyImagesError / InvalidImageError: Before any store call
            ImageUploadError: An upload failed; nothing was created
            RecordStoreError: The insert failed
        """
        self.validate_submission(submission)

        urls = self._upload_batch(submission.images)
        values = {**submission.hero.model_dump(), "images": urls}

        row = self._write_or_discard("insert", urls, self.record_store.insert, values)
        record = SuperheroRecord.model_validate(row)

        logger.info(f"Created superhero: {record.id} ({len(urls)} images)")
        return record

    def update_superhero(
        self,
        superhero_id: str,
        submission: SuperheroSubmission,
    ) -> SuperheroRecord:
        """
        Replace the descriptive fields and append new images.

        Existing images are kept in order; the new batch goes after them.

        Raises:
            SuperheroNotFoundError: The id doesn't exist (new uploads are
                left in storage)
            ImageUploadError: An upload failed; nothing was changed
            RecordStoreError: The lookup or the update failed; the new
                uploads are discarded unless the update timed out
        """
        self.validate_submission(submission)

        new_urls = self._upload_batch(submission.images)

        try:
            existing = self._call_store("fetch", self.record_store.fetch, superhero_id)
        except RecordStoreError:
            # Nothing references the batch yet
            self._discard_uploads(new_urls)
            raise

        if existing is None:
            if new_urls:
                logger.warning(
                    f"Superhero {superhero_id} not found after upload; "
                    f"{len(new_urls)} images left orphaned"
                )
            raise SuperheroNotFoundError(superhero_id)

        row = self._write_or_discard(
            "update",
            new_urls,
            self.record_store.update,
            superhero_id,
            submission.hero.model_dump(),
            new_urls,
        )
        if row is None:
            # Deleted between the fetch and the update
            raise SuperheroNotFoundError(superhero_id)

        record = SuperheroRecord.model_validate(row)
        logger.info(f"Updated superhero: {record.id} (+{len(new_urls)} images, {len(record.images)} total)")
        return record

    def remove_image(self, superhero_id: str, url: str) -> ImageList:
        """
        Remove one image from a superhero.

        The storage object is deleted first; the reference is dropped only
        once the object is gone. A URL the record doesn't reference is a
        no-op and never reaches storage.

        Raises:
            SuperheroNotFoundError: The id doesn't exist
            ImageDeleteError: Storage refused the delete; record unchanged
        """
        if not url or not url.strip():
            raise InvalidSuperheroError(["url: must not be blank"])

        row = self._fetch_or_raise(superhero_id)
        images = row.get("images") or []

        if url not in images:
            logger.debug(f"Image not attached to superhero {superhero_id}, nothing to remove")
            return ImageList(id=str(row["id"]), images=images)

        try:
            self.media_store.delete(url)
        except ImageDeleteError:
            raise
        except Exception as e:
            logger.error(f"Failed to delete image {url}: {e}")
            raise ImageDeleteError(url, str(e)) from e

        updated = self._call_store("remove_image", self.record_store.remove_image, superhero_id, url)
        if updated is None:
            raise SuperheroNotFoundError(superhero_id)

        remaining = updated.get("images") or []
        logger.info(f"Removed image from superhero {superhero_id}, {len(remaining)} left")
        return ImageList(id=str(updated["id"]), images=remaining)

    def list_superheroes(self, page: Any = None, limit: Any = None) -> SuperheroPage:
        """
        List superheroes, newest first.

        Args:
            page: Page number (1-indexed); junk or <= 0 means 1
            limit: Page size; junk or <= 0 means DEFAULT_PAGE_LIMIT

        Returns:
            SuperheroPage with records, total, page, pages
        """
        page = _coerce_positive(page, 1)
        limit = _coerce_positive(limit, self.settings.DEFAULT_PAGE_LIMIT)
        skip = (page - 1) * limit

        total = self._call_store("count", self.record_store.count)
        rows = self._call_store("list", self.record_store.list_page, skip, limit) if skip < total else []

        return SuperheroPage(
            records=[SuperheroRecord.model_validate(row) for row in rows],
            total=total,
            page=page,
            pages=math.ceil(total / limit),
        )

    def get_superhero(self, superhero_id: str) -> SuperheroRecord:
        """
        Get a superhero by ID.

        Raises:
            SuperheroNotFoundError: If the superhero doesn't exist
        """
        return SuperheroRecord.model_validate(self._fetch_or_raise(superhero_id))

    def delete_superhero(self, superhero_id: str) -> DeleteConfirmation:
        """
        Delete a superhero.

        Its images stay in storage unless DELETE_MEDIA_ON_RECORD_DELETE is
        set, in which case they are removed best-effort.

        Raises:
            SuperheroNotFoundError: If the superhero doesn't exist
        """
        row = self._call_store("delete", self.record_store.delete, superhero_id)
        if row is None:
            raise SuperheroNotFoundError(superhero_id)

        if self.settings.DELETE_MEDIA_ON_RECORD_DELETE:
            self._discard_uploads(row.get("images") or [])

        logger.info(f"Deleted superhero: {superhero_id}")
        return DeleteConfirmation(id=str(row["id"]))
