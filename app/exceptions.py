# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every failure the SuperheroService can report is one of the classes below;
# driver exceptions from Supabase are translated before they leave the
# store adapters.
#
#   Validation      -> 400  InvalidSuperheroError, TooManyImagesError, InvalidImageError
#   Upload failure  -> 500  ImageUploadError, MediaUploadTimeout
#   Not found       -> 404  SuperheroNotFoundError
#   Media delete    -> 502  ImageDeleteError
#   Store failure   -> 500  RecordStoreError, StoreTimeout
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class SuperheroCatalogException(Exception):
    """
    Base exception for the Superhero Catalog API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPERHERO_CATALOG_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Validation Exceptions
# =============================================================================

class InvalidSuperheroError(SuperheroCatalogException):
    """Raised when submitted superhero fields are missing or empty."""

    def __init__(self, errors: list[str]):
        super().__init__(
            message=f"Invalid superhero data: {'; '.join(errors)}",
            code="INVALID_SUPERHERO",
            status_code=400,
            suggestion="nickname, real_name, origin_description and catch_phrase are required and must not be blank",
            details={"errors": errors}
        )


class TooManyImagesError(SuperheroCatalogException):
    """Raised when a single create/update carries more images than allowed."""

    def __init__(self, count: int, max_images: int):
        super().__init__(
            message=f"Too many images: {count} (max: {max_images} per request)",
            code="TOO_MANY_IMAGES",
            status_code=400,
            suggestion=f"Send at most {max_images} images, then add more with another update",
            details={"count": count, "max_images": max_images}
        )


class InvalidImageError(SuperheroCatalogException):
    """Raised when an image part has a disallowed type, is empty or too large."""

    def __init__(self, filename: str, reason: str, allowed: list[str] | None = None):
        details: dict[str, Any] = {"filename": filename, "reason": reason}
        if allowed:
            details["allowed_types"] = allowed
        super().__init__(
            message=f"Invalid image {filename}: {reason}",
            code="INVALID_IMAGE",
            status_code=400,
            suggestion="Upload non-empty JPEG, PNG, GIF or WebP files within the size limit",
            details=details
        )


# =============================================================================
# Record Exceptions
# =============================================================================

class SuperheroNotFoundError(SuperheroCatalogException):
    """Raised when a superhero ID doesn't exist."""

    def __init__(self, superhero_id: str):
        super().__init__(
            message=f"Superhero not found: {superhero_id}",
            code="SUPERHERO_NOT_FOUND",
            status_code=404,
            suggestion="Check that the id is correct and the superhero hasn't been deleted",
            details={"id": superhero_id}
        )


class RecordStoreError(SuperheroCatalogException):
    """Raised when the record store rejects or fails an operation."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Record store failed during {operation}: {error}",
            code="RECORD_STORE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"operation": operation, "error": error}
        )


class StoreTimeout(RecordStoreError):
    """Raised when a record store call doesn't finish in time."""

    def __init__(self, operation: str, timeout_seconds: float | None = None):
        super().__init__(operation, f"timed out after {timeout_seconds}s" if timeout_seconds else "timed out")
        self.code = "STORE_TIMEOUT"


# =============================================================================
# Media Exceptions
# =============================================================================

class ImageUploadError(SuperheroCatalogException):
    """Raised when an image upload to storage fails."""

    def __init__(self, error: str, filename: str | None = None):
        details: dict[str, Any] = {"error": error}
        if filename:
            details["filename"] = filename
        super().__init__(
            message=f"Failed to upload image to storage: {error}",
            code="IMAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="No changes were saved. Try again later",
            details=details
        )


class MediaUploadTimeout(ImageUploadError):
    """Raised when an image upload doesn't finish in time."""

    def __init__(self, filename: str | None = None, timeout_seconds: float | None = None):
        super().__init__(
            f"timed out after {timeout_seconds}s" if timeout_seconds else "timed out",
            filename=filename,
        )
        self.code = "MEDIA_UPLOAD_TIMEOUT"


class ImageDeleteError(SuperheroCatalogException):
    """Raised when an image can't be removed from storage."""

    def __init__(self, url: str, error: str):
        super().__init__(
            message=f"Failed to delete image from storage: {error}",
            code="IMAGE_DELETE_ERROR",
            status_code=502,
            suggestion="The superhero was left unchanged. Try removing the image again",
            details={"url": url, "error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def superhero_catalog_exception_handler(
    request: Request,
    exc: SuperheroCatalogException
) -> JSONResponse:
    """
    Convert SuperheroCatalogException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request validation errors raised by FastAPI.

    Malformed multipart bodies are bad input, so they share the 400 status
    used by InvalidSuperheroError.
    """
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
