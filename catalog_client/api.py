# =============================================================================
# catalog_client/api.py - HTTP Client for the Superhero Catalog API
# =============================================================================
# Async httpx wrapper around the /resources endpoints. Responses are parsed
# into the same pydantic models the server returns; error responses become
# SuperheroApiError carrying the server's code and message.
#
# Usage:
#   async with SuperheroApiClient() as api:
#       page = await api.list_superheroes(page=1)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import httpx

from catalog_client.config import get_client_settings
from core.models.superhero import (
    DeleteConfirmation,
    ImageList,
    ImageUpload,
    SuperheroFields,
    SuperheroPage,
    SuperheroRecord,
)

logger = logging.getLogger(__name__)

RESOURCE_PATH = "/resources"


class SuperheroApiError(Exception):
    """
    Error returned by (or while talking to) the Superhero Catalog API.

    Attributes:
        message: Human-readable message, suitable for showing to a user
        code: Server error code (e.g. SUPERHERO_NOT_FOUND) or a local one
            (TIMEOUT, NETWORK_ERROR)
        status_code: HTTP status, None if no response was received
    """

    def __init__(
        self,
        message: str,
        code: str = "API_ERROR",
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": self.details,
        }

    @classmethod
    def from_response(cls, response: httpx.Response) -> SuperheroApiError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return cls(
            message=body.get("detail") or response.reason_phrase or "Request failed",
            code=body.get("code", "API_ERROR"),
            status_code=response.status_code,
            details=body.get("details"),
        )


class SuperheroApiClient:
    """
    Async client for the Superhero Catalog API.

    Args:
        base_url: API root, defaults to SUPERHERO_API_URL
        page_limit: Records per list page, defaults to SUPERHERO_PAGE_LIMIT
        http_client: Pre-built httpx.AsyncClient (tests pass one bound to
            the ASGI app)
    """

    def __init__(
        self,
        base_url: str | None = None,
        page_limit: int | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        settings = get_client_settings()
        self.page_limit = page_limit or settings.SUPERHERO_PAGE_LIMIT
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url or settings.SUPERHERO_API_URL,
            timeout=settings.SUPERHERO_API_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> SuperheroApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise SuperheroApiError(f"{method} {path} timed out", code="TIMEOUT") from e
        except httpx.HTTPError as e:
            raise SuperheroApiError(f"{method} {path} failed: {e}", code="NETWORK_ERROR") from e

        if response.is_error:
            error = SuperheroApiError.from_response(response)
            logger.debug(f"{method} {path} -> {response.status_code} {error.code}")
            raise error
        return response.json()

    @staticmethod
    def _multipart(
        hero: SuperheroFields,
        images: list[ImageUpload] | None,
    ) -> dict[str, Any]:
        data = {
            "nickname": hero.nickname,
            "real_name": hero.real_name,
            "origin_description": hero.origin_description,
            "catch_phrase": hero.catch_phrase,
            "superpowers": list(hero.superpowers),
        }
        files = [
            ("images", (image.filename, image.data, image.content_type))
            for image in images or []
        ]
        return {"data": data, "files": files or None}

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    async def list_superheroes(self, page: int = 1) -> SuperheroPage:
        body = await self._request(
            "GET", RESOURCE_PATH, params={"page": page, "limit": self.page_limit}
        )
        return SuperheroPage.model_validate(body)

    async def get_superhero(self, superhero_id: str) -> SuperheroRecord:
        body = await self._request("GET", f"{RESOURCE_PATH}/{superhero_id}")
        return SuperheroRecord.model_validate(body)

    async def create_superhero(
        self,
        hero: SuperheroFields,
        images: list[ImageUpload] | None = None,
    ) -> SuperheroRecord:
        body = await self._request("POST", RESOURCE_PATH, **self._multipart(hero, images))
        return SuperheroRecord.model_validate(body)

    async def update_superhero(
        self,
        superhero_id: str,
        hero: SuperheroFields,
        images: list[ImageUpload] | None = None,
    ) -> SuperheroRecord:
        body = await self._request(
            "PUT", f"{RESOURCE_PATH}/{superhero_id}", **self._multipart(hero, images)
        )
        return SuperheroRecord.model_validate(body)

    async def delete_superhero(self, superhero_id: str) -> DeleteConfirmation:
        body = await self._request("DELETE", f"{RESOURCE_PATH}/{superhero_id}")
        return DeleteConfirmation.model_validate(body)

    async def remove_image(self, superhero_id: str, url: str) -> ImageList:
        body = await self._request(
            "DELETE", f"{RESOURCE_PATH}/{superhero_id}/image", params={"url": url}
        )
        return ImageList.model_validate(body)
