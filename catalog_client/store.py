# =============================================================================
# catalog_client/store.py - Client-Side Superhero State
# =============================================================================
# A small normalized cache of what a UI shows: the current list page, its
# pagination numbers and one "selected" superhero.
#
# State only changes after the server confirms an action; a failed action
# raises SuperheroApiError and leaves the state as it was. After a create
# the new superhero is prepended locally and page 1 is re-fetched in the
# background to put it where the server sorts it.
#
# Usage:
#   store = SuperheroStore(SuperheroApiClient())
#   await store.fetch_page(1)
#   store.subscribe(lambda state: render(state))
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from catalog_client.api import SuperheroApiClient, SuperheroApiError
from core.models.superhero import (
    ImageUpload,
    SuperheroFields,
    SuperheroPage,
    SuperheroRecord,
)

logger = logging.getLogger(__name__)

Listener = Callable[["SuperheroState"], None]


class RequestStatus(str, Enum):
    """
    Status of the last fetch (list or single).

    Flow: idle -> loading -> succeeded | failed
    """
    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class SuperheroState:
    """Everything the UI renders from."""
    items: list[SuperheroRecord] = field(default_factory=list)
    selected: SuperheroRecord | None = None
    total: int = 0
    pages: int = 0
    page: int = 1
    status: RequestStatus = RequestStatus.IDLE
    error: dict[str, Any] | None = None


class SuperheroStore:
    """
    Client-side cache kept in sync with the API.

    Actions are independent coroutines; the store doesn't serialize them.
    Preventing double submission of one action is left to the UI.
    """

    def __init__(self, api: SuperheroApiClient):
        self.api = api
        self.state = SuperheroState()
        self._listeners: list[Listener] = []
        self._background: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception:
                logger.exception("State listener failed")

    def _fail(self, error: SuperheroApiError) -> None:
        self.state.status = RequestStatus.FAILED
        self.state.error = error.to_dict()
        self._notify()

    def _start_loading(self) -> None:
        self.state.status = RequestStatus.LOADING
        self.state.error = None
        self._notify()

    # -------------------------------------------------------------------------
    # Background refresh
    # -------------------------------------------------------------------------

    def _schedule_refresh(self) -> None:
        task = asyncio.create_task(self._refresh_first_page())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _refresh_first_page(self) -> None:
        try:
            await self.fetch_page(1)
        except SuperheroApiError as e:
            logger.warning(f"Background refresh of page 1 failed: {e}")

    async def wait_for_background(self) -> None:
        """Wait until scheduled refreshes have finished."""
        while self._background:
            await asyncio.gather(*list(self._background))

    # -------------------------------------------------------------------------
    # Fetch actions
    # -------------------------------------------------------------------------

    async def fetch_page(self, page: int = 1) -> SuperheroPage:
        """Replace the listed items and pagination with one page from the server."""
        self._start_loading()
        try:
            result = await self.api.list_superheroes(page)
        except SuperheroApiError as e:
            self._fail(e)
            raise

        self.state.items = list(result.records)
        self.state.total = result.total
        self.state.pages = result.pages
        self.state.page = result.page
        self.state.status = RequestStatus.SUCCEEDED
        self._notify()
        return result

    async def fetch_one(self, superhero_id: str) -> SuperheroRecord:
        """Load one superhero into the selected slot."""
        self._start_loading()
        try:
            record = await self.api.get_superhero(superhero_id)
        except SuperheroApiError as e:
            self._fail(e)
            raise

        self.state.selected = record
        self.state.status = RequestStatus.SUCCEEDED
        self._notify()
        return record

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create(
        self,
        hero: SuperheroFields,
        images: list[ImageUpload] | None = None,
    ) -> SuperheroRecord:
        """
        Create a superhero.

        The new record is put at the top of the current list right away,
        even if the server would sort it onto another page; page 1 is then
        re-fetched in the background.
        """
        record = await self.api.create_superhero(hero, images)

        self.state.items.insert(0, record)
        self._notify()
        self._schedule_refresh()
        return record

    async def update(
        self,
        superhero_id: str,
        hero: SuperheroFields,
        images: list[ImageUpload] | None = None,
    ) -> SuperheroRecord:
        """Update a superhero and replace it in the selected slot and the list."""
        record = await self.api.update_superhero(superhero_id, hero, images)

        self.state.selected = record
        self.state.items = [
            record if item.id == record.id else item
            for item in self.state.items
        ]
        self._notify()
        return record

    async def delete(self, superhero_id: str) -> None:
        """Delete a superhero and drop it from the local state."""
        await self.api.delete_superhero(superhero_id)

        self.state.items = [item for item in self.state.items if item.id != superhero_id]
        self.state.total = max(self.state.total - 1, 0)
        if self.state.selected is not None and self.state.selected.id == superhero_id:
            self.state.selected = None
        self._notify()

    async def remove_image(self, superhero_id: str, url: str) -> list[str]:
        """Remove one image; only the images of matching entries change."""
        result = await self.api.remove_image(superhero_id, url)

        self.state.items = [
            item.model_copy(update={"images": list(result.images)}) if item.id == superhero_id else item
            for item in self.state.items
        ]
        selected = self.state.selected
        if selected is not None and selected.id == superhero_id:
            self.state.selected = selected.model_copy(update={"images": list(result.images)})
        self._notify()
        return result.images
