# =============================================================================
# core/services/record_store.py - Record Store Adapter
# =============================================================================
# Wraps the Supabase "superheroes" table behind a small CRUD + listing
# interface. No business rules live here: the SuperheroService decides what
# to write, this module only knows how.
#
# Image list edits go through two SQL functions (see sql/superheroes.sql)
# so that "append new uploads" and "remove one url" are single atomic
# statements and can't undo each other when they race.
# =============================================================================

import logging
from typing import Any, Callable, Protocol

import httpx

from app.config import Settings
from app.exceptions import RecordStoreError, StoreTimeout
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """
    Persistence capability used by the SuperheroService.

    Rows are plain dicts with the columns of the superheroes table.
    Lookups by an unknown (or malformed) id return None.
    """

    def insert(self, values: dict[str, Any]) -> dict[str, Any]: ...

    def fetch(self, record_id: str) -> dict[str, Any] | None: ...

    def update(
        self,
        record_id: str,
        values: dict[str, Any],
        new_images: list[str],
    ) -> dict[str, Any] | None: ...

    def remove_image(self, record_id: str, url: str) -> dict[str, Any] | None: ...

    def delete(self, record_id: str) -> dict[str, Any] | None: ...

    def count(self) -> int: ...

    def list_page(self, skip: int, limit: int) -> list[dict[str, Any]]: ...

    def ping(self) -> None: ...


class SupabaseRecordStore:
    """
    RecordStore backed by a Supabase (PostgREST) table.

    Every driver exception is translated into RecordStoreError, or
    StoreTimeout when the configured STORE_TIMEOUT_SECONDS is exceeded.
    """

    def __init__(self, settings: Settings, client: Any | None = None):
        self.settings = settings
        self.table_name = settings.SUPERHEROES_TABLE
        self._client = client

    @property
    def client(self) -> Any:
        return self._client or SupabaseClient.get_client()

    def _table(self):
        return self.client.table(self.table_name)

    def _run(
        self,
        operation: str,
        request: Callable[[], Any],
        missing_ok: bool = False,
    ) -> Any:
        """Execute one PostgREST request, translating failures."""
        try:
            return request()
        except httpx.TimeoutException as e:
            logger.error(f"Record store timed out during {operation}: {e}")
            raise StoreTimeout(operation, self.settings.STORE_TIMEOUT_SECONDS) from e
        except Exception as e:
            if missing_ok and SupabaseClient.is_no_rows_error(e):
                return None
            logger.error(f"Record store failed during {operation}: {e}")
            raise RecordStoreError(operation, str(e)) from e

    @staticmethod
    def _first_row(response: Any) -> dict[str, Any] | None:
        if response is None or not response.data:
            return None
        data = response.data
        return data[0] if isinstance(data, list) else data

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        response = self._run(
            "insert",
            lambda: self._table().insert(values).execute(),
        )
        row = self._first_row(response)
        if row is None:
            raise RecordStoreError("insert", "insert returned no data")
        return row

    def fetch(self, record_id: str) -> dict[str, Any] | None:
        if not SupabaseClient.is_valid_uuid(record_id):
            return None

        response = self._run(
            "fetch",
            lambda: (
                self._table()
                .select("*")
                .eq("id", str(record_id))
                .single()
                .execute()
            ),
            missing_ok=True,
        )
        return self._first_row(response)

    def update(
        self,
        record_id: str,
        values: dict[str, Any],
        new_images: list[str],
    ) -> dict[str, Any] | None:
        """Replace the descriptive fields and append new_images in one statement."""
        if not SupabaseClient.is_valid_uuid(record_id):
            return None

        response = self._run(
            "update",
            lambda: self.client.rpc(
                "update_superhero",
                {
                    "record_id": str(record_id),
                    "changes": values,
                    "new_images": list(new_images),
                },
            ).execute(),
        )
        return self._first_row(response)

    def remove_image(self, record_id: str, url: str) -> dict[str, Any] | None:
        """Filter every occurrence of url out of the record's images."""
        if not SupabaseClient.is_valid_uuid(record_id):
            return None

        response = self._run(
            "remove_image",
            lambda: self.client.rpc(
                "remove_superhero_image",
                {"record_id": str(record_id), "image_url": url},
            ).execute(),
        )
        return self._first_row(response)

    def delete(self, record_id: str) -> dict[str, Any] | None:
        if not SupabaseClient.is_valid_uuid(record_id):
            return None

        response = self._run(
            "delete",
            lambda: self._table().delete().eq("id", str(record_id)).execute(),
        )
        return self._first_row(response)

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def count(self) -> int:
        response = self._run(
            "count",
            lambda: self._table().select("id", count="exact").limit(1).execute(),
        )
        return response.count or 0

    def list_page(self, skip: int, limit: int) -> list[dict[str, Any]]:
        """Newest first; PostgREST ranges are inclusive on both ends."""
        response = self._run(
            "list",
            lambda: (
                self._table()
                .select("*")
                .order("created_at", desc=True)
                .range(skip, skip + limit - 1)
                .execute()
            ),
        )
        return response.data or []

    def ping(self) -> None:
        self._run("ping", lambda: self._table().select("id").limit(1).execute())
