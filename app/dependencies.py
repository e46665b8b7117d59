# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# The SuperheroService is built once from the cached Settings and reused by
# every request. Tests swap it out with app.dependency_overrides.
# =============================================================================

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config import get_settings
from core.services import SupabaseMediaStore, SupabaseRecordStore, SuperheroService


@lru_cache
def get_superhero_service() -> SuperheroService:
    """
    Get the SuperheroService instance.

    Wires the Supabase-backed record and media stores to the settings.
    """
    settings = get_settings()
    return SuperheroService(
        record_store=SupabaseRecordStore(settings),
        media_store=SupabaseMediaStore(settings),
        settings=settings,
    )


# Type alias for dependency injection
SuperheroServiceDep = Annotated[SuperheroService, Depends(get_superhero_service)]
