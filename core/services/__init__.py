# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .media_store import MediaStore, SupabaseMediaStore
from .record_store import RecordStore, SupabaseRecordStore
from .superhero_service import SuperheroService

__all__ = [
    "MediaStore",
    "RecordStore",
    "SupabaseMediaStore",
    "SupabaseRecordStore",
    "SuperheroService",
]
