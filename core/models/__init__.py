# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - superhero.py: Superhero fields, records, pages and small responses
#
# These models define the "contract" between API and clients; the client
# package reuses them to parse server responses.
# =============================================================================

from .superhero import (
    DeleteConfirmation,
    ImageList,
    ImageUpload,
    SuperheroFields,
    SuperheroPage,
    SuperheroRecord,
    SuperheroSubmission,
)

__all__ = [
    "DeleteConfirmation",
    "ImageList",
    "ImageUpload",
    "SuperheroFields",
    "SuperheroPage",
    "SuperheroRecord",
    "SuperheroSubmission",
]
