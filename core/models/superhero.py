# =============================================================================
# core/models/superhero.py - Superhero Schemas
# =============================================================================
# These models define the API contract for superhero operations:
# - SuperheroFields: The five descriptive fields (create and full update)
# - ImageUpload: One binary image part of a multipart request
# - SuperheroSubmission: Fields plus the batch of new images
# - SuperheroRecord: A persisted superhero as returned to clients
# - SuperheroPage: One page of the catalog listing
# - ImageList / DeleteConfirmation: Small responses for image removal and delete
#
# A superhero's images only grow through create/update and shrink one at a
# time through image removal; clients never send a replacement image list.
# =============================================================================

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Suffixes accepted as a storage file extension
EXTENSION_PATTERN = re.compile(r"[a-z0-9]{1,10}")


class SuperheroFields(BaseModel):
    """
    The descriptive fields of a superhero.

    Text fields are stripped and must not be blank. Superpowers keep their
    submitted order and duplicates; a blank entry is rejected like any
    other blank field.

    Example:
        {
            "nickname": "Nightcrawler",
            "real_name": "Kurt Wagner",
            "origin_description": "Born with a demonic appearance...",
            "superpowers": ["teleportation", "wall-crawling"],
            "catch_phrase": "Bamf!"
        }
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    nickname: str = Field(..., min_length=1, max_length=255)
    real_name: str = Field(..., min_length=1, max_length=255)
    origin_description: str = Field(..., min_length=1)
    catch_phrase: str = Field(..., min_length=1)

    # Display order == submission order
    superpowers: list[str] = Field(
        default_factory=list,
        description="Ordered list of superpowers (may be empty)"
    )

    @field_validator("superpowers", mode="before")
    @classmethod
    def _reject_blank_superpowers(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        powers = [str(power).strip() for power in value]
        if any(not power for power in powers):
            raise ValueError("superpowers must not contain blank entries")
        return powers


class ImageUpload(BaseModel):
    """One image part of a create/update request."""

    filename: str = Field(default="image")
    content_type: str = Field(default="application/octet-stream")
    data: bytes = Field(..., repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """
        File extension including the dot.

        Only short alphanumeric suffixes count; anything else (no dot,
        path separators, odd characters) gives ''.
        """
        if "." not in self.filename:
            return ""
        suffix = self.filename.rsplit(".", 1)[-1].lower()
        return f".{suffix}" if EXTENSION_PATTERN.fullmatch(suffix) else ""


class SuperheroSubmission(BaseModel):
    """
    A validated create/update request.

    The image batch size is checked by the SuperheroService against
    MAX_IMAGES_PER_BATCH before any store call.
    """

    hero: SuperheroFields
    images: list[ImageUpload] = Field(default_factory=list)


class SuperheroRecord(BaseModel):
    """
    Schema for returning superhero data to clients.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "nickname": "Nightcrawler",
            "real_name": "Kurt Wagner",
            "origin_description": "...",
            "superpowers": ["teleportation"],
            "catch_phrase": "Bamf!",
            "images": ["https://xxx.supabase.co/storage/v1/object/public/superheroes/superheroes/ab12.png"],
            "created_at": "2024-01-15T10:30:00Z",
            "updated_at": "2024-01-15T10:30:00Z"
        }
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    nickname: str
    real_name: str
    origin_description: str
    catch_phrase: str
    superpowers: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value):
        return str(value)

    @field_validator("superpowers", "images", mode="before")
    @classmethod
    def _null_list_as_empty(cls, value):
        # Postgres arrays come back as null when never written
        return [] if value is None else value


class SuperheroPage(BaseModel):
    """
    One page of the catalog, newest first.

    Example:
        {"records": [...], "total": 12, "page": 1, "pages": 3}
    """

    records: list[SuperheroRecord] = Field(default_factory=list)
    total: int = Field(default=0, ge=0, description="Total number of superheroes")
    page: int = Field(default=1, ge=1, description="Current page number (1-indexed)")
    pages: int = Field(default=0, ge=0, description="ceil(total / limit)")


class ImageList(BaseModel):
    """Images left on a superhero after removing one."""

    id: str
    images: list[str] = Field(default_factory=list)


class DeleteConfirmation(BaseModel):
    """Returned by DELETE /resources/{id}."""

    id: str
    message: str = Field(default="Superhero deleted")
