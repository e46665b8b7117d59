# =============================================================================
# app/routers/superheroes.py - Superhero CRUD Endpoints
# =============================================================================
# Thin HTTP mapping onto SuperheroService:
#   POST   /resources                 create (multipart, up to 5 images)
#   PUT    /resources/{id}            full field update + new images
#   GET    /resources?page&limit      paginated list, newest first
#   GET    /resources/{id}            fetch one
#   DELETE /resources/{id}            delete
#   DELETE /resources/{id}/image?url  remove one image
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, Path, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from app.dependencies import SuperheroServiceDep
from app.exceptions import InvalidSuperheroError
from core.models.superhero import (
    DeleteConfirmation,
    ImageList,
    ImageUpload,
    SuperheroFields,
    SuperheroPage,
    SuperheroRecord,
    SuperheroSubmission,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

async def _read_images(files: list[UploadFile] | None) -> list[ImageUpload]:
    """Read multipart image parts, skipping empty 'no file chosen' parts."""
    images = []
    for file in files or []:
        data = await file.read()
        if not file.filename and not data:
            continue
        images.append(
            ImageUpload(
                filename=file.filename or "image",
                content_type=file.content_type or "application/octet-stream",
                data=data,
            )
        )
    return images


def _build_fields(**values) -> SuperheroFields:
    """Validate form fields, reporting problems as InvalidSuperheroError."""
    try:
        return SuperheroFields(**values)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise InvalidSuperheroError(errors) from e


async def _build_submission(
    nickname: str | None,
    real_name: str | None,
    origin_description: str | None,
    catch_phrase: str | None,
    superpowers: list[str] | None,
    images: list[UploadFile] | None,
) -> SuperheroSubmission:
    hero = _build_fields(
        nickname=nickname,
        real_name=real_name,
        origin_description=origin_description,
        catch_phrase=catch_phrase,
        superpowers=superpowers or [],
    )
    return SuperheroSubmission(hero=hero, images=await _read_images(images))


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", response_model=SuperheroRecord)
async def create_superhero(
    service: SuperheroServiceDep,
    nickname: Annotated[str | None, Form()] = None,
    real_name: Annotated[str | None, Form()] = None,
    origin_description: Annotated[str | None, Form()] = None,
    catch_phrase: Annotated[str | None, Form()] = None,
    superpowers: Annotated[list[str] | None, Form(description="Repeat once per superpower")] = None,
    images: Annotated[list[UploadFile] | None, File(description="Up to 5 images")] = None,
):
    """
    Create a new superhero.

    Images are uploaded to storage in the order they were sent; if any
    upload fails nothing is created.
    """
    submission = await _build_submission(
        nickname, real_name, origin_description, catch_phrase, superpowers, images
    )
    logger.info(f"Creating superhero {submission.hero.nickname} with {len(submission.images)} images")
    return await run_in_threadpool(service.create_superhero, submission)


@router.get("", response_model=SuperheroPage)
def list_superheroes(
    service: SuperheroServiceDep,
    page: Annotated[str | None, Query(description="Page number (1-indexed)")] = None,
    limit: Annotated[str | None, Query(description="Items per page")] = None,
):
    """
    List superheroes with pagination, newest first.

    Missing or invalid page/limit values fall back to the defaults.
    A page past the end returns an empty list.
    """
    return service.list_superheroes(page=page, limit=limit)


@router.get("/{superhero_id}", response_model=SuperheroRecord)
def get_superhero(
    superhero_id: Annotated[str, Path(description="Superhero id")],
    service: SuperheroServiceDep,
):
    """Get a single superhero."""
    return service.get_superhero(superhero_id)


@router.put("/{superhero_id}", response_model=SuperheroRecord)
async def update_superhero(
    superhero_id: Annotated[str, Path(description="Superhero id")],
    service: SuperheroServiceDep,
    nickname: Annotated[str | None, Form()] = None,
    real_name: Annotated[str | None, Form()] = None,
    origin_description: Annotated[str | None, Form()] = None,
    catch_phrase: Annotated[str | None, Form()] = None,
    superpowers: Annotated[list[str] | None, Form(description="Repeat once per superpower")] = None,
    images: Annotated[list[UploadFile] | None, File(description="Up to 5 new images")] = None,
):
    """
    Update a superhero.

    All text fields are replaced. New images are appended after the
    existing ones; existing images are only removed via
    DELETE /resources/{id}/image.
    """
    submission = await _build_submission(
        nickname, real_name, origin_description, catch_phrase, superpowers, images
    )
    return await run_in_threadpool(service.update_superhero, superhero_id, submission)


@router.delete("/{superhero_id}", response_model=DeleteConfirmation)
def delete_superhero(
    superhero_id: Annotated[str, Path(description="Superhero id")],
    service: SuperheroServiceDep,
):
    """
    Delete a superhero.

    The superhero's images are not removed from storage.
    """
    return service.delete_superhero(superhero_id)


@router.delete("/{superhero_id}/image", response_model=ImageList)
def remove_image(
    superhero_id: Annotated[str, Path(description="Superhero id")],
    url: Annotated[str, Query(min_length=1, description="URL of the image to remove")],
    service: SuperheroServiceDep,
):
    """
    Remove one image from a superhero.

    The image is deleted from storage first; if that fails the superhero
    is left unchanged (502).
    """
    return service.remove_image(superhero_id, url)
