#!/usr/bin/env python3
# =============================================================================
# scripts/demo_catalog.py - Walk a Superhero Through Its Lifecycle
# =============================================================================
# Talks to a running API through catalog_client: create with two images,
# append a third, remove one, then delete. Prints the client-side state
# after every step.
#
# Usage:
#   poetry run uvicorn app.main:app --port 5501
#   poetry run python scripts/demo_catalog.py [image.png ...]
# =============================================================================

import asyncio
import mimetypes
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from catalog_client import SuperheroApiClient, SuperheroApiError, SuperheroState, SuperheroStore
from core.models.superhero import ImageUpload, SuperheroFields

# 1x1 transparent PNG, used when no image paths are given
PIXEL_PNG = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)


def load_images(paths: list[str]) -> list[ImageUpload]:
    if not paths:
        return [
            ImageUpload(filename=f"pixel-{name}.png", content_type="image/png", data=PIXEL_PNG)
            for name in ("a", "b", "c")
        ]

    images = []
    for path in paths:
        with open(path, "rb") as f:
            images.append(
                ImageUpload(
                    filename=os.path.basename(path),
                    content_type=mimetypes.guess_type(path)[0] or "application/octet-stream",
                    data=f.read(),
                )
            )
    return images


def print_state(state: SuperheroState) -> None:
    selected = state.selected.nickname if state.selected else "-"
    print(
        f"  [{state.status.value}] page {state.page}/{state.pages}, "
        f"{len(state.items)} listed of {state.total}, selected: {selected}"
    )


async def main(paths: list[str]) -> int:
    images = load_images(paths)
    first, rest = images[:2], images[2:3]

    hero = SuperheroFields(
        nickname="Nightcrawler",
        real_name="Kurt Wagner",
        origin_description="Born in Bavaria to the shapeshifter Mystique.",
        superpowers=["teleportation", "wall-crawling"],
        catch_phrase="Bamf!",
    )

    async with SuperheroApiClient() as api:
        store = SuperheroStore(api)
        store.subscribe(print_state)

        try:
            print("\nFetching first page...")
            await store.fetch_page(1)

            print(f"\nCreating {hero.nickname} with {len(first)} images...")
            created = await store.create(hero, first)
            await store.wait_for_background()
            print(f"  id: {created.id}")
            for url in created.images:
                print(f"  image: {url}")

            print(f"\nAppending {len(rest)} image(s)...")
            updated = await store.update(created.id, hero, rest)
            print(f"  {len(updated.images)} images")

            if len(updated.images) > 1:
                print("\nRemoving the second image...")
                remaining = await store.remove_image(created.id, updated.images[1])
                print(f"  {len(remaining)} images left")

            print("\nDeleting...")
            await store.delete(created.id)

        except SuperheroApiError as e:
            print(f"\nAPI error: {e}")
            if e.details:
                print(f"  details: {e.details}")
            return 1

    print("\nDone.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
