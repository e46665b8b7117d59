# =============================================================================
# tests/test_supabase_stores.py - Supabase Adapter Tests
# =============================================================================
# Tests for SupabaseRecordStore and SupabaseMediaStore against a mocked
# Supabase client:
# - the PostgREST / Storage calls each operation issues
# - translation of driver failures into catalog exceptions
# - public URL <-> storage path mapping
#
# Run with: poetry run pytest tests/test_supabase_stores.py -v
# =============================================================================

from unittest.mock import MagicMock

import httpx
import pytest

from app.exceptions import (
    ImageDeleteError,
    ImageUploadError,
    MediaUploadTimeout,
    RecordStoreError,
    StoreTimeout,
)
from core.services.media_store import SupabaseMediaStore
from core.services.record_store import SupabaseRecordStore
from lib.supabase_client import SupabaseClient
from tests.conftest import make_image

HERO_ID = "550e8400-e29b-41d4-a716-446655440000"
PUBLIC_BASE = "https://test-project.supabase.co/storage/v1/object/public/superheroes/"


def result(data=None, count=None):
    return MagicMock(data=data, count=count)


@pytest.fixture
def mock_client():
    return MagicMock()


@pytest.fixture
def records(settings, mock_client):
    return SupabaseRecordStore(settings, client=mock_client)


@pytest.fixture
def media(settings, mock_client):
    return SupabaseMediaStore(settings, client=mock_client)


# =============================================================================
# SupabaseClient helpers
# =============================================================================

class TestSupabaseClientHelpers:

    @pytest.mark.parametrize("value,expected", [
        (HERO_ID, True),
        ("not-a-uuid", False),
        ("", False),
    ])
    def test_is_valid_uuid(self, value, expected):
        assert SupabaseClient.is_valid_uuid(value) is expected

    def test_is_no_rows_error(self):
        assert SupabaseClient.is_no_rows_error(Exception("{'code': 'PGRST116'}"))
        assert not SupabaseClient.is_no_rows_error(Exception("connection refused"))


# =============================================================================
# Record store
# =============================================================================

class TestSupabaseRecordStore:

    def test_insert(self, records, mock_client):
        row = {"id": HERO_ID, "nickname": "Nightcrawler"}
        mock_client.table.return_value.insert.return_value.execute.return_value = result([row])

        assert records.insert({"nickname": "Nightcrawler"}) == row
        mock_client.table.assert_called_with("superheroes")
        mock_client.table.return_value.insert.assert_called_once_with({"nickname": "Nightcrawler"})

    def test_insert_without_data(self, records, mock_client):
        mock_client.table.return_value.insert.return_value.execute.return_value = result([])

        with pytest.raises(RecordStoreError):
            records.insert({"nickname": "Nightcrawler"})

    def test_fetch(self, records, mock_client):
        row = {"id": HERO_ID}
        chain = mock_client.table.return_value.select.return_value.eq.return_value.single.return_value
        chain.execute.return_value = result(row)

        assert records.fetch(HERO_ID) == row
        mock_client.table.return_value.select.return_value.eq.assert_called_once_with("id", HERO_ID)

    def test_fetch_no_rows(self, records, mock_client):
        chain = mock_client.table.return_value.select.return_value.eq.return_value.single.return_value
        chain.execute.side_effect = Exception("{'code': 'PGRST116', 'message': 'no rows'}")

        assert records.fetch(HERO_ID) is None

    def test_fetch_malformed_id_skips_store(self, records, mock_client):
        assert records.fetch("not-a-uuid") is None
        mock_client.table.assert_not_called()

    def test_fetch_timeout(self, records, mock_client):
        chain = mock_client.table.return_value.select.return_value.eq.return_value.single.return_value
        chain.execute.side_effect = httpx.ReadTimeout("read timed out")

        with pytest.raises(StoreTimeout) as exc_info:
            records.fetch(HERO_ID)
        assert exc_info.value.code == "STORE_TIMEOUT"

    def test_update_calls_atomic_function(self, records, mock_client):
        row = {"id": HERO_ID, "images": ["a", "b", "c"]}
        mock_client.rpc.return_value.execute.return_value = result([row])

        assert records.update(HERO_ID, {"nickname": "Elf"}, ["c"]) == row
        mock_client.rpc.assert_called_once_with(
            "update_superhero",
            {"record_id": HERO_ID, "changes": {"nickname": "Elf"}, "new_images": ["c"]},
        )

    def test_update_missing(self, records, mock_client):
        mock_client.rpc.return_value.execute.return_value = result([])

        assert records.update(HERO_ID, {}, []) is None

    def test_remove_image(self, records, mock_client):
        mock_client.rpc.return_value.execute.return_value = result([{"id": HERO_ID, "images": ["a"]}])

        assert records.remove_image(HERO_ID, "b")["images"] == ["a"]
        mock_client.rpc.assert_called_once_with(
            "remove_superhero_image", {"record_id": HERO_ID, "image_url": "b"}
        )

    def test_delete(self, records, mock_client):
        chain = mock_client.table.return_value.delete.return_value.eq.return_value
        chain.execute.return_value = result([{"id": HERO_ID}])

        assert records.delete(HERO_ID) == {"id": HERO_ID}

    def test_delete_missing(self, records, mock_client):
        chain = mock_client.table.return_value.delete.return_value.eq.return_value
        chain.execute.return_value = result([])

        assert records.delete(HERO_ID) is None

    def test_count(self, records, mock_client):
        chain = mock_client.table.return_value.select.return_value.limit.return_value
        chain.execute.return_value = result([{"id": HERO_ID}], count=12)

        assert records.count() == 12
        mock_client.table.return_value.select.assert_called_once_with("id", count="exact")

    def test_list_page_range_is_inclusive(self, records, mock_client):
        ordered = mock_client.table.return_value.select.return_value.order.return_value
        ordered.range.return_value.execute.return_value = result([{"id": HERO_ID}])

        assert records.list_page(10, 5) == [{"id": HERO_ID}]
        mock_client.table.return_value.select.return_value.order.assert_called_once_with(
            "created_at", desc=True
        )
        ordered.range.assert_called_once_with(10, 14)

    def test_driver_error(self, records, mock_client):
        chain = mock_client.table.return_value.select.return_value.limit.return_value
        chain.execute.side_effect = Exception("connection refused")

        with pytest.raises(RecordStoreError) as exc_info:
            records.count()
        assert exc_info.value.status_code == 500


# =============================================================================
# Media store
# =============================================================================

class TestSupabaseMediaStore:

    def test_upload(self, media, mock_client):
        bucket = mock_client.storage.from_.return_value
        bucket.get_public_url.side_effect = lambda path: f"{PUBLIC_BASE}{path}?"

        url = media.upload(make_image("kurt.png"))

        mock_client.storage.from_.assert_called_with("superheroes")
        kwargs = bucket.upload.call_args.kwargs
        assert kwargs["path"].startswith("superheroes/")
        assert kwargs["path"].endswith(".png")
        assert kwargs["file_options"] == {"content-type": "image/png"}
        assert url == f"{PUBLIC_BASE}{kwargs['path']}"

    def test_paths_are_unique(self, media):
        image = make_image("kurt.png")

        assert media.build_path(image) != media.build_path(image)

    def test_path_stays_in_folder(self, media):
        path = media.build_path(make_image("cover.v2/../../x"))

        folder, name = path.split("/")
        assert folder == "superheroes"
        assert "." not in name

    def test_upload_timeout(self, media, mock_client):
        mock_client.storage.from_.return_value.upload.side_effect = httpx.WriteTimeout("slow")

        with pytest.raises(MediaUploadTimeout):
            media.upload(make_image("kurt.png"))

    def test_upload_failure(self, media, mock_client):
        mock_client.storage.from_.return_value.upload.side_effect = Exception("bucket not found")

        with pytest.raises(ImageUploadError) as exc_info:
            media.upload(make_image("kurt.png"))
        assert exc_info.value.details["filename"] == "kurt.png"

    def test_path_from_url(self, media):
        assert media.path_from_url(f"{PUBLIC_BASE}superheroes/ab%2012.png?t=1") == "superheroes/ab 12.png"
        assert media.path_from_url("https://elsewhere.test/a.png") is None

    def test_delete(self, media, mock_client):
        media.delete(f"{PUBLIC_BASE}superheroes/ab12.png")

        mock_client.storage.from_.return_value.remove.assert_called_once_with(["superheroes/ab12.png"])

    def test_delete_foreign_url(self, media, mock_client):
        with pytest.raises(ImageDeleteError):
            media.delete("https://elsewhere.test/a.png")
        mock_client.storage.from_.return_value.remove.assert_not_called()

    def test_delete_failure(self, media, mock_client):
        mock_client.storage.from_.return_value.remove.side_effect = Exception("forbidden")

        with pytest.raises(ImageDeleteError) as exc_info:
            media.delete(f"{PUBLIC_BASE}superheroes/ab12.png")
        assert exc_info.value.status_code == 502
