"""Tests for the upload/replace/delete lifecycle."""

import asyncio
import re

import pytest

from rentdesk.assets.lifecycle import (
    DELETE_FAILED,
    INVALID_PATH,
    UNEXPECTED_ERROR,
    UPLOAD_FAILED,
    AssetLifecycle,
)
from rentdesk.assets.types import UploadOptions
from rentdesk.assets.urls import public_url
from rentdesk.assets.validation import BYTES_PER_MB
from rentdesk.lib.storage.base import Bucket, StoreError

STORE_ORIGIN = "https://project.supabase.co"

VEHICLE_POLICY = UploadOptions(
    bucket=Bucket.VEHICLE_IMAGES,
    folder="vehicles",
    max_size_mb=5,
    allowed_types=("image/jpeg", "image/png", "image/webp"),
)

OLD_URL = public_url(STORE_ORIGIN, "vehicle-images", "vehicles/old_1_aaaaaaa.jpg")


# ---------------------------------------------------------------------------
# upload
# ---------------------------------------------------------------------------


class TestUpload:
    @pytest.mark.asyncio
    async def test_two_megabyte_jpeg(self, lifecycle, store, make_file):
        """A 2MB JPEG lands under the folder and gets a public URL."""
        file = make_file("front view.jpg", "image/jpeg", 2 * BYTES_PER_MB)

        result = await lifecycle.upload(file, VEHICLE_POLICY)

        assert result.success is True
        assert result.error is None
        assert re.fullmatch(r"vehicles/front_view_\d+_[a-z0-9]{7}\.jpg", result.path)
        assert result.url == f"{STORE_ORIGIN}/storage/v1/object/public/vehicle-images/{result.path}"
        assert store.objects[("vehicle-images", result.path)] == file.data

    @pytest.mark.asyncio
    async def test_too_large_makes_no_store_call(self, lifecycle, store, make_file):
        result = await lifecycle.upload(make_file(size=6 * BYTES_PER_MB), VEHICLE_POLICY)

        assert result.success is False
        assert result.error == "File size must be 5MB or smaller."
        assert result.url is None and result.path is None
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_wrong_type_makes_no_store_call(self, lifecycle, store, make_file):
        result = await lifecycle.upload(make_file("a.pdf", "application/pdf"), VEHICLE_POLICY)

        assert result.success is False
        assert result.error == "Only jpeg, png, webp files can be uploaded."
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_size_checked_before_type(self, lifecycle, make_file):
        file = make_file("a.pdf", "application/pdf", 6 * BYTES_PER_MB)
        result = await lifecycle.upload(file, VEHICLE_POLICY)
        assert "File size" in result.error

    @pytest.mark.asyncio
    async def test_empty_allowed_types_rejects(self, lifecycle, store, make_file):
        options = UploadOptions(bucket=Bucket.DOCUMENTS, allowed_types=())
        result = await lifecycle.upload(make_file(), options)
        assert result.success is False
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_default_options(self, lifecycle, make_file):
        """Without explicit limits, images and PDFs up to 10MB are accepted."""
        options = UploadOptions(bucket=Bucket.DOCUMENTS)
        result = await lifecycle.upload(make_file("a.pdf", "application/pdf", 10 * BYTES_PER_MB), options)
        assert result.success is True
        assert "/" not in result.path

    @pytest.mark.asyncio
    async def test_folder_escaping_its_bucket_makes_no_store_call(self, lifecycle, store, make_file):
        options = UploadOptions(
            bucket=Bucket.DOCUMENTS,
            folder="customer-1/../../vehicle-images",
            allowed_types=("application/pdf",),
        )

        result = await lifecycle.upload(make_file("a.pdf", "application/pdf"), options)

        assert result.success is False
        assert result.error == INVALID_PATH
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_store_error_reported(self, lifecycle, store, make_file):
        store.fail_put = StoreError("boom", status_code=500)

        result = await lifecycle.upload(make_file(), VEHICLE_POLICY)

        assert result.success is False
        assert result.error == UPLOAD_FAILED
        assert store.removed() == []

    @pytest.mark.asyncio
    async def test_unexpected_error_contained(self, lifecycle, store, make_file):
        store.fail_put = RuntimeError("socket closed")

        result = await lifecycle.upload(make_file(), VEHICLE_POLICY)

        assert result.success is False
        assert result.error == UNEXPECTED_ERROR

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, lifecycle, store, make_file):
        store.fail_put = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await lifecycle.upload(make_file(), VEHICLE_POLICY)


# ---------------------------------------------------------------------------
# replace
# ---------------------------------------------------------------------------


class TestReplace:
    @pytest.mark.asyncio
    async def test_removes_old_after_upload(self, lifecycle, store, make_file):
        result = await lifecycle.replace(OLD_URL, make_file(), VEHICLE_POLICY)

        assert result.success is True
        ops = [op for op, _, _ in store.calls]
        assert ops == ["put", "remove"]
        assert store.removed() == [("vehicle-images", "vehicles/old_1_aaaaaaa.jpg")]

    @pytest.mark.asyncio
    async def test_failed_upload_never_targets_old(self, lifecycle, store, make_file):
        store.fail_put = StoreError("network down")

        result = await lifecycle.replace(OLD_URL, make_file(), VEHICLE_POLICY)

        assert result.success is False
        assert store.removed() == []

    @pytest.mark.asyncio
    async def test_six_megabyte_replacement_rejected(self, lifecycle, store, make_file):
        """An oversized replacement fails and the old URL stays valid."""
        store.objects[("vehicle-images", "vehicles/old_1_aaaaaaa.jpg")] = b"old"

        result = await lifecycle.replace(OLD_URL, make_file(size=6 * BYTES_PER_MB), VEHICLE_POLICY)

        assert result.success is False
        assert store.calls == []
        assert ("vehicle-images", "vehicles/old_1_aaaaaaa.jpg") in store.objects

    @pytest.mark.asyncio
    async def test_cleanup_failure_still_succeeds(self, lifecycle, store, make_file, caplog):
        store.fail_remove = StoreError("permission denied", status_code=403)

        with caplog.at_level("WARNING", logger="rentdesk.assets.lifecycle"):
            result = await lifecycle.replace(OLD_URL, make_file(), VEHICLE_POLICY)

        assert result.success is True
        assert result.url is not None and result.url != OLD_URL
        assert result.error is None
        assert "orphaned" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_cleanup_error_still_succeeds(self, lifecycle, store, make_file):
        store.fail_remove = RuntimeError("boom")

        result = await lifecycle.replace(OLD_URL, make_file(), VEHICLE_POLICY)

        assert result.success is True

    @pytest.mark.asyncio
    async def test_no_old_url_is_plain_upload(self, lifecycle, store, make_file):
        result = await lifecycle.replace(None, make_file(), VEHICLE_POLICY)

        assert result.success is True
        assert store.removed() == []

    @pytest.mark.asyncio
    async def test_old_url_from_other_bucket_left_alone(self, lifecycle, store, make_file):
        foreign = public_url(STORE_ORIGIN, "campaign-images", "campaigns/a.jpg")

        result = await lifecycle.replace(foreign, make_file(), VEHICLE_POLICY)

        assert result.success is True
        assert store.removed() == []


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


class TestDelete:
    @pytest.mark.asyncio
    async def test_removes_resolved_key(self, lifecycle, store):
        result = await lifecycle.delete(Bucket.VEHICLE_IMAGES, OLD_URL)

        assert result.success is True
        assert store.removed() == [("vehicle-images", "vehicles/old_1_aaaaaaa.jpg")]

    @pytest.mark.asyncio
    async def test_accepts_plain_bucket_name(self, lifecycle, store):
        result = await lifecycle.delete("vehicle-images", OLD_URL)
        assert result.success is True
        assert len(store.removed()) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "url",
        [None, "", "garbage", public_url(STORE_ORIGIN, "documents", "a.pdf")],
    )
    async def test_unresolvable_url_is_noop(self, lifecycle, store, url):
        result = await lifecycle.delete(Bucket.VEHICLE_IMAGES, url)

        assert result.success is True
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_store_error_reported(self, lifecycle, store):
        store.fail_remove = StoreError("boom")

        result = await lifecycle.delete(Bucket.VEHICLE_IMAGES, OLD_URL)

        assert result.success is False
        assert result.error == DELETE_FAILED

    @pytest.mark.asyncio
    async def test_unexpected_error_contained(self, lifecycle, store):
        store.fail_remove = ValueError("bad")

        result = await lifecycle.delete(Bucket.VEHICLE_IMAGES, OLD_URL)

        assert result.success is False
        assert result.error == UNEXPECTED_ERROR


class TestFullSlotLifecycle:
    @pytest.mark.asyncio
    async def test_upload_replace_delete(self, store, make_file):
        lifecycle = AssetLifecycle(store)

        first = await lifecycle.upload(make_file("a.jpg"), VEHICLE_POLICY)
        second = await lifecycle.replace(first.url, make_file("b.jpg"), VEHICLE_POLICY)
        assert list(store.objects) == [("vehicle-images", second.path)]

        gone = await lifecycle.delete(Bucket.VEHICLE_IMAGES, second.url)
        assert gone.success is True
        assert store.objects == {}
