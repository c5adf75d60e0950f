"""Tests for the conditional downscale/re-encode stage."""

import io

import pytest
from PIL import Image

from photo_upload.config import UploadConfig
from photo_upload.models.errors import CanvasUnavailableError, CompressionError
from photo_upload.models.photo_model import Dimensions, PhotoFile
from photo_upload.services import compress_service
from photo_upload.services.compress_service import CompressService, needs_transcode, target_dimensions

MB = 1024 * 1024


@pytest.fixture
def service(registry):
    return CompressService(registry=registry)


def _decoded_size(file):
    with Image.open(io.BytesIO(file.data)) as image:
        return image.size


class TestTargetDimensions:
    def test_landscape_capped_on_width(self):
        assert target_dimensions(Dimensions(6000, 3000), 2000) == Dimensions(2000, 1000)

    def test_portrait_capped_on_height(self):
        assert target_dimensions(Dimensions(1500, 3000), 2000) == Dimensions(1000, 2000)

    def test_square_tie(self):
        assert target_dimensions(Dimensions(2500, 2500), 2000) == Dimensions(2000, 2000)

    def test_fractional_height_truncated(self):
        assert target_dimensions(Dimensions(3000, 2000), 2000) == Dimensions(2000, 1333)

    def test_small_image_unchanged(self):
        assert target_dimensions(Dimensions(1200, 900), 2000) == Dimensions(1200, 900)


def test_needs_transcode_thresholds():
    config = UploadConfig()
    small = PhotoFile(name="a.jpg", data=b"x" * 500_000, mime_type="image/jpeg")
    big = PhotoFile(name="a.jpg", data=b"x" * (2 * MB), mime_type="image/jpeg")
    assert not needs_transcode(small, Dimensions(800, 600), config)
    assert needs_transcode(small, Dimensions(2000, 600), config)
    assert needs_transcode(big, Dimensions(800, 600), config)


@pytest.mark.asyncio
async def test_small_image_passes_through_unchanged(service, make_photo, registry):
    original = make_photo(800, 600, fmt="JPEG", pad_to=500 * 1024)
    result = await service.compress(original, Dimensions(800, 600))
    assert result is original
    assert registry.live_count == 0


@pytest.mark.asyncio
async def test_large_image_downscaled_keeping_aspect_and_type(service, make_photo, registry):
    original = make_photo(6000, 3000, fmt="PNG", name="class-photo.png", pad_to=3 * MB)
    result = await service.compress(original, Dimensions(6000, 3000))

    assert result is not original
    assert _decoded_size(result) == (2000, 1000)
    assert result.mime_type == "image/png"
    assert result.name == "class-photo.png"
    assert result.last_modified > original.last_modified
    assert registry.live_count == 0


@pytest.mark.asyncio
async def test_oversized_jpeg_recompressed_as_jpeg(service, make_photo):
    original = make_photo(1200, 900, fmt="JPEG", pad_to=3 * MB)
    result = await service.compress(original, Dimensions(1200, 900))

    assert result.mime_type == "image/jpeg"
    assert result.size < original.size
    with Image.open(io.BytesIO(result.data)) as image:
        assert image.format == "JPEG"
        assert image.size == (1200, 900)


@pytest.mark.asyncio
async def test_empty_encode_falls_back_to_original(service, make_photo, monkeypatch):
    monkeypatch.setattr(service, "_encode", lambda canvas, fmt: b"")
    original = make_photo(2400, 1200)
    assert await service.compress(original, Dimensions(2400, 1200)) is original


@pytest.mark.asyncio
async def test_undecodable_file_rejected(service, registry):
    junk = PhotoFile(name="junk.png", data=b"not an image " * (MB // 4), mime_type="image/png")
    with pytest.raises(CompressionError, match="Failed to load image for compression"):
        await service.compress(junk, Dimensions(800, 600))
    assert registry.live_count == 0


@pytest.mark.asyncio
async def test_canvas_unavailable_is_hard_failure(service, make_photo, monkeypatch):
    def broken_new(mode, size, *args, **kwargs):
        raise ValueError("no surface")

    photo = make_photo(2400, 1200)
    monkeypatch.setattr(compress_service.Image, "new", broken_new)
    with pytest.raises(CanvasUnavailableError):
        await service.compress(photo, Dimensions(2400, 1200))


def test_quality_from_config():
    assert CompressService(UploadConfig(compress_quality=0.85)).quality == 85
    assert CompressService(UploadConfig(compress_quality=0.5)).quality == 50
