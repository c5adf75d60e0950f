"""Tests for dimension probing and preview decoding."""

import pytest
from PIL import Image

from photo_upload.models.errors import ImageDecodeError
from photo_upload.models.photo_model import Dimensions, PhotoFile
from photo_upload.services.image_service import UNREADABLE_IMAGE_ERROR, ImageService
from photo_upload.services.preview_service import PreviewService


@pytest.fixture
def service(registry):
    return ImageService(registry=registry)


@pytest.mark.asyncio
async def test_probe_reads_dimensions(service, make_photo):
    result = await service.probe_dimensions(make_photo(800, 600))
    assert result.valid
    assert result.dimensions == Dimensions(800, 600)


@pytest.mark.asyncio
@pytest.mark.parametrize("width, height", [(50, 50), (4001, 3000), (99, 500)])
async def test_probe_rejects_out_of_range(service, make_photo, width, height):
    result = await service.probe_dimensions(make_photo(width, height))
    assert not result.valid
    assert "Image dimensions too" in result.error


@pytest.mark.asyncio
async def test_probe_accepts_upper_bound(service, make_photo):
    result = await service.probe_dimensions(make_photo(4000, 4000, fmt="JPEG"))
    assert result.valid


@pytest.mark.asyncio
async def test_corrupt_file_reported_as_unreadable(service):
    corrupt = PhotoFile(name="broken.jpg", data=b"\xff\xd8\xffnot really a jpeg", mime_type="image/jpeg")
    result = await service.probe_dimensions(corrupt)
    assert not result.valid
    assert result.error == UNREADABLE_IMAGE_ERROR


@pytest.mark.asyncio
async def test_huge_valid_image_reported_as_too_large(service, registry, make_bilevel_png):
    photo = PhotoFile(name="poster.png", data=make_bilevel_png(15000, 15000), mime_type="image/png")
    pixel_limit = Image.MAX_IMAGE_PIXELS

    result = await service.probe_dimensions(photo)

    assert not result.valid
    assert result.error == "Image dimensions too large. Maximum size: 4000x4000px."
    assert Image.MAX_IMAGE_PIXELS == pixel_limit
    assert registry.live_count == 0


def test_read_dimensions_past_pixel_limit(service, make_bilevel_png):
    assert service.read_dimensions(make_bilevel_png(15000, 15000)) == Dimensions(15000, 15000)


@pytest.mark.asyncio
async def test_probe_releases_object_url(service, registry, make_photo):
    await service.probe_dimensions(make_photo(800, 600))
    await service.probe_dimensions(PhotoFile(name="x.png", data=b"garbage", mime_type="image/png"))
    assert registry.live_count == 0


def test_image_from_data_url(make_photo):
    data_url = PreviewService().encode_data_url(make_photo(120, 140))
    image = ImageService.image_from_data_url(data_url)
    assert image.size == (120, 140)
    assert image.mode == "RGBA"


@pytest.mark.parametrize("value", ["blob:1234", "data:image/png;base64,@@@", "data:image/png;base64,aGVsbG8="])
def test_image_from_data_url_rejects_invalid(value):
    with pytest.raises(ImageDecodeError):
        ImageService.image_from_data_url(value)
