"""Tests for data-URL materialization."""

import base64

import pytest

from photo_upload.models.photo_model import PhotoFile
from photo_upload.services.preview_service import PreviewService


@pytest.mark.asyncio
async def test_data_url_embeds_bytes_with_mime():
    file = PhotoFile(name="a.gif", data=b"GIF89a-bytes", mime_type="image/gif")
    data_url = await PreviewService().read_as_data_url(file)

    header, payload = data_url.split(",", 1)
    assert header == "data:image/gif;base64"
    assert base64.b64decode(payload) == b"GIF89a-bytes"


def test_unknown_mime_uses_octet_stream():
    file = PhotoFile(name="photo.jpg", data=b"\xff\xd8\xff", mime_type="")
    assert PreviewService().encode_data_url(file).startswith("data:application/octet-stream;base64,")
