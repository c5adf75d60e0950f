"""Pytest fixtures: synthetic photos built with Pillow, fresh registry per test."""

import io
import struct
import zlib

import pytest
from PIL import Image

from photo_upload.controllers.upload_controller import PhotoUploadController
from photo_upload.models.photo_model import PhotoFile
from photo_upload.services.blob_registry import ObjectUrlRegistry


def make_image_bytes(width, height, fmt="PNG", color=(40, 120, 200)):
    """Encode a solid-colour image of the given size."""
    mode = "RGB" if fmt == "JPEG" else "RGBA"
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_bilevel_png(width, height):
    """Blank 1-bit greyscale PNG; stays a few KB even for very large dimensions."""
    def chunk(tag, body):
        return struct.pack(">I", len(body)) + tag + body + struct.pack(">I", zlib.crc32(tag + body) & 0xFFFFFFFF)

    row = b"\x00" + bytes((width + 7) // 8)
    header = struct.pack(">IIBBBBB", width, height, 1, 0, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(row * height, 9))
        + chunk(b"IEND", b"")
    )


def make_photo(width=800, height=600, fmt="PNG", name=None, mime_type=None, pad_to=None):
    """Build a PhotoFile; `pad_to` appends trailing bytes so the file reports that size."""
    data = make_image_bytes(width, height, fmt)
    if pad_to is not None and pad_to > len(data):
        data += b"\x00" * (pad_to - len(data))
    ext = {"JPEG": "jpg", "PNG": "png", "GIF": "gif", "WEBP": "webp"}[fmt]
    return PhotoFile(
        name=name or f"photo.{ext}",
        data=data,
        mime_type=mime_type if mime_type is not None else f"image/{'jpeg' if fmt == 'JPEG' else ext}",
        last_modified=1,
    )


@pytest.fixture
def registry():
    return ObjectUrlRegistry()


@pytest.fixture
def selections():
    """Records every on_image_select call."""
    return []


@pytest.fixture
def controller(registry, selections):
    return PhotoUploadController(
        on_image_select=lambda file, preview: selections.append((file, preview)),
        registry=registry,
    )


@pytest.fixture(name="make_photo")
def make_photo_fixture():
    return make_photo


@pytest.fixture(name="make_image_bytes")
def make_image_bytes_fixture():
    return make_image_bytes


@pytest.fixture(name="make_bilevel_png")
def make_bilevel_png_fixture():
    return make_bilevel_png
