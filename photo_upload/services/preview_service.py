"""Превью: полное чтение итогового файла в строку data URL."""
from __future__ import annotations

import asyncio
import base64
import binascii
import logging

from photo_upload.models.errors import FileReadError
from photo_upload.models.photo_model import PhotoFile

logger = logging.getLogger(__name__)

READ_ERROR = "Error reading file. Please try again."
FALLBACK_MIME = "application/octet-stream"


class PreviewService:
    def encode_data_url(self, file: PhotoFile) -> str:
        payload = base64.b64encode(file.data).decode("ascii")
        return f"data:{file.mime_type or FALLBACK_MIME};base64,{payload}"

    async def read_as_data_url(self, file: PhotoFile) -> str:
        """Читает файл целиком в `data:<mime>;base64,...`.

        Raises:
            FileReadError: если содержимое не удалось прочитать.
        """
        await asyncio.sleep(0)
        try:
            return self.encode_data_url(file)
        except (TypeError, ValueError, binascii.Error) as exc:
            logger.warning("Cannot read %s: %s", file.name, exc)
            raise FileReadError(READ_ERROR) from exc
