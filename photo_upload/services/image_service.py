"""Чтение изображений: габариты без полного декодирования и картинка для превью.

Принципы:
- SRP: класс отвечает только за открытие изображений и извлечение свойств.
- Временная ссылка на файл освобождается сразу после чтения заголовка, при любом исходе.
"""
from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from photo_upload.config import UploadConfig
from photo_upload.models.errors import ImageDecodeError
from photo_upload.models.photo_model import Dimensions, PhotoFile, ValidationResult
from photo_upload.services.blob_registry import ObjectUrlRegistry, get_registry
from photo_upload.services.validation_service import validate_dimensions

logger = logging.getLogger(__name__)

UNREADABLE_IMAGE_ERROR = "Unable to read image file. Please ensure it is a valid image."


class ImageService:
    def __init__(self, config: Optional[UploadConfig] = None, registry: Optional[ObjectUrlRegistry] = None) -> None:
        self.config = config or UploadConfig()
        self.registry = registry or get_registry()

    def read_dimensions(self, data: bytes) -> Dimensions:
        """Читает натуральные габариты из заголовка.

        Лимит пикселей Pillow на время чтения снят: декодируется только заголовок, а слишком
        большое фото отклоняет `validate_dimensions`.

        Raises:
            ImageDecodeError: если данные не распознаны как изображение.
        """
        pixel_limit = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = None
        try:
            with Image.open(io.BytesIO(data)) as pil_image:
                width, height = pil_image.size
        except (UnidentifiedImageError, OSError, EOFError, ValueError) as exc:
            raise ImageDecodeError(UNREADABLE_IMAGE_ERROR) from exc
        finally:
            Image.MAX_IMAGE_PIXELS = pixel_limit
        return Dimensions(width=width, height=height)

    async def probe_dimensions(self, file: PhotoFile) -> ValidationResult:
        """Проверка габаритов через временную ссылку; ошибка декодирования отделена от ошибки размеров."""
        with self.registry.scoped_object_url(file) as object_url:
            # load fires on a later loop tick
            await asyncio.sleep(0)
            try:
                dimensions = self.read_dimensions(self.registry.resolve(object_url))
            except ImageDecodeError as exc:
                logger.warning("Cannot decode %s: %s", file.name, exc.__cause__)
                return ValidationResult(valid=False, error=str(exc))

        logger.debug("Probed %s: %dx%d", file.name, dimensions.width, dimensions.height)
        return validate_dimensions(dimensions, self.config)

    @staticmethod
    def image_from_data_url(data_url: str) -> Image.Image:
        """Декодирует строку превью `data:<mime>;base64,...` в `PIL.Image.Image` (RGBA).

        Raises:
            ImageDecodeError: если строка не является корректным data URL изображения.
        """
        header, sep, payload = data_url.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise ImageDecodeError("Preview is not a base64 data URL")
        try:
            raw = base64.b64decode(payload, validate=True)
            with Image.open(io.BytesIO(raw)) as pil_image:
                return pil_image.convert("RGBA")
        except (binascii.Error, UnidentifiedImageError, OSError, ValueError) as exc:
            raise ImageDecodeError(UNREADABLE_IMAGE_ERROR) from exc
