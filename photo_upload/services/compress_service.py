"""Уменьшение и пережатие крупных фотографий перед превью и сохранением.

Принципы:
- SRP: только решение «пережимать или нет» и само пережатие; проверки делает `validation_service`.
- Небольшие изображения проходят без изменений: возвращается тот же объект файла.
"""
from __future__ import annotations

import asyncio
import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from photo_upload.config import UploadConfig
from photo_upload.models.errors import CanvasUnavailableError, CompressionError, FileReadError
from photo_upload.models.photo_model import Dimensions, PhotoFile
from photo_upload.services.blob_registry import ObjectUrlRegistry, get_registry

logger = logging.getLogger(__name__)

MIME_TO_FORMAT = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}
DEFAULT_FORMAT = "PNG"


def needs_transcode(file: PhotoFile, dimensions: Dimensions, config: UploadConfig) -> bool:
    if (
        file.size < config.compress_size_threshold
        and dimensions.width < config.compress_max_dimension
        and dimensions.height < config.compress_max_dimension
    ):
        return False
    return True


def target_dimensions(dimensions: Dimensions, max_dimension: int) -> Dimensions:
    """Ограничивает длинную сторону `max_dimension` с сохранением пропорций.

    Дробные размеры отбрасываются до целых пикселей, как у холста, но не меньше 1.
    """
    width, height = float(dimensions.width), float(dimensions.height)
    if width >= height:
        if width > max_dimension:
            height = height * max_dimension / width
            width = max_dimension
    elif height > max_dimension:
        width = width * max_dimension / height
        height = max_dimension
    return Dimensions(width=max(1, int(width)), height=max(1, int(height)))


class CompressService:
    def __init__(self, config: Optional[UploadConfig] = None, registry: Optional[ObjectUrlRegistry] = None) -> None:
        self.config = config or UploadConfig()
        self.registry = registry or get_registry()

    @property
    def quality(self) -> int:
        """Качество для Pillow (1..100) из доли 0..1."""
        return max(1, min(100, int(round(self.config.compress_quality * 100))))

    async def compress(self, file: PhotoFile, dimensions: Dimensions) -> PhotoFile:
        """Возвращает исходный файл или его уменьшенную копию того же MIME-типа.

        Raises:
            FileReadError: содержимое файла недоступно.
            CompressionError: файл не декодируется.
            CanvasUnavailableError: не удалось создать поверхность для отрисовки.
        """
        if not needs_transcode(file, dimensions, self.config):
            return file

        with self.registry.scoped_object_url(file) as object_url:
            await asyncio.sleep(0)
            try:
                data = self.registry.resolve(object_url)
            except KeyError as exc:
                raise FileReadError("Failed to read file") from exc
            source = self._decode(data)

        target = target_dimensions(dimensions, self.config.compress_max_dimension)
        fmt = MIME_TO_FORMAT.get(file.mime_type.lower(), DEFAULT_FORMAT)
        canvas = self._draw(source, target, fmt)

        await asyncio.sleep(0)
        encoded = self._encode(canvas, fmt)
        if not encoded:
            logger.warning("Encoding %s as %s produced no data, keeping original", file.name, fmt)
            return file

        logger.info(
            "Compressed %s: %dx%d -> %dx%d, %d -> %d bytes",
            file.name, dimensions.width, dimensions.height, target.width, target.height, file.size, len(encoded),
        )
        return file.with_data(encoded)

    # ---------- Вспомогательные функции ----------
    def _decode(self, data: bytes) -> Image.Image:
        try:
            with Image.open(io.BytesIO(data)) as pil_image:
                pil_image.load()
                return pil_image.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, EOFError, ValueError) as exc:
            raise CompressionError("Failed to load image for compression") from exc

    def _draw(self, source: Image.Image, target: Dimensions, fmt: str) -> Image.Image:
        """Рисует изображение на новой поверхности целевого размера (это и есть уменьшение)."""
        mode = "RGB" if fmt == "JPEG" else "RGBA"
        size = (target.width, target.height)
        try:
            canvas = Image.new(mode, size)
        except (ValueError, MemoryError) as exc:
            raise CanvasUnavailableError("Failed to get canvas context") from exc

        resized = source.resize(size, Image.Resampling.LANCZOS)
        if mode == "RGB":
            # прозрачные области на непрозрачной поверхности
            canvas.paste(resized, (0, 0), resized)
        else:
            canvas.paste(resized, (0, 0))
        return canvas

    def _encode(self, canvas: Image.Image, fmt: str) -> bytes:
        buffer = io.BytesIO()
        try:
            canvas.save(buffer, format=fmt, quality=self.quality)
        except (KeyError, OSError, ValueError) as exc:
            logger.warning("Encoder %s failed: %s", fmt, exc)
            return b""
        return buffer.getvalue()
