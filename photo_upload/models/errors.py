"""Исключения конвейера загрузки.

Наружу контроллера не выходят: контроллер превращает их в текст ошибки для пользователя.
"""
from __future__ import annotations


class PhotoUploadError(Exception):
    """Базовая ошибка обработки фотографии."""


class ImageDecodeError(PhotoUploadError):
    """Файл не удалось декодировать как изображение."""


class CompressionError(PhotoUploadError):
    """Сбой на стадии уменьшения/пережатия."""


class CanvasUnavailableError(CompressionError):
    """Не удалось создать поверхность для отрисовки."""


class FileReadError(PhotoUploadError):
    """Содержимое файла недоступно для чтения."""
