"""Синхронные проверки выбранного файла: тип, размер, габариты.

Каждая проверка возвращает `ValidationResult` с готовым текстом ошибки; порядок вызова
и прерывание на первой ошибке задаёт контроллер.
Проверки типа и размера читают только метаданные, поэтому принимают и `FileInfo`.
"""
from __future__ import annotations

import math
from typing import Union

from photo_upload.config import UploadConfig
from photo_upload.models.photo_model import Dimensions, FileInfo, PhotoFile, ValidationResult

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(size_bytes: int) -> str:
    """Человекочитаемый размер: шаг 1024, два знака после запятой, лишние нули отброшены."""
    if size_bytes <= 0:
        return "0 Bytes"
    k = 1024
    i = min(int(math.floor(math.log(size_bytes) / math.log(k))), len(_SIZE_UNITS) - 1)
    value = f"{size_bytes / k ** i:.2f}".rstrip("0").rstrip(".")
    return f"{value} {_SIZE_UNITS[i]}"


def validate_file_type(file: Union[PhotoFile, FileInfo], config: UploadConfig) -> ValidationResult:
    # extension fallback covers files with a missing or wrong MIME type
    is_valid_type = file.mime_type in config.allowed_types
    name = file.name.lower()
    is_valid_extension = any(name.endswith(ext) for ext in config.allowed_extensions)

    if not is_valid_type and not is_valid_extension:
        return ValidationResult(
            valid=False,
            error=f"Invalid file type. Please upload: {config.extensions_label()}",
        )
    return ValidationResult(valid=True)


def validate_file_size(file: Union[PhotoFile, FileInfo], config: UploadConfig) -> ValidationResult:
    if file.size > config.max_size:
        return ValidationResult(
            valid=False,
            error=(
                f"File size exceeds maximum limit of {format_file_size(config.max_size)}. "
                "Please choose a smaller file."
            ),
        )
    return ValidationResult(valid=True)


def validate_dimensions(dimensions: Dimensions, config: UploadConfig) -> ValidationResult:
    """Проверяет габариты; границы включительно допустимы."""
    lo, hi = config.min_dimensions, config.max_dimensions
    if dimensions.width < lo.width or dimensions.height < lo.height:
        return ValidationResult(
            valid=False,
            error=f"Image dimensions too small. Minimum size: {lo.width}x{lo.height}px.",
        )
    if dimensions.width > hi.width or dimensions.height > hi.height:
        return ValidationResult(
            valid=False,
            error=f"Image dimensions too large. Maximum size: {hi.width}x{hi.height}px.",
        )
    return ValidationResult(valid=True, dimensions=dimensions)
