"""Настройки области загрузки фотографий.

Значения по умолчанию совпадают с ограничениями форм регистрации учеников и сотрудников.
Пороги сжатия и качество тоже вынесены сюда: их можно переопределить для конкретной формы.
"""
from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

from photo_upload.models.photo_model import Dimensions

MAX_FILE_SIZE = 5 * 1024 * 1024
ALLOWED_FILE_TYPES: Tuple[str, ...] = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp")
ALLOWED_EXTENSIONS: Tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".webp")
MIN_IMAGE_DIMENSIONS = Dimensions(width=100, height=100)
MAX_IMAGE_DIMENSIONS = Dimensions(width=4000, height=4000)

COMPRESS_SIZE_THRESHOLD = 2 * 1024 * 1024
COMPRESS_MAX_DIMENSION = 2000
COMPRESS_QUALITY = 0.85


@dataclass(frozen=True)
class UploadConfig:
    """Ограничения конвейера: проверка, сжатие."""
    max_size: int = MAX_FILE_SIZE
    allowed_types: Tuple[str, ...] = ALLOWED_FILE_TYPES
    allowed_extensions: Tuple[str, ...] = ALLOWED_EXTENSIONS
    min_dimensions: Dimensions = MIN_IMAGE_DIMENSIONS
    max_dimensions: Dimensions = MAX_IMAGE_DIMENSIONS
    compress_size_threshold: int = COMPRESS_SIZE_THRESHOLD
    compress_max_dimension: int = COMPRESS_MAX_DIMENSION
    compress_quality: float = COMPRESS_QUALITY

    def extensions_label(self) -> str:
        return ", ".join(self.allowed_extensions).upper()

    def picker_filetypes(self) -> Tuple[Tuple[str, str], ...]:
        """Фильтр для `filedialog.askopenfilename`: разрешённые расширения плюс расширения разрешённых MIME-типов."""
        extensions = list(self.allowed_extensions)
        for mime_type in self.allowed_types:
            extensions.extend(mimetypes.guess_all_extensions(mime_type))
        patterns = " ".join(f"*{ext}" for ext in dict.fromkeys(ext.lower() for ext in extensions))
        return (("Images", patterns), ("All files", "*.*"))


@dataclass(frozen=True)
class PresentationOptions:
    """Оформление и доступность виджета; на конвейер влияет только `disabled`.

    Fields:
        label: Подпись области загрузки.
        required: Показать отметку обязательного поля.
        disabled: Запретить любое взаимодействие.
        class_name: Имя стиля, добавляемое к подписи (для тем форм).
        widget_options: Параметры `CTkFrame` (fg_color, corner_radius, ...), передаются как есть.
    """
    label: str = "Photo Upload"
    required: bool = False
    disabled: bool = False
    class_name: str = ""
    widget_options: Mapping[str, Any] = field(default_factory=dict)
