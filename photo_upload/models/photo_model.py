"""Модели данных для загрузки фотографий.

Принципы:
- SRP: только структуры данных, без логики валидации и обработки.
- Чистый код: файл неизменяем (`frozen=True`), замена происходит целиком, а не мутацией.
"""
from __future__ import annotations

import mimetypes
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Dimensions:
    """Размеры изображения в пикселях."""
    width: int
    height: int


@dataclass(frozen=True)
class PhotoFile:
    """Неизменяемый выбранный файл: имя, байты, MIME-тип.

    Fields:
        name: Имя файла без каталога.
        data: Содержимое файла.
        mime_type: Заявленный MIME-тип; пустая строка, если неизвестен.
        last_modified: Время изменения, мс с начала эпохи.
    """
    name: str
    data: bytes = field(repr=False)
    mime_type: str = ""
    last_modified: int = 0

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, file_path: str | Path) -> "PhotoFile":
        """Читает файл с диска целиком.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
        """
        return FileInfo.from_path(file_path).read()

    def with_data(self, data: bytes) -> "PhotoFile":
        """Новый файл с тем же именем и типом, но другим содержимым и свежей меткой времени."""
        return replace(self, data=data, last_modified=int(time.time() * 1000))


@dataclass(frozen=True)
class FileInfo:
    """Сведения о файле на диске без чтения содержимого: по ним работают проверки типа и размера."""
    path: Path
    name: str
    size: int
    mime_type: str = ""
    last_modified: int = 0

    @classmethod
    def from_path(cls, file_path: str | Path) -> "FileInfo":
        """Метаданные по `stat`; MIME-тип угадывается по расширению.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        stat = path.stat()
        mime_type, _encoding = mimetypes.guess_type(path.name)
        return cls(
            path=path,
            name=path.name,
            size=stat.st_size,
            mime_type=mime_type or "",
            last_modified=int(stat.st_mtime * 1000),
        )

    def read(self) -> PhotoFile:
        return PhotoFile(
            name=self.name, data=self.path.read_bytes(), mime_type=self.mime_type, last_modified=self.last_modified,
        )


@dataclass(frozen=True)
class ValidationResult:
    """Результат одной стадии проверки."""
    valid: bool
    error: Optional[str] = None
    dimensions: Optional[Dimensions] = None


@dataclass
class UploadState:
    """Состояние области загрузки, которое отображает виджет.

    `error` и успешное превью текущего цикла взаимоисключающие: новый успех очищает ошибку.
    """
    is_dragging: bool = False
    is_loading: bool = False
    error: Optional[str] = None
    preview: Optional[str] = None

    @property
    def has_preview(self) -> bool:
        return bool(self.preview)
