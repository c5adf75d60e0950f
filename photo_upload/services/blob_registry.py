"""Реестр временных ссылок `blob:` на содержимое файлов в памяти.

Принципы:
- SRP: выдаёт и освобождает ссылки, ничего не знает об изображениях.
- Каждая выданная ссылка освобождается ровно один раз; `scoped_object_url` освобождает
  её на любом пути выхода.
"""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from photo_upload.models.photo_model import PhotoFile

logger = logging.getLogger(__name__)

OBJECT_URL_SCHEME = "blob:"


def is_object_url(value: Optional[str]) -> bool:
    return bool(value) and value.startswith(OBJECT_URL_SCHEME)


class ObjectUrlRegistry:
    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}

    @property
    def live_count(self) -> int:
        """Количество ещё не освобождённых ссылок."""
        return len(self._blobs)

    def create_object_url(self, file: PhotoFile) -> str:
        url = f"{OBJECT_URL_SCHEME}{uuid.uuid4()}"
        self._blobs[url] = file.data
        logger.debug("Created %s for %s", url, file.name)
        return url

    def resolve(self, url: str) -> bytes:
        """Возвращает содержимое по ссылке.

        Raises:
            KeyError: если ссылка не выдавалась или уже освобождена.
        """
        return self._blobs[url]

    def owns(self, url: Optional[str]) -> bool:
        return url is not None and url in self._blobs

    def revoke_object_url(self, url: str) -> None:
        # повторное освобождение ничего не делает
        if self._blobs.pop(url, None) is not None:
            logger.debug("Revoked %s", url)

    @contextmanager
    def scoped_object_url(self, file: PhotoFile) -> Iterator[str]:
        url = self.create_object_url(file)
        try:
            yield url
        finally:
            self.revoke_object_url(url)


_registry_instance: Optional[ObjectUrlRegistry] = None


def get_registry() -> ObjectUrlRegistry:
    """Get or create the process-wide registry."""
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = ObjectUrlRegistry()
    return _registry_instance
