"""Контроллер области загрузки: цикл обработки файла и состояние виджета.

SOLID:
- SRP: класс ведёт цикл «проверка → сжатие → превью» и владеет состоянием; отрисовкой не занимается.
- DIP: сервисы и хуки UI (`browse`, `on_state_change`) передаются извне.
Clean Code:
- Новый выбор всегда побеждает: каждый цикл запоминает своё поколение и после каждого
  `await` сверяет его с текущим, устаревший результат отбрасывается.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence, Set, Union

from photo_upload.config import PresentationOptions, UploadConfig
from photo_upload.models.errors import PhotoUploadError
from photo_upload.models.photo_model import FileInfo, PhotoFile, UploadState
from photo_upload.services.blob_registry import ObjectUrlRegistry, get_registry, is_object_url
from photo_upload.services.compress_service import CompressService
from photo_upload.services.image_service import ImageService
from photo_upload.services.preview_service import READ_ERROR, PreviewService
from photo_upload.services.validation_service import validate_file_size, validate_file_type

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred while processing the image."

BROWSE_KEYS = frozenset({"Return", "KP_Enter", "space"})
REMOVE_KEYS = frozenset({"Delete", "BackSpace"})

ImageSelectCallback = Callable[[Optional[PhotoFile], Optional[str]], None]
DropItem = Union[PhotoFile, str, Path]


@dataclass
class PhotoUploadController:
    """Связывает сервисы конвейера с состоянием одной области загрузки.

    Ответственности:
    - Запуск цикла обработки для выбранного, перетащенного или открытого по пути файла.
    - Перетаскивание, клик, клавиатура, удаление текущего фото.
    - Освобождение локально созданных ссылок `blob:` при замене превью и при закрытии.
    """
    on_image_select: ImageSelectCallback
    config: UploadConfig = field(default_factory=UploadConfig)
    options: PresentationOptions = field(default_factory=PresentationOptions)
    current_preview: Optional[str] = None
    registry: ObjectUrlRegistry = field(default_factory=get_registry)
    loop: Optional[asyncio.AbstractEventLoop] = None

    image_service: Optional[ImageService] = None
    compress_service: Optional[CompressService] = None
    preview_service: Optional[PreviewService] = None

    # UI hooks
    on_state_change: Optional[Callable[[UploadState], None]] = None
    browse: Optional[Callable[[], None]] = None

    state: UploadState = field(init=False)
    picker_value: str = field(init=False, default="")
    _generation: int = field(init=False, default=0)
    _tasks: Set[asyncio.Task] = field(init=False, default_factory=set)
    _disposed: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.state = UploadState(preview=self.current_preview or None)
        if self.image_service is None:
            self.image_service = ImageService(self.config, self.registry)
        if self.compress_service is None:
            self.compress_service = CompressService(self.config, self.registry)
        if self.preview_service is None:
            self.preview_service = PreviewService()

    @property
    def disabled(self) -> bool:
        return self.options.disabled

    # ---- Pipeline ----
    async def handle_file(self, file: Optional[PhotoFile], source: Optional[str] = None) -> None:
        """Полный цикл для одного файла. Ошибки превращаются в текст состояния, callback не вызывается.

        `source` (путь из диалога) попадает в `picker_value` только после успешного цикла.
        """
        if file is None or self._disposed:
            return

        generation = self._start_cycle()
        logger.debug("Cycle %d started for %s (%d bytes)", generation, file.name, file.size)
        self._update(error=None, is_loading=True)

        try:
            rejection = self._metadata_error(file)
            if rejection is not None:
                self._fail(generation, rejection)
                return

            dimension_check = await self.image_service.probe_dimensions(file)
            if self._is_stale(generation):
                return
            if not dimension_check.valid or dimension_check.dimensions is None:
                self._fail(generation, dimension_check.error or "Invalid image dimensions")
                return

            final_file = await self.compress_service.compress(file, dimension_check.dimensions)
            if self._is_stale(generation):
                return

            data_url = await self.preview_service.read_as_data_url(final_file)
        except PhotoUploadError as exc:
            self._fail(generation, str(exc) or GENERIC_ERROR)
            return
        except Exception:
            logger.exception("Unexpected failure while processing %s", file.name)
            self._fail(generation, GENERIC_ERROR)
            return

        if self._is_stale(generation):
            return

        self._release_owned_preview()
        if source is not None:
            self.picker_value = source
        self._update(preview=data_url, is_loading=False, error=None)
        logger.info("Accepted photo %s (%d bytes)", final_file.name, final_file.size)
        self.on_image_select(final_file, data_url)

    def submit(self, file: PhotoFile, source: Optional[str] = None) -> asyncio.Task:
        """Планирует `handle_file` в цикле событий и держит ссылку на задачу до её завершения."""
        loop = self.loop or asyncio.get_running_loop()
        task = loop.create_task(self.handle_file(file, source))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def open_path(self, file_path: Union[str, Path]) -> Optional[asyncio.Task]:
        """Открывает файл, выбранный в диалоге или перетащенный из файлового менеджера."""
        if not file_path:
            return None
        try:
            info = FileInfo.from_path(file_path)
            # type and size are checked on metadata, before the file is read
            rejection = self._metadata_error(info)
            if rejection is not None:
                self._fail(self._start_cycle(), rejection)
                return None
            file = info.read()
        except OSError as exc:
            logger.warning("Cannot open %s: %s", file_path, exc)
            self._fail(self._start_cycle(), READ_ERROR)
            return None
        return self.submit(file, source=str(file_path))

    # ---- Interaction ----
    def drag_enter(self, has_files: bool) -> None:
        # only file payloads highlight the drop target
        if has_files and not self.disabled:
            self._update(is_dragging=True)

    def drag_over(self) -> str:
        """Эффект перетаскивания для платформы."""
        return "none" if self.disabled else "copy"

    def drag_leave(self, left_target: bool) -> None:
        # leave events from child widgets keep the highlight
        if left_target and self.state.is_dragging:
            self._update(is_dragging=False)

    def drop(self, items: Sequence[DropItem]) -> Optional[asyncio.Task]:
        if self.state.is_dragging:
            self._update(is_dragging=False)
        if self.disabled or not items:
            return None
        first = items[0]
        if isinstance(first, PhotoFile):
            return self.submit(first)
        return self.open_path(first)

    def request_browse(self) -> bool:
        """Открывает выбор файла (кнопка «Change» и клавиатура). Ничего не делает, если выключено."""
        if self.disabled or self.browse is None:
            return False
        self.browse()
        return True

    def click(self) -> bool:
        """Клик по области: выбор файла только пока превью нет."""
        if self.state.has_preview:
            return False
        return self.request_browse()

    def key_down(self, key: str) -> bool:
        """Возвращает True, если клавиша обработана."""
        if self.disabled:
            return False
        if key in BROWSE_KEYS and not self.state.has_preview:
            return self.request_browse()
        if key in REMOVE_KEYS and self.state.has_preview:
            self.remove()
            return True
        return False

    def remove(self) -> None:
        """Убирает текущее фото и сообщает родителю `(None, None)`."""
        self._start_cycle()
        self._release_owned_preview()
        self.picker_value = ""
        self._update(preview=None, error=None, is_loading=False)
        logger.info("Photo removed")
        self.on_image_select(None, None)

    def set_current_preview(self, preview: Optional[str]) -> None:
        """Превью, переданное родителем (например, сохранённое ранее фото)."""
        self.current_preview = preview
        if preview == self.state.preview:
            return
        self._release_owned_preview()
        changes = {"preview": preview or None}
        if not preview:
            changes["error"] = None
        self._update(**changes)

    def dispose(self) -> None:
        """Закрытие виджета: незавершённые циклы больше ничего не изменят."""
        self._disposed = True
        self._start_cycle()
        self._release_owned_preview()
        self.on_state_change = None
        self.browse = None

    # ---- Helpers ----
    def _start_cycle(self) -> int:
        self._generation += 1
        return self._generation

    def _metadata_error(self, file: Union[PhotoFile, FileInfo]) -> Optional[str]:
        for check in (validate_file_type, validate_file_size):
            result = check(file, self.config)
            if not result.valid:
                return result.error or GENERIC_ERROR
        return None

    def _is_stale(self, generation: int) -> bool:
        if self._disposed or generation != self._generation:
            logger.debug("Discarding stale cycle %d (current %d)", generation, self._generation)
            return True
        return False

    def _fail(self, generation: int, message: str) -> None:
        if self._is_stale(generation):
            return
        logger.warning("Photo rejected: %s", message)
        self._update(error=message, is_loading=False)

    def _release_owned_preview(self) -> None:
        preview = self.state.preview
        if is_object_url(preview) and self.registry.owns(preview):
            self.registry.revoke_object_url(preview)

    def _update(self, **changes) -> None:
        for name, value in changes.items():
            setattr(self.state, name, value)
        if self.on_state_change is not None:
            self.on_state_change(self.state)
