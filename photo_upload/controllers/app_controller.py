"""Контроллер окна: связывает область загрузки, карточку фото и диалог.

SOLID:
- SRP: класс только передаёт события между виджетами и хранит выбранное фото формы.
- DIP: виджеты не знают друг о друге, общаются через контроллер.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import customtkinter as ctk

from photo_upload.models.photo_model import PhotoFile
from photo_upload.ui.photo_preview_card import PhotoPreviewCard
from photo_upload.ui.photo_upload_area import PhotoUploadArea
from photo_upload.ui.photo_upload_dialog import PhotoUploadDialog

logger = logging.getLogger(__name__)


@dataclass
class AppController:
    """Ответственности:
    - Хранит фото формы (файл и строку превью), как это делает страница регистрации.
    - Синхронизирует карточку с областью загрузки и с диалогом.
    """
    area: PhotoUploadArea
    card: PhotoPreviewCard
    open_dialog_btn: ctk.CTkButton
    window: ctk.CTk
    loop: asyncio.AbstractEventLoop

    photo: Optional[PhotoFile] = None
    photo_preview: Optional[str] = None

    def bind_events(self) -> None:
        self.area.on_image_select = self._handle_image_select
        self.card.on_change = self.area.open_file_dialog
        self.card.on_remove = self.area.remove
        self.open_dialog_btn.configure(command=self._handle_open_dialog)
        self._sync_card()

    # ---- Handlers ----
    def _handle_image_select(self, file: Optional[PhotoFile], preview: Optional[str]) -> None:
        if file is not None and preview:
            self.photo, self.photo_preview = file, preview
            logger.info("Form photo set to %s", file.name)
        else:
            self.photo, self.photo_preview = None, None
        self._sync_card()

    def _handle_dialog_select(self, file: Optional[PhotoFile], preview: Optional[str]) -> None:
        self._handle_image_select(file, preview)
        # the dialog result becomes the area's controlled preview
        self.area.set_current_preview(self.photo_preview)

    def _handle_open_dialog(self) -> None:
        PhotoUploadDialog(
            self.window,
            self._handle_dialog_select,
            loop=self.loop,
            current_preview=self.photo_preview,
        )

    # ---- Helpers ----
    def _sync_card(self) -> None:
        if self.photo_preview:
            self.card.show(self.photo, self.photo_preview)
            self.card.grid()
        else:
            self.card.clear()
            self.card.grid_remove()
