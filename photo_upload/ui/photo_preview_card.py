"""Карточка выбранного фото: миниатюра, имя, размер, габариты и действия.

Принципы:
- SRP: только отображение сведений о фото, без логики обработки.
- ISP: события наружу через `on_change`/`on_remove`, данные внутрь через `show`/`clear`.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

import customtkinter as ctk
from PIL import ImageOps

from photo_upload.models.errors import ImageDecodeError
from photo_upload.models.photo_model import PhotoFile
from photo_upload.services.image_service import ImageService
from photo_upload.services.validation_service import format_file_size

logger = logging.getLogger(__name__)

THUMB_SIDE = 120


class PhotoPreviewCard(ctk.CTkFrame):
    """Скрывается, пока фото не выбрано."""
    def __init__(self, master: ctk.CTk | ctk.CTkFrame, **kwargs) -> None:
        super().__init__(master, border_width=2, corner_radius=8, **kwargs)
        self.grid_columnconfigure(1, weight=1)

        # Callbacks
        self.on_change: Optional[Callable[[], None]] = None
        self.on_remove: Optional[Callable[[], None]] = None

        self._thumb = ctk.CTkLabel(self, text="", width=THUMB_SIDE, height=THUMB_SIDE)
        self._thumb.grid(row=0, column=0, rowspan=5, padx=12, pady=12)

        self._title = ctk.CTkLabel(self, text="Selected Photo", font=ctk.CTkFont(size=14, weight="bold"), anchor="w")
        self._title.grid(row=0, column=1, padx=(0, 12), pady=(12, 2), sticky="w")

        self._name_val = ctk.StringVar(value="—")
        self._size_val = ctk.StringVar(value="—")
        self._dims_val = ctk.StringVar(value="—")

        self._info_name = ctk.CTkLabel(self, textvariable=self._name_val, wraplength=220, anchor="w", justify="left")
        self._info_size = ctk.CTkLabel(self, textvariable=self._size_val, anchor="w", justify="left")
        self._info_dims = ctk.CTkLabel(self, textvariable=self._dims_val, anchor="w", justify="left")

        self._info_name.grid(row=1, column=1, padx=(0, 12), pady=(0, 2), sticky="ew")
        self._info_size.grid(row=2, column=1, padx=(0, 12), pady=(0, 2), sticky="ew")
        self._info_dims.grid(row=3, column=1, padx=(0, 12), pady=(0, 2), sticky="ew")

        actions = ctk.CTkFrame(self, fg_color="transparent")
        actions.grid(row=4, column=1, padx=(0, 12), pady=(4, 12), sticky="w")
        self._change_btn = ctk.CTkButton(actions, text="Change", width=90, command=self._emit_change)
        self._remove_btn = ctk.CTkButton(
            actions, text="Remove", width=90, fg_color="#ef4444", hover_color="#dc2626", command=self._emit_remove,
        )
        self._change_btn.grid(row=0, column=0, padx=(0, 8))
        self._remove_btn.grid(row=0, column=1)

        self._thumb_image: Optional[ctk.CTkImage] = None

    # ---- Public API ----
    def show(self, file: Optional[PhotoFile], preview: str) -> None:
        """Отображает фото; `file` может отсутствовать, если превью пришло из сохранённой записи."""
        try:
            image = ImageService.image_from_data_url(preview)
        except ImageDecodeError as exc:
            logger.warning("Preview card cannot decode image: %s", exc)
            image = None

        if image is not None:
            thumb = ImageOps.fit(image, (THUMB_SIDE, THUMB_SIDE))
            self._thumb_image = ctk.CTkImage(light_image=thumb, dark_image=thumb, size=(THUMB_SIDE, THUMB_SIDE))
            self._thumb.configure(image=self._thumb_image)
            self._dims_val.set(f"{image.width} × {image.height} px")
        else:
            self._dims_val.set("—")

        if file is not None:
            self._name_val.set(file.name)
            self._size_val.set(format_file_size(file.size))
        else:
            self._name_val.set("Saved photo")
            self._size_val.set("—")

    def clear(self) -> None:
        # the thumbnail stays referenced; the card is hidden by its owner
        self._name_val.set("—")
        self._size_val.set("—")
        self._dims_val.set("—")

    # ---- Internals ----
    def _emit_change(self) -> None:
        if self.on_change:
            self.on_change()

    def _emit_remove(self) -> None:
        if self.on_remove:
            self.on_remove()
