"""Модальное окно «Upload Photo» с областью загрузки внутри."""
from __future__ import annotations

import asyncio
from typing import Optional

import customtkinter as ctk

from photo_upload.config import PresentationOptions, UploadConfig
from photo_upload.controllers.upload_controller import ImageSelectCallback
from photo_upload.ui.photo_upload_area import PhotoUploadArea


class PhotoUploadDialog(ctk.CTkToplevel):
    def __init__(
        self,
        master: ctk.CTk,
        on_image_select: ImageSelectCallback,
        *,
        loop: asyncio.AbstractEventLoop,
        current_preview: Optional[str] = None,
        config: Optional[UploadConfig] = None,
    ) -> None:
        super().__init__(master)
        self.title("Upload Photo")
        self.resizable(False, False)
        self.transient(master)
        self.grid_columnconfigure(0, weight=1)

        self._area = PhotoUploadArea(
            self,
            on_image_select,
            loop=loop,
            current_preview=current_preview,
            config=config,
            options=PresentationOptions(label="Upload Photo"),
        )
        self._area.grid(row=0, column=0, padx=16, pady=(16, 8), sticky="nsew")

        self._close_btn = ctk.CTkButton(self, text="Close", command=self.close)
        self._close_btn.grid(row=1, column=0, padx=16, pady=(0, 16), sticky="e")

        self.bind("<Escape>", lambda _event: self.close())
        self.protocol("WM_DELETE_WINDOW", self.close)
        # CTkToplevel is not viewable right after creation
        self.after(100, self._make_modal)

    def close(self) -> None:
        self.grab_release()
        self.destroy()

    def _make_modal(self) -> None:
        if self.winfo_exists():
            self.grab_set()
            self.focus_set()
