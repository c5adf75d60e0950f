import asyncio
import logging

import customtkinter as ctk
from tkinterdnd2 import TkinterDnD

from photo_upload.config import PresentationOptions
from photo_upload.controllers.app_controller import AppController
from photo_upload.ui.photo_preview_card import PhotoPreviewCard
from photo_upload.ui.photo_upload_area import PhotoUploadArea

logger = logging.getLogger(__name__)

LOOP_PUMP_MS = 15


class PhotoUploadApp(ctk.CTk, TkinterDnD.DnDWrapper):
    def __init__(self) -> None:
        super().__init__()
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")
        self.TkdndVersion = TkinterDnD._require(self)

        self.title("Student Photo")
        self.minsize(560, 420)

        # asyncio runs on the Tk thread, stepped from the Tk event loop
        self._loop = asyncio.new_event_loop()
        self._pump_id = self.after(LOOP_PUMP_MS, self._pump_loop)
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        self.grid_columnconfigure(0, weight=0)
        self.grid_columnconfigure(1, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self._area = PhotoUploadArea(
            self, loop=self._loop, options=PresentationOptions(label="Student Photo", required=True),
        )
        self._area.grid(row=0, column=0, sticky="n", padx=(12, 6), pady=12)

        right = ctk.CTkFrame(self, fg_color="transparent")
        right.grid(row=0, column=1, sticky="nsew", padx=(6, 12), pady=12)
        right.grid_columnconfigure(0, weight=1)

        self._card = PhotoPreviewCard(right)
        self._card.grid(row=0, column=0, sticky="ew")

        self._open_dialog_btn = ctk.CTkButton(right, text="Open in dialog…")
        self._open_dialog_btn.grid(row=1, column=0, sticky="w", pady=(12, 0))

        self._controller = AppController(
            area=self._area, card=self._card, open_dialog_btn=self._open_dialog_btn, window=self, loop=self._loop,
        )
        self._controller.bind_events()

    def _pump_loop(self) -> None:
        # run the callbacks that are ready, then hand control back to Tk
        self._loop.call_soon(self._loop.stop)
        self._loop.run_forever()
        self._pump_id = self.after(LOOP_PUMP_MS, self._pump_loop)

    def _on_close(self) -> None:
        self.after_cancel(self._pump_id)
        for task in asyncio.all_tasks(self._loop):
            task.cancel()
        self._loop.run_until_complete(asyncio.sleep(0))
        self._loop.close()
        logger.debug("Event loop closed")
        self.destroy()
