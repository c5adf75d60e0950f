"""Виджет области загрузки фото: клик, клавиатура, перетаскивание файлов.

Принципы:
- SRP: только отображение `UploadState` и перевод событий Tk в вызовы контроллера.
- Вся логика цикла обработки живёт в `PhotoUploadController`.
"""
from __future__ import annotations

import asyncio
import io
import logging
import tkinter as tk
from tkinter import TclError, filedialog
from typing import Dict, Optional

import customtkinter as ctk
from PIL import Image, ImageOps, ImageTk, UnidentifiedImageError
from tkinterdnd2 import COPY, DND_FILES, REFUSE_DROP

from photo_upload.config import PresentationOptions, UploadConfig
from photo_upload.controllers.upload_controller import ImageSelectCallback, PhotoUploadController
from photo_upload.models.errors import ImageDecodeError
from photo_upload.models.photo_model import UploadState
from photo_upload.services.blob_registry import ObjectUrlRegistry, get_registry, is_object_url
from photo_upload.services.image_service import ImageService
from photo_upload.services.validation_service import format_file_size

logger = logging.getLogger(__name__)

ACCENT = "#1f6aa5"
ERROR_FG = "#b91c1c"
BORDER = "#9ca3af"
# tkdnd type names for file payloads per platform
FILE_DRAG_TYPES = (DND_FILES, "text/uri-list", "CF_HDROP", "NSFilenamesPboardType")


class PhotoUploadArea(ctk.CTkFrame):
    """Квадратная зона выбора фото с превью, кнопками «Change»/«Remove» и строкой ошибки.

    `class_name="compact"` уменьшает зону (для плотных форм).
    """
    def __init__(
        self,
        master: ctk.CTk | tk.Misc,
        on_image_select: Optional[ImageSelectCallback] = None,
        *,
        loop: asyncio.AbstractEventLoop,
        current_preview: Optional[str] = None,
        config: Optional[UploadConfig] = None,
        options: Optional[PresentationOptions] = None,
        registry: Optional[ObjectUrlRegistry] = None,
    ) -> None:
        self._options = options or PresentationOptions()
        super().__init__(master, **dict(self._options.widget_options))
        self._config = config or UploadConfig()
        self._registry = registry or get_registry()
        self._side = 160 if self._options.class_name == "compact" else 240

        self._preview_cache: Dict[str, ImageTk.PhotoImage] = {}
        self._tk_preview: Optional[ImageTk.PhotoImage] = None

        # Callbacks
        self.on_image_select: Optional[ImageSelectCallback] = on_image_select

        self.controller = PhotoUploadController(
            on_image_select=self._emit_image_select,
            config=self._config,
            options=self._options,
            current_preview=current_preview,
            registry=self._registry,
            loop=loop,
            on_state_change=self._render,
            browse=self._open_file_dialog,
        )

        self.grid_columnconfigure(0, weight=1)

        label_text = self._options.label + (" *" if self._options.required else "")
        self._label = ctk.CTkLabel(self, text=label_text, font=ctk.CTkFont(size=14, weight="bold"), anchor="w")
        self._label.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        enabled = not self._options.disabled
        self._canvas = tk.Canvas(
            self,
            width=self._side,
            height=self._side,
            highlightthickness=2,
            highlightcolor=ACCENT,
            takefocus=1 if enabled else 0,
            bg=self._get_canvas_bg(),
            cursor="hand2" if enabled else "",
        )
        self._canvas.grid(row=1, column=0, padx=8, pady=4)

        # overlay controls live on the canvas as windows, shown per state
        self._progress = ctk.CTkProgressBar(self._canvas, mode="indeterminate", width=self._side // 2)
        self._change_btn = ctk.CTkButton(
            self._canvas, text="Change", width=72, command=self.controller.request_browse,
            state="normal" if enabled else "disabled",
        )
        self._remove_btn = ctk.CTkButton(
            self._canvas, text="Remove", width=72, fg_color="#ef4444", hover_color="#dc2626",
            command=self.controller.remove, state="normal" if enabled else "disabled",
        )

        self._error_val = ctk.StringVar(value="")
        self._error_label = ctk.CTkLabel(
            self, textvariable=self._error_val, text_color=ERROR_FG, wraplength=self._side, anchor="w", justify="left",
        )

        self._canvas.bind("<Button-1>", self._on_click)
        self._canvas.bind("<KeyPress>", self._on_key)
        self._register_drop_target()

        self._render(self.controller.state)

    # ---- Public API ----
    def set_current_preview(self, preview: Optional[str]) -> None:
        """Превью, заданное родителем (например, при редактировании сохранённой записи)."""
        self.controller.set_current_preview(preview)

    def open_file_dialog(self) -> None:
        self.controller.request_browse()

    def remove(self) -> None:
        self.controller.remove()

    def destroy(self) -> None:
        self.controller.dispose()
        self._preview_cache.clear()
        super().destroy()

    # ---- Rendering ----
    def _render(self, state: UploadState) -> None:
        c = self._canvas
        side = self._side
        c.delete("all")
        self._progress.stop()

        outline = ACCENT if state.is_dragging else BORDER
        c.create_rectangle(
            3, 3, side - 3, side - 3, outline=outline, width=2, dash=() if state.has_preview else (6, 4),
        )

        if state.is_loading:
            c.create_window(side // 2, side // 2 - 10, window=self._progress)
            c.create_text(side // 2, side // 2 + 14, text="Processing...", fill="#4b5563")
            self._progress.start()
        elif state.has_preview:
            self._draw_preview(state.preview)
        else:
            self._draw_prompt(state.is_dragging)

        if state.error:
            self._error_val.set(state.error)
            self._error_label.grid(row=2, column=0, padx=8, pady=(2, 8), sticky="ew")
        else:
            self._error_val.set("")
            self._error_label.grid_remove()

    def _draw_prompt(self, dragging: bool) -> None:
        c, mid = self._canvas, self._side // 2
        c.create_text(mid, mid - 36, text="📷", font=("TkDefaultFont", 22), fill=ACCENT)
        c.create_text(mid, mid + 4, text="Drop photo here" if dragging else "Click to upload", fill="#374151")
        c.create_text(mid, mid + 22, text="or drag & drop", fill="#6b7280")
        c.create_text(
            mid, mid + 46,
            text=f"{self._config.extensions_label()} (Max {format_file_size(self._config.max_size)})",
            fill="#9ca3af", width=self._side - 16, font=("TkDefaultFont", 8),
        )

    def _draw_preview(self, preview: str) -> None:
        c, side = self._canvas, self._side
        photo = self._preview_photo(preview)
        if photo is None:
            c.create_text(side // 2, side // 2 - 30, text="Preview unavailable", fill="#6b7280")
        else:
            self._tk_preview = photo
            c.create_image(0, 0, image=photo, anchor="nw")
        c.create_text(side - 10, 14, text="✓ Photo", anchor="e", fill="white", font=("TkDefaultFont", 9, "bold"))
        c.create_window(side // 2 - 40, side - 24, window=self._change_btn)
        c.create_window(side // 2 + 40, side - 24, window=self._remove_btn)

    def _preview_photo(self, preview: str) -> Optional[ImageTk.PhotoImage]:
        """Картинка превью, вписанная в квадрат с обрезкой краёв (как object-fit: cover)."""
        cached = self._preview_cache.get(preview)
        if cached is not None:
            return cached
        try:
            if is_object_url(preview):
                with Image.open(io.BytesIO(self._registry.resolve(preview))) as raw:
                    image = raw.convert("RGBA")
            else:
                image = ImageService.image_from_data_url(preview)
        except (ImageDecodeError, KeyError, UnidentifiedImageError, OSError) as exc:
            logger.warning("Cannot render preview: %s", exc)
            return None
        fitted = ImageOps.fit(image, (self._side, self._side), Image.Resampling.LANCZOS)
        self._preview_cache.clear()
        self._preview_cache[preview] = ImageTk.PhotoImage(fitted)
        return self._preview_cache[preview]

    def _get_canvas_bg(self) -> str:
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f9fafb"

    # ---- Events ----
    def _emit_image_select(self, file, preview) -> None:
        if self.on_image_select:
            self.on_image_select(file, preview)

    def _on_click(self, _event: tk.Event) -> None:
        if self._options.disabled:
            return
        self._canvas.focus_set()
        self.controller.click()

    def _on_key(self, event: tk.Event) -> Optional[str]:
        if self.controller.key_down(event.keysym):
            return "break"
        return None

    def _open_file_dialog(self) -> None:
        try:
            file_path = filedialog.askopenfilename(
                parent=self,
                title="Select photo",
                filetypes=self._config.picker_filetypes(),
            )
        except TclError:
            # Silent fail if dialog cannot open
            return
        if not file_path:
            return
        self.controller.open_path(file_path)

    # ---- Drag and drop (tkdnd) ----
    def _register_drop_target(self) -> None:
        try:
            self._canvas.drop_target_register(DND_FILES)
        except (TclError, AttributeError):
            # root window did not load tkdnd
            logger.info("Drag and drop is not available for this window")
            return
        self._canvas.dnd_bind("<<DropEnter>>", self._on_drop_enter)
        self._canvas.dnd_bind("<<DropPosition>>", self._on_drop_position)
        self._canvas.dnd_bind("<<DropLeave>>", self._on_drop_leave)
        self._canvas.dnd_bind("<<Drop>>", self._on_drop)

    def _payload_has_files(self, event) -> bool:
        types = []
        for attr in ("commontargettypes", "types"):
            value = getattr(event, attr, None)
            if value:
                types.extend(self.tk.splitlist(value) if isinstance(value, str) else value)
        return any(str(t) in FILE_DRAG_TYPES for t in types)

    def _pointer_inside(self, event) -> bool:
        try:
            widget = self.winfo_containing(int(event.x_root), int(event.y_root))
        except (TclError, TypeError, ValueError):
            return False
        while widget is not None:
            if widget is self._canvas:
                return True
            widget = widget.master
        return False

    def _on_drop_enter(self, event) -> str:
        self._canvas.focus_set()
        self.controller.drag_enter(self._payload_has_files(event))
        return self._on_drop_position(event)

    def _on_drop_position(self, _event) -> str:
        return COPY if self.controller.drag_over() == "copy" else REFUSE_DROP

    def _on_drop_leave(self, event) -> None:
        self.controller.drag_leave(left_target=not self._pointer_inside(event))

    def _on_drop(self, event) -> str:
        paths = list(self.tk.splitlist(event.data)) if event.data else []
        task = self.controller.drop(paths)
        return COPY if task is not None else REFUSE_DROP
