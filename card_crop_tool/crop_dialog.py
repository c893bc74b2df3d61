"""
Modal crop dialog.

``CropDialog`` is the only entry point callers need: ``open_source`` starts a
session on a local image, ``confirmed`` delivers the encoded crop plus a
preview file, and ``closed`` fires when the user cancels, presses Escape or
closes the window.  ``open_pending`` shows the loading state while a
remote source is still downloading.  Load failures close the dialog;
export failures keep it open so the user can retry.
"""

import logging
from pathlib import Path

from PyQt6.QtWidgets import QDialog, QHBoxLayout, QLabel, QMessageBox, QPushButton, QVBoxLayout
from PyQt6.QtCore import pyqtSignal

from card_crop_tool.crop_state import start_session
from card_crop_tool.crop_widget import CropStageWidget, ImageLoaderThread, pil_to_qpixmap
from card_crop_tool.errors import CropExportError
from card_crop_tool.export import CropResult, export_crop
from card_crop_tool.image_io import BlobRegistry, LoadedImage, source_path
from card_crop_tool.profiles import CropProfile

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Mouse: drag inside to <b>move</b>, drag edges or corners to <b>resize</b>. "
    "Wheel zooms the crop. Double-click selects the whole image. "
    "Hold <b>Shift</b> while resizing to keep the card ratio."
)


class CropDialog(QDialog):
    """Crop editor for one image at a time."""

    confirmed = pyqtSignal(object, str)  # CropResult, preview path
    closed = pyqtSignal()

    def __init__(self, registry: BlobRegistry, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Crop Image")
        self.setModal(True)
        self.resize(980, 680)

        self._registry = registry
        self._profile = CropProfile()
        self._image = None
        self._original_name = ""
        self._generation = 0
        self._active = False
        self._threads: list[ImageLoaderThread] = []

        layout = QVBoxLayout(self)

        help_label = QLabel(HELP_TEXT)
        help_label.setWordWrap(True)
        help_label.setStyleSheet("color: #aaa; font-size: 9pt;")
        layout.addWidget(help_label)

        self.stage = CropStageWidget()
        self.stage.crop_changed.connect(self._update_button_states)
        layout.addWidget(self.stage, stretch=1)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self._btn_cancel = QPushButton("Cancel")
        self._btn_cancel.clicked.connect(self.reject)
        buttons.addWidget(self._btn_cancel)
        self._btn_confirm = QPushButton("Use Crop")
        self._btn_confirm.clicked.connect(self.confirm_crop)
        buttons.addWidget(self._btn_confirm)
        layout.addLayout(buttons)

        self._update_button_states()

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def open_source(self, source, profile: CropProfile, original_name: str | None = None):
        """Start a crop session on a local image path.

        Remote URLs must already have been fetched into a local blob.
        """
        self.open_pending(profile)
        self._original_name = original_name or source_path(source).name

        thread = ImageLoaderThread(source, self._generation, parent=self)
        thread.loaded.connect(self._on_loaded)
        thread.failed.connect(self._on_failed)
        thread.finished.connect(lambda t=thread: self._forget_thread(t))
        self._threads.append(thread)
        thread.start()

    def open_pending(self, profile: CropProfile):
        """Show the dialog in its loading state before the source is available.

        The caller either follows up with ``open_source`` or closes the
        dialog with ``reject``; cancelling meanwhile emits ``closed`` as usual.
        """
        self._end_session()
        self._profile = profile
        self._original_name = ""
        self._active = True
        self.stage.clear(profile)
        self.stage.set_loading(True)
        self._update_button_states()
        self.open()

    def is_active(self) -> bool:
        return self._active

    def _end_session(self):
        # Bumping the generation makes any in-flight load stale
        self._generation += 1
        self._active = False
        self._image = None
        self.stage.clear()
        self._update_button_states()

    def _forget_thread(self, thread: ImageLoaderThread):
        if thread in self._threads:
            self._threads.remove(thread)
        thread.deleteLater()

    def shutdown(self):
        """Wait for pending loads; call before the owner is destroyed."""
        self._end_session()
        for thread in list(self._threads):
            thread.wait()

    # =========================================================================
    # Loader callbacks
    # =========================================================================

    def _on_loaded(self, generation: int, loaded: LoadedImage):
        if generation != self._generation or not self._active:
            return
        self._image = loaded.image
        state = start_session(self._profile, loaded.natural)
        self.stage.set_image(pil_to_qpixmap(loaded.image), state)
        self._update_button_states()

    def _on_failed(self, generation: int, error: Exception):
        if generation != self._generation or not self._active:
            return
        QMessageBox.warning(self, "Crop Image", str(error))
        self.reject()

    # =========================================================================
    # Confirm / close
    # =========================================================================

    def confirm_crop(self) -> CropResult | None:
        """Export the current rectangle; on success emit ``confirmed`` and close."""
        state = self.stage.state
        if not self._active or self._image is None or not state.ready:
            return None

        try:
            result = export_crop(
                self._image, state.rect, self._original_name,
                output_format=self._profile.output_format,
                jpeg_quality=self._profile.jpeg_quality,
                min_size=self._profile.min_size,
            )
            preview = self._write_preview(result)
        except CropExportError as exc:
            QMessageBox.warning(self, "Crop Image", str(exc))
            return None

        self._end_session()
        self.accept()
        self.confirmed.emit(result, str(preview))
        return result

    def _write_preview(self, result: CropResult) -> Path:
        try:
            return self._registry.create(result.data, Path(result.file_name).suffix)
        except OSError as exc:
            logger.warning("Could not write crop preview: %s", exc)
            raise CropExportError() from exc

    def reject(self):
        self._end_session()
        super().reject()
        self.closed.emit()

    def _update_button_states(self):
        self._btn_confirm.setEnabled(self._active and self._image is not None and self.stage.has_image())
