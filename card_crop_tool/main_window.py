"""
Main application window.

Stands in for the console page that owns an image field: pick a crop
profile, open a local file or a remote URL, crop it, preview the result
and save it.  The window owns every blob it creates (downloaded sources and
crop previews) and revokes them when they are replaced, removed, or when
the window closes.
"""

import logging
from pathlib import Path

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFileDialog,
    QGroupBox, QMessageBox, QStatusBar, QToolBar, QComboBox, QInputDialog,
    QApplication, QSizePolicy,
)
from PyQt6.QtCore import Qt, QThread, pyqtSignal
from PyQt6.QtGui import QAction, QPixmap

from card_crop_tool.config import FETCH_TIMEOUT, IMAGE_EXTENSIONS
from card_crop_tool.crop_dialog import CropDialog
from card_crop_tool.export import CropResult
from card_crop_tool.image_io import BlobRegistry, fetch_remote, is_remote, remote_name, unique_path
from card_crop_tool.profiles import CropProfile, find_profile, load_profiles

logger = logging.getLogger(__name__)


class RemoteFetchThread(QThread):
    """Downloads a remote source into a blob off the UI thread.

    Results carry the *generation* they were started for; the receiver owns
    the blob and revokes it when the answer arrives too late.
    """
    fetched = pyqtSignal(int, object)
    failed = pyqtSignal(int, object)

    def __init__(self, url: str, registry: BlobRegistry, generation: int, parent=None):
        super().__init__(parent)
        self._url = url
        self._registry = registry
        self._generation = generation

    def run(self):
        try:
            blob = fetch_remote(self._url, self._registry, timeout=FETCH_TIMEOUT)
        except Exception as e:
            self.failed.emit(self._generation, e)
            return
        self.fetched.emit(self._generation, blob)


class MainWindow(QMainWindow):
    def __init__(self, profiles: list[CropProfile] | None = None):
        super().__init__()
        self.setWindowTitle("Card Crop Tool")
        self.setMinimumSize(720, 480)

        # Screen-aware startup size, clamped to 80% of screen
        preferred_w, preferred_h = 1100, 760
        screen = QApplication.primaryScreen()
        if screen is not None:
            avail = screen.availableGeometry()
            preferred_w = min(preferred_w, int(avail.width() * 0.8))
            preferred_h = min(preferred_h, int(avail.height() * 0.8))
        self.resize(preferred_w, preferred_h)

        self._profiles = profiles or load_profiles()
        self._registry = BlobRegistry()
        self._source_blob: Path | None = None   # downloaded remote source
        self._preview_path: Path | None = None  # current crop preview
        self._result: CropResult | None = None
        self._last_dir: Path | None = None
        self._fetch_generation = 0
        self._fetch_threads: list[RemoteFetchThread] = []
        self._pending_name = ""
        self._pending_profile: CropProfile | None = None

        self._crop_dialog = CropDialog(self._registry, parent=self)
        self._crop_dialog.confirmed.connect(self._on_crop_confirmed)
        self._crop_dialog.closed.connect(self._on_crop_closed)

        self._build_ui()
        self._update_button_states()

    # =========================================================================
    # UI construction
    # =========================================================================

    def _build_ui(self):
        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        act_open = QAction("📂 Open Image…", self)
        act_open.triggered.connect(self._select_file)
        toolbar.addAction(act_open)

        act_url = QAction("🌐 Open URL…", self)
        act_url.triggered.connect(self._enter_url)
        toolbar.addAction(act_url)

        toolbar.addSeparator()

        self._act_recrop = QAction("✂ Re-crop", self)
        self._act_recrop.triggered.connect(self._recrop)
        toolbar.addAction(self._act_recrop)

        self._act_save = QAction("💾 Save Crop…", self)
        self._act_save.triggered.connect(self._save_result)
        toolbar.addAction(self._act_save)

        self._act_remove = QAction("✕ Remove Image", self)
        self._act_remove.triggered.connect(self._remove_result)
        toolbar.addAction(self._act_remove)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QHBoxLayout(central)

        profile_group = QGroupBox("Profile")
        profile_layout = QVBoxLayout(profile_group)
        self._profile_combo = QComboBox()
        for profile in self._profiles:
            self._profile_combo.addItem(profile.name)
        self._profile_combo.currentTextChanged.connect(self._on_profile_changed)
        profile_layout.addWidget(self._profile_combo)
        self._profile_info = QLabel("")
        self._profile_info.setWordWrap(True)
        self._profile_info.setStyleSheet("color: #aaa; font-size: 8pt;")
        profile_layout.addWidget(self._profile_info)
        profile_layout.addStretch()
        profile_group.setFixedWidth(220)
        layout.addWidget(profile_group)

        preview_group = QGroupBox("Preview")
        preview_layout = QVBoxLayout(preview_group)
        self._preview_label = QLabel("No image")
        self._preview_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._preview_label.setSizePolicy(QSizePolicy.Policy.Ignored, QSizePolicy.Policy.Ignored)
        self._preview_label.setStyleSheet("background: #1e1e1e; border: 1px solid #444;")
        preview_layout.addWidget(self._preview_label, stretch=1)
        self._result_label = QLabel("")
        preview_layout.addWidget(self._result_label)
        layout.addWidget(preview_group, stretch=1)

        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self._status.showMessage("Open an image to crop.")

        self._on_profile_changed(self._profile_combo.currentText())

    def current_profile(self) -> CropProfile:
        return find_profile(self._profiles, self._profile_combo.currentText())

    def _on_profile_changed(self, name: str):
        p = find_profile(self._profiles, name)
        self._profile_info.setText(
            f"Ratio {p.ratio_w}:{p.ratio_h}\nMin size {p.min_size}px\n"
            f"Margin {p.margin:.0%}\nOutput {p.output_format}"
        )

    def _update_button_states(self):
        has_result = self._result is not None
        self._act_recrop.setEnabled(has_result)
        self._act_save.setEnabled(has_result)
        self._act_remove.setEnabled(has_result)

    # =========================================================================
    # Opening sources
    # =========================================================================

    def _select_file(self):
        patterns = " ".join(f"*{ext}" for ext in sorted(IMAGE_EXTENSIONS))
        start = str(self._last_dir) if self._last_dir else ""
        path, _ = QFileDialog.getOpenFileName(self, "Select Image", start, f"Images ({patterns})")
        if not path:
            return
        path = Path(path)
        if path.suffix.lower() not in IMAGE_EXTENSIONS:
            QMessageBox.warning(self, "Open Image", "Choose an image (JPG/PNG/WebP).")
            return
        self._last_dir = path.parent
        self.open_cropper(str(path), path.name)

    def _enter_url(self):
        url, ok = QInputDialog.getText(self, "Open URL", "Image URL:")
        if ok and url.strip():
            self.open_cropper(url.strip())

    def open_cropper(self, source: str, original_name: str | None = None):
        """Open the crop dialog on *source*.

        Remote sources are downloaded in the background first; the dialog
        shows its loading state until the blob arrives.
        """
        self._cancel_fetch()
        self._release_source_blob()
        profile = self.current_profile()

        if is_remote(source):
            self._pending_name = original_name or remote_name(source)
            self._pending_profile = profile
            thread = RemoteFetchThread(source, self._registry, self._fetch_generation, parent=self)
            thread.fetched.connect(self._on_fetched)
            thread.failed.connect(self._on_fetch_failed)
            thread.finished.connect(lambda t=thread: self._forget_fetch(t))
            self._fetch_threads.append(thread)
            thread.start()
            self._crop_dialog.open_pending(profile)
            self._status.showMessage(f"Downloading {source}…")
            return

        self._crop_dialog.open_source(source, profile, original_name)
        self._status.showMessage("Cropping…")

    def _recrop(self):
        """Reopen the cropper on the current preview."""
        if self._result is None or self._preview_path is None:
            return
        self.open_cropper(str(self._preview_path), self._result.file_name)

    def _cancel_fetch(self):
        # Bumping the generation makes any in-flight download stale
        self._fetch_generation += 1

    def _forget_fetch(self, thread: RemoteFetchThread):
        if thread in self._fetch_threads:
            self._fetch_threads.remove(thread)
        thread.deleteLater()

    def _on_fetched(self, generation: int, blob: Path):
        if generation != self._fetch_generation:
            logger.info("Discarding late download %s", blob.name)
            self._registry.revoke(blob)
            return
        self._source_blob = blob
        self._crop_dialog.open_source(str(blob), self._pending_profile, self._pending_name)
        self._status.showMessage("Cropping…")

    def _on_fetch_failed(self, generation: int, error: Exception):
        if generation != self._fetch_generation:
            return
        QMessageBox.warning(self, "Open URL", str(error))
        self._crop_dialog.reject()
        self._status.showMessage("Download failed.")

    def _release_source_blob(self):
        self._registry.revoke(self._source_blob)
        self._source_blob = None

    # =========================================================================
    # Crop results
    # =========================================================================

    def _on_crop_confirmed(self, result: CropResult, preview_path: str):
        self._release_source_blob()
        self._registry.revoke(self._preview_path)
        self._preview_path = Path(preview_path)
        self._result = result

        pixmap = QPixmap(preview_path)
        self._preview_label.setPixmap(pixmap.scaled(
            self._preview_label.size(), Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        ))
        self._result_label.setText(f"{result.file_name}  ·  {result.width} × {result.height}")
        self._status.showMessage(f"Cropped {result.file_name}")
        logger.info("Crop confirmed: %s %dx%d", result.file_name, result.width, result.height)
        self._update_button_states()

    def _on_crop_closed(self):
        self._cancel_fetch()
        self._release_source_blob()
        self._status.showMessage("Crop cancelled.")

    def _save_result(self):
        if self._result is None:
            return
        start = (self._last_dir or Path.home()) / self._result.file_name
        path, _ = QFileDialog.getSaveFileName(self, "Save Crop", str(unique_path(start)))
        if not path:
            return
        try:
            Path(path).write_bytes(self._result.data)
        except OSError as exc:
            QMessageBox.warning(self, "Save Failed", f"Could not save crop:\n{exc}")
            return
        self._status.showMessage(f"Saved {path}")

    def _remove_result(self):
        self._registry.revoke(self._preview_path)
        self._preview_path = None
        self._result = None
        self._preview_label.clear()
        self._preview_label.setText("No image")
        self._result_label.setText("")
        self._update_button_states()

    def closeEvent(self, event):
        self._cancel_fetch()
        for thread in list(self._fetch_threads):
            thread.wait()
        self._crop_dialog.shutdown()
        self._registry.close()
        super().closeEvent(event)
