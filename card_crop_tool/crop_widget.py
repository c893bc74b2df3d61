"""
Interactive crop stage widget and Qt image helpers.

This module contains everything that touches both Qt **and** image display:
``pil_to_qpixmap``, the background ``ImageLoaderThread``, and the
``CropStageWidget`` that paints the letterboxed image with its crop overlay.
The widget holds no geometry logic of its own: it turns Qt input into
``crop_state`` events and repaints whatever state ``reduce`` returns.
"""

from PIL import Image
from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QRectF, QPointF, pyqtSignal, QThread
from PyQt6.QtGui import (
    QPainter, QPixmap, QColor, QPen, QBrush, QImage,
    QMouseEvent, QPaintEvent, QWheelEvent,
)

from card_crop_tool.crop_state import (
    DoubleClick, EditorState, PointerDown, PointerLeave, PointerMove, PointerUp, Wheel, reduce,
)
from card_crop_tool.hit_test import (
    CURSOR_DEFAULT, CURSOR_EW, CURSOR_MOVE, CURSOR_NESW, CURSOR_NS, CURSOR_NWSE,
)
from card_crop_tool.image_io import load_source
from card_crop_tool.mapping import compute_contain_mapping, to_screen_rect
from card_crop_tool.profiles import CropProfile

_CURSOR_SHAPES = {
    CURSOR_NWSE: Qt.CursorShape.SizeFDiagCursor,
    CURSOR_NESW: Qt.CursorShape.SizeBDiagCursor,
    CURSOR_NS: Qt.CursorShape.SizeVerCursor,
    CURSOR_EW: Qt.CursorShape.SizeHorCursor,
    CURSOR_MOVE: Qt.CursorShape.SizeAllCursor,
    CURSOR_DEFAULT: Qt.CursorShape.ArrowCursor,
}

# Half-size of the painted handle squares (screen pixels)
_HANDLE_DRAW = 5


# =============================================================================
# Qt ↔ PIL helpers
# =============================================================================

def pil_to_qpixmap(pil_img: Image.Image) -> QPixmap:
    """Convert a PIL Image to QPixmap."""
    img_rgba = pil_img.convert("RGBA")
    data = img_rgba.tobytes("raw", "RGBA")
    qimg = QImage(data, img_rgba.width, img_rgba.height, QImage.Format.Format_RGBA8888)
    return QPixmap.fromImage(qimg.copy())


# =============================================================================
# Background image loader
# =============================================================================

class ImageLoaderThread(QThread):
    """Decodes a crop source off the UI thread.

    Results are tagged with the *generation* they were started for so the
    receiver can drop answers that arrive after the session changed.
    """
    loaded = pyqtSignal(int, object)
    failed = pyqtSignal(int, object)

    def __init__(self, source, generation: int, parent=None):
        super().__init__(parent)
        self._source = source
        self._generation = generation

    def run(self):
        try:
            result = load_source(self._source)
        except Exception as e:
            self.failed.emit(self._generation, e)
            return
        self.loaded.emit(self._generation, result)


# =============================================================================
# Crop stage widget
# =============================================================================

class CropStageWidget(QWidget):
    """Displays an image with an interactive, resizable crop overlay."""

    crop_changed = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(480, 320)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        self._pixmap: QPixmap | None = None
        self._state = EditorState(profile=CropProfile())
        self._loading = False

    # --- State ---

    @property
    def state(self) -> EditorState:
        return self._state

    def set_loading(self, loading: bool):
        """Show/hide loading indicator."""
        self._loading = loading
        self.update()

    def set_image(self, pixmap: QPixmap, state: EditorState):
        """Show *pixmap* and start editing from *state*."""
        self._loading = False
        self._pixmap = pixmap
        self._state = state
        self.crop_changed.emit()
        self.update()

    def has_image(self) -> bool:
        """Return True if an image is loaded and ready for crop operations."""
        return self._pixmap is not None and self._state.ready

    def clear(self, profile: CropProfile | None = None):
        self._pixmap = None
        self._state = EditorState(profile=profile or self._state.profile)
        self.setCursor(Qt.CursorShape.ArrowCursor)
        self.update()

    def dispatch(self, event):
        """Feed one editor event through the reducer and repaint."""
        old = self._state
        self._state = reduce(old, event)
        if self._state.cursor != old.cursor:
            self.setCursor(_CURSOR_SHAPES[self._state.cursor])
        if self._state.rect != old.rect:
            self.crop_changed.emit()
            self.update()

    # --- Painting ---

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor(30, 30, 30))

        if not self._pixmap or not self._state.ready:
            painter.setPen(QColor(128, 128, 128))
            msg = "Loading image…" if self._loading else "No image loaded"
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, msg)
            painter.end()
            return

        mapping = compute_contain_mapping(self.width(), self.height(), self._state.natural)
        dest = QRectF(mapping.offset_x, mapping.offset_y, mapping.draw_w, mapping.draw_h)
        painter.drawPixmap(dest, self._pixmap, QRectF(self._pixmap.rect()))

        sr = to_screen_rect(self._state.rect, mapping)
        crop_rect = QRectF(sr.left, sr.top, sr.width, sr.height)
        dim = QColor(0, 0, 0, 140)

        # Top strip
        painter.fillRect(QRectF(dest.left(), dest.top(), dest.width(), crop_rect.top() - dest.top()), dim)
        # Bottom strip
        painter.fillRect(QRectF(dest.left(), crop_rect.bottom(), dest.width(), dest.bottom() - crop_rect.bottom()), dim)
        # Left strip
        painter.fillRect(QRectF(dest.left(), crop_rect.top(), crop_rect.left() - dest.left(), crop_rect.height()), dim)
        # Right strip
        painter.fillRect(QRectF(crop_rect.right(), crop_rect.top(), dest.right() - crop_rect.right(), crop_rect.height()), dim)

        painter.setPen(QPen(QColor(255, 255, 255, 230), 2))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(crop_rect)

        # Handles at corners and edge midpoints
        painter.setPen(QPen(QColor(0, 0, 0), 1))
        painter.setBrush(QBrush(QColor(255, 255, 255)))
        xs = (crop_rect.left(), crop_rect.center().x(), crop_rect.right())
        ys = (crop_rect.top(), crop_rect.center().y(), crop_rect.bottom())
        for i, hx in enumerate(xs):
            for j, hy in enumerate(ys):
                if i == 1 and j == 1:
                    continue
                painter.drawRect(QRectF(QPointF(hx - _HANDLE_DRAW, hy - _HANDLE_DRAW),
                                        QPointF(hx + _HANDLE_DRAW, hy + _HANDLE_DRAW)))

        painter.setPen(QColor(255, 255, 255))
        rect = self._state.rect
        label = f"{round(rect.w)} × {round(rect.h)}"
        painter.drawText(
            crop_rect.adjusted(0, -20, 0, 0).toRect(),
            Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignBottom,
            label,
        )

        painter.end()

    # --- Mouse interaction ---

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton or not self.has_image():
            return
        pos = event.position()
        self.dispatch(PointerDown(pos.x(), pos.y(), self.width(), self.height()))

    def mouseMoveEvent(self, event: QMouseEvent):
        pos = event.position()
        lock = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        self.dispatch(PointerMove(pos.x(), pos.y(), self.width(), self.height(), lock_aspect=lock))

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton:
            self.dispatch(PointerUp())

    def leaveEvent(self, event):
        self.dispatch(PointerLeave())
        super().leaveEvent(event)

    def mouseDoubleClickEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton and self.has_image():
            self.dispatch(DoubleClick())

    def wheelEvent(self, event: QWheelEvent):
        # Always consume the wheel so the surrounding view never scrolls
        event.accept()
        delta = event.angleDelta().y()
        if delta == 0 or not self.has_image():
            return
        # Rolling towards the user (negative angle) grows the crop
        self.dispatch(Wheel(-delta))
