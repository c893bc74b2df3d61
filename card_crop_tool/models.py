"""
Data models and crop-geometry utilities.

NaturalImage and CropRect are the core data structures shared by the
editor state machine, the widget and the export step.  Every rectangle is
expressed in the source image's native pixel space and every helper below
returns a rectangle that has already been through ``clamp_crop``, so the
bounds and minimum-size floor hold after any move, resize or zoom.
"""

from dataclasses import dataclass

from card_crop_tool.config import MIN_CROP_SIZE


# =============================================================================
# Data classes
# =============================================================================
@dataclass(frozen=True)
class NaturalImage:
    """Intrinsic pixel dimensions of the loaded source image."""
    w: int = 1
    h: int = 1


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in image coordinates (floats, not screen pixels)."""
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.w / 2, self.y + self.h / 2

    def as_box(self) -> tuple[float, float, float, float]:
        """Return ``(left, top, right, bottom)`` as Pillow expects."""
        return self.x, self.y, self.x + self.w, self.y + self.h


# =============================================================================
# Crop math utilities
# =============================================================================
def clamp_crop(crop: CropRect, nat: NaturalImage, min_size: float = MIN_CROP_SIZE) -> CropRect:
    """Clamp crop rectangle to image bounds and the minimum-size floor."""
    w = max(min_size, min(crop.w, nat.w))
    h = max(min_size, min(crop.h, nat.h))
    x = max(0, min(crop.x, nat.w - w))
    y = max(0, min(crop.y, nat.h - h))
    return CropRect(x, y, w, h)


def initial_crop(nat: NaturalImage, margin: float, min_size: float = MIN_CROP_SIZE) -> CropRect:
    """Centered crop inset by *margin* (a fraction) on every side."""
    crop = CropRect(
        nat.w * margin,
        nat.h * margin,
        nat.w * (1 - margin * 2),
        nat.h * (1 - margin * 2),
    )
    return clamp_crop(crop, nat, min_size)


def max_crop(nat: NaturalImage, min_size: float = MIN_CROP_SIZE) -> CropRect:
    """The whole image."""
    return clamp_crop(CropRect(0, 0, nat.w, nat.h), nat, min_size)


def recenter_crop(crop: CropRect, cx: float, cy: float, nat: NaturalImage,
                  min_size: float = MIN_CROP_SIZE) -> CropRect:
    """Move *crop* so its centre lands on ``(cx, cy)``, keeping its size."""
    moved = CropRect(cx - crop.w / 2, cy - crop.h / 2, crop.w, crop.h)
    return clamp_crop(moved, nat, min_size)


def move_crop(crop: CropRect, dx: float, dy: float, nat: NaturalImage,
              min_size: float = MIN_CROP_SIZE) -> CropRect:
    """Translate by a delta in image pixels."""
    return clamp_crop(CropRect(crop.x + dx, crop.y + dy, crop.w, crop.h), nat, min_size)


def zoom_crop(crop: CropRect, factor: float, nat: NaturalImage,
              min_size: float = MIN_CROP_SIZE) -> CropRect:
    """Scale around the rectangle's own centre."""
    cx, cy = crop.center
    nw = crop.w * factor
    nh = crop.h * factor
    return clamp_crop(CropRect(cx - nw / 2, cy - nh / 2, nw, nh), nat, min_size)


def resize_crop(crop: CropRect, handle: str, dx: float, dy: float, nat: NaturalImage,
                min_size: float = MIN_CROP_SIZE) -> CropRect:
    """Drag the edges named by *handle* (e.g. ``"se"``, ``"n"``) by ``(dx, dy)``.

    *crop* is the rectangle at drag start, so repeated calls during one drag
    do not accumulate rounding.
    """
    x, y, w, h = crop.x, crop.y, crop.w, crop.h
    if "e" in handle:
        w = crop.w + dx
    if "s" in handle:
        h = crop.h + dy
    if "w" in handle:
        x = crop.x + dx
        w = crop.w - dx
    if "n" in handle:
        y = crop.y + dy
        h = crop.h - dy
    return clamp_crop(CropRect(x, y, w, h), nat, min_size)


def apply_aspect_from_anchor(crop: CropRect, handle: str, aspect: float, nat: NaturalImage,
                             min_size: float = MIN_CROP_SIZE) -> CropRect:
    """Force ``w / h == aspect``, keeping the side opposite *handle* fixed.

    Handles touching a vertical edge (anything with ``e`` or ``w``) drive the
    height from the width; ``n`` and ``s`` drive the width from the height.
    """
    w, h = crop.w, crop.h
    if "e" in handle or "w" in handle:
        h = w / aspect
    else:
        w = h * aspect

    x, y = crop.x, crop.y
    if "n" in handle:
        y = crop.y + (crop.h - h)
    if "w" in handle:
        x = crop.x + (crop.w - w)
    return clamp_crop(CropRect(x, y, w, h), nat, min_size)
