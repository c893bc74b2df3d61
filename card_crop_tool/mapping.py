"""
Contain/letterbox mapping between image pixels and the on-screen stage.

The mapping is a pure function of the natural image size and the stage
size.  Callers recompute it on every interaction tick instead of caching
it, because the stage can be resized at any time.
"""

from dataclasses import dataclass

from card_crop_tool.models import CropRect, NaturalImage


@dataclass(frozen=True)
class ContainMapping:
    scale: float
    offset_x: float
    offset_y: float
    draw_w: float
    draw_h: float


@dataclass(frozen=True)
class ScreenRect:
    """Rectangle in stage pixels."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def compute_contain_mapping(stage_w: float, stage_h: float, nat: NaturalImage) -> ContainMapping:
    """Fit *nat* inside the stage with uniform scale, centred."""
    sw = max(1.0, stage_w)
    sh = max(1.0, stage_h)
    scale = min(sw / nat.w, sh / nat.h)
    draw_w = nat.w * scale
    draw_h = nat.h * scale
    return ContainMapping(
        scale=scale,
        offset_x=(sw - draw_w) / 2,
        offset_y=(sh - draw_h) / 2,
        draw_w=draw_w,
        draw_h=draw_h,
    )


def to_screen_rect(crop: CropRect, mapping: ContainMapping) -> ScreenRect:
    return ScreenRect(
        left=mapping.offset_x + crop.x * mapping.scale,
        top=mapping.offset_y + crop.y * mapping.scale,
        width=crop.w * mapping.scale,
        height=crop.h * mapping.scale,
    )


def to_natural_rect(rect: ScreenRect, mapping: ContainMapping) -> CropRect:
    """Inverse of ``to_screen_rect`` (no clamping)."""
    return CropRect(
        (rect.left - mapping.offset_x) / mapping.scale,
        (rect.top - mapping.offset_y) / mapping.scale,
        rect.width / mapping.scale,
        rect.height / mapping.scale,
    )


def to_natural_point(px: float, py: float, mapping: ContainMapping,
                     nat: NaturalImage) -> tuple[float, float]:
    """Map a stage point to image pixels.

    Points in the letterbox bars snap to the nearest image edge first, so
    the result is always inside the image.
    """
    x_in = _clamp(px - mapping.offset_x, 0, mapping.draw_w)
    y_in = _clamp(py - mapping.offset_y, 0, mapping.draw_h)
    return (
        _clamp(x_in / mapping.scale, 0, nat.w),
        _clamp(y_in / mapping.scale, 0, nat.h),
    )
