"""
Handle hit testing and cursor feedback.

Handles are named by compass direction.  Corners are tested before edges
so that near a corner the diagonal handle wins; edge handles only count
while the pointer is inside the rectangle.
"""

from dataclasses import dataclass

from card_crop_tool.config import HANDLE_TOLERANCE
from card_crop_tool.mapping import ScreenRect

HANDLE_N = "n"
HANDLE_S = "s"
HANDLE_E = "e"
HANDLE_W = "w"
HANDLE_NW = "nw"
HANDLE_NE = "ne"
HANDLE_SW = "sw"
HANDLE_SE = "se"

CURSOR_NWSE = "nwse-resize"
CURSOR_NESW = "nesw-resize"
CURSOR_NS = "ns-resize"
CURSOR_EW = "ew-resize"
CURSOR_MOVE = "move"
CURSOR_DEFAULT = "default"


@dataclass(frozen=True)
class HitResult:
    handle: str | None = None
    inside: bool = False


def hit_test(mx: float, my: float, rect: ScreenRect,
             tolerance: float = HANDLE_TOLERANCE) -> HitResult:
    """Classify a stage point against the crop rectangle on screen."""
    near_l = abs(mx - rect.left) <= tolerance
    near_r = abs(mx - rect.right) <= tolerance
    near_t = abs(my - rect.top) <= tolerance
    near_b = abs(my - rect.bottom) <= tolerance
    inside = rect.left <= mx <= rect.right and rect.top <= my <= rect.bottom

    if near_l and near_t:
        return HitResult(HANDLE_NW, inside)
    if near_r and near_t:
        return HitResult(HANDLE_NE, inside)
    if near_l and near_b:
        return HitResult(HANDLE_SW, inside)
    if near_r and near_b:
        return HitResult(HANDLE_SE, inside)

    if inside:
        if near_t:
            return HitResult(HANDLE_N, inside)
        if near_b:
            return HitResult(HANDLE_S, inside)
        if near_l:
            return HitResult(HANDLE_W, inside)
        if near_r:
            return HitResult(HANDLE_E, inside)

    return HitResult(None, inside)


def cursor_for(hit: HitResult) -> str:
    if hit.handle in (HANDLE_NW, HANDLE_SE):
        return CURSOR_NWSE
    if hit.handle in (HANDLE_NE, HANDLE_SW):
        return CURSOR_NESW
    if hit.handle in (HANDLE_N, HANDLE_S):
        return CURSOR_NS
    if hit.handle in (HANDLE_E, HANDLE_W):
        return CURSOR_EW
    if hit.inside:
        return CURSOR_MOVE
    return CURSOR_DEFAULT
