"""
Crop editor state machine.

The editor is either ``Idle``, ``Moving`` or ``Resizing``.  Pointer, wheel
and double-click input arrive as small event objects and ``reduce`` maps
``(EditorState, event)`` to the next ``EditorState`` without touching Qt,
so the whole interaction model can be driven from tests.

Every pointer event carries the current stage size; the contain mapping is
rebuilt from it on each event rather than cached.
"""

from dataclasses import dataclass, replace

from card_crop_tool.hit_test import CURSOR_DEFAULT, cursor_for, hit_test
from card_crop_tool.mapping import compute_contain_mapping, to_natural_point, to_screen_rect
from card_crop_tool.models import (
    CropRect, NaturalImage, apply_aspect_from_anchor, initial_crop, max_crop,
    move_crop, recenter_crop, resize_crop, zoom_crop,
)
from card_crop_tool.profiles import CropProfile


# =============================================================================
# Drag states
# =============================================================================
@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Moving:
    start_x: float
    start_y: float
    start_rect: CropRect


@dataclass(frozen=True)
class Resizing:
    handle: str
    start_x: float
    start_y: float
    start_rect: CropRect


DragState = Idle | Moving | Resizing


# =============================================================================
# Events
# =============================================================================
@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float
    stage_w: float
    stage_h: float


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float
    stage_w: float
    stage_h: float
    lock_aspect: bool = False


@dataclass(frozen=True)
class PointerUp:
    pass


@dataclass(frozen=True)
class PointerLeave:
    pass


@dataclass(frozen=True)
class Wheel:
    delta_y: float


@dataclass(frozen=True)
class DoubleClick:
    pass


# =============================================================================
# Editor state
# =============================================================================
@dataclass(frozen=True)
class EditorState:
    profile: CropProfile
    natural: NaturalImage | None = None
    rect: CropRect | None = None
    drag: DragState = Idle()
    cursor: str = CURSOR_DEFAULT

    @property
    def ready(self) -> bool:
        return self.natural is not None and self.rect is not None

    @property
    def dragging(self) -> bool:
        return not isinstance(self.drag, Idle)


def start_session(profile: CropProfile, natural: NaturalImage) -> EditorState:
    """Fresh state for a newly loaded image, with the inset initial crop."""
    return EditorState(
        profile=profile,
        natural=natural,
        rect=initial_crop(natural, profile.margin, profile.min_size),
    )


def reduce(state: EditorState, event) -> EditorState:
    """Return the state that follows *event*."""
    if isinstance(event, (PointerUp, PointerLeave)):
        return replace(state, drag=Idle())

    if not state.ready:
        if isinstance(event, PointerMove):
            return replace(state, cursor=CURSOR_DEFAULT)
        return state

    if isinstance(event, PointerDown):
        return _on_pointer_down(state, event)
    if isinstance(event, PointerMove):
        return _on_pointer_move(state, event)
    if isinstance(event, Wheel):
        step = state.profile.zoom_step
        factor = step if event.delta_y > 0 else 2 - step
        return replace(state, rect=zoom_crop(state.rect, factor, state.natural, state.profile.min_size))
    if isinstance(event, DoubleClick):
        return replace(state, rect=max_crop(state.natural, state.profile.min_size))

    raise TypeError(f"Unknown editor event: {event!r}")


def _on_pointer_down(state: EditorState, event: PointerDown) -> EditorState:
    mapping = compute_contain_mapping(event.stage_w, event.stage_h, state.natural)
    screen = to_screen_rect(state.rect, mapping)
    hit = hit_test(event.x, event.y, screen, state.profile.handle_tolerance)
    cursor = cursor_for(hit)

    if hit.handle is not None:
        drag = Resizing(hit.handle, event.x, event.y, state.rect)
        return replace(state, drag=drag, cursor=cursor)
    if hit.inside:
        return replace(state, drag=Moving(event.x, event.y, state.rect), cursor=cursor)

    # Click outside: jump the selection to the click point
    nx, ny = to_natural_point(event.x, event.y, mapping, state.natural)
    rect = recenter_crop(state.rect, nx, ny, state.natural, state.profile.min_size)
    return replace(state, rect=rect, drag=Idle(), cursor=cursor)


def _on_pointer_move(state: EditorState, event: PointerMove) -> EditorState:
    mapping = compute_contain_mapping(event.stage_w, event.stage_h, state.natural)
    drag = state.drag
    min_size = state.profile.min_size

    if isinstance(drag, Moving):
        dx = (event.x - drag.start_x) / mapping.scale
        dy = (event.y - drag.start_y) / mapping.scale
        return replace(state, rect=move_crop(drag.start_rect, dx, dy, state.natural, min_size))

    if isinstance(drag, Resizing):
        dx = (event.x - drag.start_x) / mapping.scale
        dy = (event.y - drag.start_y) / mapping.scale
        rect = resize_crop(drag.start_rect, drag.handle, dx, dy, state.natural, min_size)
        if event.lock_aspect:
            rect = apply_aspect_from_anchor(rect, drag.handle, state.profile.aspect, state.natural, min_size)
        return replace(state, rect=rect)

    hit = hit_test(event.x, event.y, to_screen_rect(state.rect, mapping), state.profile.handle_tolerance)
    return replace(state, cursor=cursor_for(hit))
