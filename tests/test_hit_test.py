"""
Tests for handle hit testing and cursor names.
"""
import pytest

from card_crop_tool.hit_test import (
    CURSOR_DEFAULT, CURSOR_EW, CURSOR_MOVE, CURSOR_NESW, CURSOR_NS, CURSOR_NWSE,
    HitResult, cursor_for, hit_test,
)
from card_crop_tool.mapping import ScreenRect

RECT = ScreenRect(100, 100, 200, 100)  # right 300, bottom 200


class TestHitTest:

    @pytest.mark.parametrize("point,handle", [
        ((100, 100), "nw"),
        ((300, 100), "ne"),
        ((100, 200), "sw"),
        ((300, 200), "se"),
        ((92, 92), "nw"),
        ((308, 208), "se"),
    ])
    def test_corners(self, point, handle):
        assert hit_test(*point, RECT).handle == handle

    @pytest.mark.parametrize("point,handle", [
        ((200, 105), "n"),
        ((200, 195), "s"),
        ((105, 150), "w"),
        ((295, 150), "e"),
    ])
    def test_edges_inside(self, point, handle):
        hit = hit_test(*point, RECT)
        assert hit.handle == handle
        assert hit.inside

    def test_corner_wins_over_edge(self):
        # Within tolerance of both the top edge and the left edge
        assert hit_test(108, 108, RECT).handle == "nw"

    def test_edge_outside_rect_is_not_a_handle(self):
        hit = hit_test(95, 150, RECT)
        assert hit.handle is None
        assert not hit.inside

    def test_interior_is_move(self):
        assert hit_test(200, 150, RECT) == HitResult(None, True)

    def test_far_outside(self):
        assert hit_test(10, 10, RECT) == HitResult(None, False)

    def test_custom_tolerance(self):
        assert hit_test(115, 150, RECT, tolerance=20).handle == "w"
        assert hit_test(115, 150, RECT, tolerance=10).handle is None


class TestCursor:

    @pytest.mark.parametrize("handle,cursor", [
        ("nw", CURSOR_NWSE), ("se", CURSOR_NWSE),
        ("ne", CURSOR_NESW), ("sw", CURSOR_NESW),
        ("n", CURSOR_NS), ("s", CURSOR_NS),
        ("e", CURSOR_EW), ("w", CURSOR_EW),
    ])
    def test_handle_cursors(self, handle, cursor):
        assert cursor_for(HitResult(handle, True)) == cursor

    def test_move_and_default(self):
        assert cursor_for(HitResult(None, True)) == CURSOR_MOVE
        assert cursor_for(HitResult(None, False)) == CURSOR_DEFAULT
