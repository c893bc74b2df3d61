"""
Tests for crop geometry helpers.

Verifies:
- Clamping to bounds and the minimum-size floor
- Initial inset crop and maximum crop
- Move, recenter, zoom and handle resize
- Aspect lock anchored opposite the dragged handle
"""
import pytest

from card_crop_tool.models import (
    CropRect, NaturalImage, apply_aspect_from_anchor, clamp_crop, initial_crop,
    max_crop, move_crop, recenter_crop, resize_crop, zoom_crop,
)

CARD = 900 / 520


def _assert_rect(rect, x, y, w, h):
    assert rect.x == pytest.approx(x)
    assert rect.y == pytest.approx(y)
    assert rect.w == pytest.approx(w)
    assert rect.h == pytest.approx(h)


# ══════════════════════════════════════════════════════════════════════════
# Clamping
# ══════════════════════════════════════════════════════════════════════════

class TestClampCrop:

    def test_inside_rect_unchanged(self, wide_natural):
        rect = CropRect(10, 20, 300, 200)
        assert clamp_crop(rect, wide_natural) == rect

    def test_negative_origin_pulled_in(self, wide_natural):
        _assert_rect(clamp_crop(CropRect(-50, -10, 300, 200), wide_natural), 0, 0, 300, 200)

    def test_overflow_shifts_left_and_up(self, wide_natural):
        _assert_rect(clamp_crop(CropRect(1500, 850, 300, 200), wide_natural), 1300, 700, 300, 200)

    def test_oversized_shrinks_to_image(self, wide_natural):
        _assert_rect(clamp_crop(CropRect(0, 0, 5000, 5000), wide_natural), 0, 0, 1600, 900)

    def test_min_size_floor(self, wide_natural):
        _assert_rect(clamp_crop(CropRect(100, 100, 10, 5), wide_natural, 80), 100, 100, 80, 80)

    def test_image_smaller_than_floor(self):
        rect = clamp_crop(CropRect(5, 5, 10, 10), NaturalImage(50, 40), 80)
        _assert_rect(rect, 0, 0, 80, 80)


# ══════════════════════════════════════════════════════════════════════════
# Initial / maximum crop
# ══════════════════════════════════════════════════════════════════════════

class TestInitialAndMax:

    def test_initial_crop_eight_percent(self, wide_natural):
        _assert_rect(initial_crop(wide_natural, 0.08, 80), 128, 72, 1344, 756)

    def test_initial_crop_ten_percent(self, wide_natural):
        _assert_rect(initial_crop(wide_natural, 0.10, 80), 160, 90, 1280, 720)

    def test_initial_crop_tiny_image_hits_floor(self):
        rect = initial_crop(NaturalImage(100, 100), 0.1, 90)
        _assert_rect(rect, 10, 10, 90, 90)

    def test_max_crop_is_full_image(self, wide_natural):
        _assert_rect(max_crop(wide_natural), 0, 0, 1600, 900)

    def test_max_crop_idempotent(self, wide_natural):
        assert max_crop(wide_natural) == max_crop(wide_natural)


# ══════════════════════════════════════════════════════════════════════════
# Move / recenter / zoom
# ══════════════════════════════════════════════════════════════════════════

class TestMoveAndZoom:

    def test_move_by_delta(self, wide_natural):
        _assert_rect(move_crop(CropRect(100, 100, 200, 100), 30, -20, wide_natural), 130, 80, 200, 100)

    def test_move_stops_at_edge(self, wide_natural):
        _assert_rect(move_crop(CropRect(100, 100, 200, 100), 5000, 5000, wide_natural), 1400, 800, 200, 100)

    def test_recenter_on_point(self, wide_natural):
        _assert_rect(recenter_crop(CropRect(0, 0, 200, 100), 800, 450, wide_natural), 700, 400, 200, 100)

    def test_recenter_near_corner_clamps(self, wide_natural):
        _assert_rect(recenter_crop(CropRect(500, 500, 200, 100), 0, 0, wide_natural), 0, 0, 200, 100)

    def test_zoom_out_scenario(self, wide_natural):
        start = initial_crop(wide_natural, 0.08, 80)
        _assert_rect(zoom_crop(start, 1.06, wide_natural), 87.68, 49.32, 1424.64, 801.36)

    def test_zoom_keeps_center(self, wide_natural):
        start = CropRect(400, 200, 400, 300)
        zoomed = zoom_crop(start, 0.94, wide_natural)
        assert zoomed.center == pytest.approx(start.center)

    def test_zoom_out_clamps_to_image(self, wide_natural):
        _assert_rect(zoom_crop(CropRect(0, 0, 1600, 900), 1.06, wide_natural), 0, 0, 1600, 900)

    def test_zoom_in_respects_floor(self, wide_natural):
        rect = CropRect(500, 500, 82, 82)
        for _ in range(10):
            rect = zoom_crop(rect, 0.94, wide_natural, 80)
        assert rect.w == pytest.approx(80)
        assert rect.h == pytest.approx(80)


# ══════════════════════════════════════════════════════════════════════════
# Handle resize
# ══════════════════════════════════════════════════════════════════════════

class TestResize:

    START = CropRect(100, 100, 400, 300)

    @pytest.mark.parametrize("handle,dx,dy,expected", [
        ("se", 50, 40, (100, 100, 450, 340)),
        ("nw", 50, 40, (150, 140, 350, 260)),
        ("n", 50, 40, (100, 140, 400, 260)),
        ("s", 50, 40, (100, 100, 400, 340)),
        ("e", 50, 40, (100, 100, 450, 300)),
        ("w", 50, 40, (150, 100, 350, 300)),
        ("ne", 50, 40, (100, 140, 450, 260)),
        ("sw", 50, 40, (150, 100, 350, 340)),
    ])
    def test_handle_moves_named_edges(self, wide_natural, handle, dx, dy, expected):
        _assert_rect(resize_crop(self.START, handle, dx, dy, wide_natural), *expected)

    def test_collapse_hits_floor(self, wide_natural):
        rect = resize_crop(self.START, "se", -1000, -1000, wide_natural, 80)
        assert rect.w == pytest.approx(80)
        assert rect.h == pytest.approx(80)


# ══════════════════════════════════════════════════════════════════════════
# Aspect lock
# ══════════════════════════════════════════════════════════════════════════

class TestAspectLock:

    def test_se_keeps_top_left(self, wide_natural):
        rect = apply_aspect_from_anchor(CropRect(128, 72, 1272, 628), "se", CARD, wide_natural)
        assert (rect.x, rect.y) == (128, 72)
        assert rect.w / rect.h == pytest.approx(CARD)
        assert rect.w == pytest.approx(1272)

    def test_nw_keeps_bottom_right(self, wide_natural):
        start = CropRect(200, 200, 520, 400)
        rect = apply_aspect_from_anchor(start, "nw", CARD, wide_natural)
        assert rect.x + rect.w == pytest.approx(start.x + start.w)
        assert rect.y + rect.h == pytest.approx(start.y + start.h)
        assert rect.w / rect.h == pytest.approx(CARD)

    def test_n_drives_width_from_height(self, wide_natural):
        start = CropRect(200, 200, 300, 260)
        rect = apply_aspect_from_anchor(start, "n", CARD, wide_natural)
        assert rect.h == pytest.approx(260)
        assert rect.w == pytest.approx(450)
        assert rect.y + rect.h == pytest.approx(460)
