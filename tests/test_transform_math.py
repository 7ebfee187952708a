"""
Tests for shared transform math (rotation normalization, radius, placement).
"""
import math

import pytest

from utils.transform_math import (
    normalize_rotation, clamp, angle_degrees, element_radius, drawn_size,
    overlay_placement,
)


class TestNormalizeRotation:

    @pytest.mark.parametrize("degrees,expected", [
        (0, 0),
        (90, 90),
        (360, 0),
        (370, 10),
        (-10, 350),
        (-720, 0),
        (1085, 5),
    ])
    def test_values(self, degrees, expected):
        assert normalize_rotation(degrees) == pytest.approx(expected)

    def test_tiny_negative_stays_below_full_turn(self):
        result = normalize_rotation(-1e-15)
        assert 0 <= result < 360

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, bad):
        with pytest.raises(ValueError):
            normalize_rotation(bad)


def test_clamp():
    assert clamp(5, 0.1, 3.0) == 3.0
    assert clamp(0.01, 0.1, 3.0) == 0.1
    assert clamp(1.5, 0.1, 3.0) == 1.5


def test_angle_is_clockwise_on_y_down_screen():
    assert angle_degrees(0, 0, 10, 0) == pytest.approx(0)
    assert angle_degrees(0, 0, 0, 10) == pytest.approx(90)
    assert angle_degrees(0, 0, -10, 0) == pytest.approx(180)


class TestSizes:

    def test_radius_is_half_drawn_width(self):
        assert element_radius(200, 0.5) == pytest.approx(50)

    def test_radius_zero_for_unknown_size(self):
        assert element_radius(0, 2.0) == 0

    def test_drawn_size_scales_native_pixels(self):
        assert drawn_size((200, 100), 0.5) == (100, 50)

    def test_drawn_size_has_one_pixel_floor(self):
        assert drawn_size((3, 3), 0.1) == (1, 1)


class TestOverlayPlacement:

    def test_canvas_space_placement(self):
        placement = overlay_placement((100, 50), (80, 40), 2.0, 370)
        assert placement.center_x == 100
        assert placement.center_y == 50
        assert (placement.width, placement.height) == (160, 80)
        assert placement.rotation == pytest.approx(10)

    def test_image_space_placement(self):
        placement = overlay_placement((400, 300), (200, 200), 0.5, 0,
                                      canvas_size=(800, 600), image_size=(1000, 1000))
        assert (placement.center_x, placement.center_y) == pytest.approx((500, 500))
        # Size does not depend on the target resolution
        assert (placement.width, placement.height) == (100, 100)
