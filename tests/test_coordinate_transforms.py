"""
Tests for coordinate mapping between reference canvas, target image and widget.
"""
import pytest

from utils.coordinate_transforms import (
    CoordinateMapper, canvas_to_image_space, image_to_canvas_space,
    canvas_fit_in_widget, widget_to_canvas_space, canvas_to_widget_space,
)


class TestCanvasImageMapping:

    def test_canvas_centre_maps_to_image_centre(self):
        assert canvas_to_image_space(400, 300, (800, 600), (1000, 1000)) == pytest.approx((500, 500))

    def test_corners(self):
        assert canvas_to_image_space(0, 0, (800, 600), (1920, 1080)) == (0, 0)
        assert canvas_to_image_space(800, 600, (800, 600), (1920, 1080)) == pytest.approx((1920, 1080))

    def test_axes_scale_independently(self):
        x, y = canvas_to_image_space(200, 150, (800, 600), (400, 1200))
        assert x == pytest.approx(100)
        assert y == pytest.approx(300)

    @pytest.mark.parametrize("image_size", [(1000, 1000), (37, 4096), (801, 599)])
    def test_inverse(self, image_size):
        mapper = CoordinateMapper((800, 600), image_size)
        for point in [(0, 0), (123.4, 567.8), (800, 600), (-50, 700)]:
            back = mapper.to_canvas_space(*mapper.to_image_space(*point))
            assert back == pytest.approx(point)

    def test_image_to_canvas(self):
        assert image_to_canvas_space(500, 500, (800, 600), (1000, 1000)) == pytest.approx((400, 300))

    @pytest.mark.parametrize("canvas_size,image_size", [
        ((0, 600), (100, 100)),
        ((800, 600), (100, -1)),
    ])
    def test_non_positive_sizes_rejected(self, canvas_size, image_size):
        with pytest.raises(ValueError):
            canvas_to_image_space(1, 1, canvas_size, image_size)
        with pytest.raises(ValueError):
            CoordinateMapper(canvas_size, image_size)


class TestWidgetMapping:

    def test_fit_letterboxes_wide_widget(self):
        zoom, offset_x, offset_y = canvas_fit_in_widget((800, 600), (1000, 600))
        assert zoom == pytest.approx(1.0)
        assert offset_x == pytest.approx(100)
        assert offset_y == pytest.approx(0)

    def test_fit_scales_down(self):
        zoom, offset_x, offset_y = canvas_fit_in_widget((800, 600), (400, 400))
        assert zoom == pytest.approx(0.5)
        assert offset_x == pytest.approx(0)
        assert offset_y == pytest.approx(50)

    def test_widget_round_trip(self):
        qt = canvas_to_widget_space(250, 75, (800, 600), (640, 700))
        assert widget_to_canvas_space(*qt, (800, 600), (640, 700)) == pytest.approx((250, 75))
