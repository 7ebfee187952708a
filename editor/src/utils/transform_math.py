"""
Brand Kit Editor - Transform Math Utilities

This module provides the geometry shared by the interactive canvas and the
compositor: rotation normalization, hit-test radius, and overlay placement.

Both the pointer controller (hit testing on the reference canvas) and the
compositor (drawing into target image pixels) go through overlay_placement,
so the two paths cannot drift apart.

These pure math functions have no UI dependencies.
"""

import math
from collections import namedtuple

from constants import ROTATION_FULL_TURN
from utils.coordinate_transforms import canvas_to_image_space


# Where and how big an overlay is drawn, in whatever space it was computed for
OverlayPlacement = namedtuple(
    'OverlayPlacement',
    ['center_x', 'center_y', 'width', 'height', 'rotation'],
)


def normalize_rotation(degrees):
    """Normalize an angle in degrees into [0, 360).

    Handles negative angles and angles beyond one full turn.

    Raises:
        ValueError: if the angle is NaN or infinite
    """
    if not math.isfinite(degrees):
        raise ValueError(f"Rotation must be finite, got {degrees}")

    result = math.fmod(degrees, ROTATION_FULL_TURN)
    if result < 0:
        result += ROTATION_FULL_TURN
    # -1e-15 + 360 rounds back to 360.0
    if result >= ROTATION_FULL_TURN:
        result = 0.0
    return result


def clamp(value, min_value, max_value):
    """Clamp value into [min_value, max_value]"""
    return max(min_value, min(max_value, value))


def distance(x1, y1, x2, y2):
    """Euclidean distance between two points"""
    return math.hypot(x2 - x1, y2 - y1)


def angle_degrees(center_x, center_y, point_x, point_y):
    """Angle of the vector center -> point in degrees (atan2, Y-down)"""
    return math.degrees(math.atan2(point_y - center_y, point_x - center_x))


def element_radius(native_width, scale):
    """Hit-test radius of an overlay: half of its drawn width.

    Args:
        native_width: Overlay's native pixel width
        scale: Element scale factor

    Returns:
        Radius in the same units as native_width (never negative)
    """
    return max(0.0, native_width * scale / 2.0)


def drawn_size(native_size, scale):
    """Drawn pixel size of an overlay: native size times scale.

    Rounded to whole pixels with a 1px floor so degenerate scales still
    produce a drawable raster.
    """
    native_w, native_h = native_size
    width = max(1, int(round(native_w * scale)))
    height = max(1, int(round(native_h * scale)))
    return width, height


def overlay_placement(position, native_size, scale, rotation, canvas_size=None, image_size=None):
    """Compute where an overlay is drawn.

    Without canvas_size/image_size the placement is in reference canvas
    space (used by hit testing and the interactive painter). With both, the
    centre is mapped into target image pixels (used by the compositor).

    The drawn size always scales the overlay's *native* pixel size, whatever
    the target resolution.

    Args:
        position: (x, y) on the reference canvas
        native_size: (width, height) of the decoded overlay
        scale: Element scale factor
        rotation: Element rotation in degrees
        canvas_size: (width, height) of the reference canvas, optional
        image_size: (width, height) of the target image, optional

    Returns:
        OverlayPlacement
    """
    x, y = position
    if canvas_size is not None and image_size is not None:
        x, y = canvas_to_image_space(x, y, canvas_size, image_size)

    width, height = drawn_size(native_size, scale)
    return OverlayPlacement(x, y, width, height, normalize_rotation(rotation))
