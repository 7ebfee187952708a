"""Transform handle system for the brand kit canvas - ABC-based handles.

Each handle type is a class that knows:
- How to draw itself
- How to test if a pointer position hits it
- How a drag on it changes the element transform

Hit testing and dragging work in reference canvas space; drawing works in
widget pixels.
"""

from abc import ABC, abstractmethod
from PyQt5.QtCore import QPointF, Qt
from PyQt5.QtGui import QPen, QBrush, QColor

from constants import SCALE_MIN, SCALE_MAX, SELECTION_RING_COLOR, SELECTION_BODY_COLOR
from models.transform import Transform, Vec2
from utils.transform_math import angle_degrees, clamp, distance, normalize_rotation


class Handle(ABC):
    """Abstract base class for transform handles."""

    operation = None

    @abstractmethod
    def hit_test(self, mouse_x, mouse_y, center_x, center_y, radius) -> bool:
        """Test if pointer position hits this handle.

        Args:
            mouse_x, mouse_y: Pointer position in canvas space
            center_x, center_y: Element centre in canvas space
            radius: Element radius (half of native width x scale)

        Returns:
            bool: True if the pointer hits this handle
        """
        pass

    @abstractmethod
    def drag(self, context, mouse_x, mouse_y, current_transform) -> Transform:
        """Compute the element transform for one pointer-move.

        Args:
            context: DragContext captured at pointer-down
            mouse_x, mouse_y: Current pointer position in canvas space
            current_transform: Element transform before this move

        Returns:
            Transform: Updated transform object
        """
        pass

    @abstractmethod
    def draw(self, painter, center_x, center_y, radius):
        """Draw this handle.

        Args:
            painter: QPainter instance
            center_x, center_y: Element centre in widget pixels
            radius: Element radius in widget pixels
        """
        pass

    @abstractmethod
    def get_cursor(self):
        """Qt cursor shape shown while hovering this handle"""
        pass


class RotationRingHandle(Handle):
    """Annulus around the element at its radius: rotate (and scale with Shift)."""

    operation = 'rotate'

    def __init__(self, hit_tolerance):
        """
        Args:
            hit_tolerance: Distance from the radius that still grabs the ring
        """
        self.hit_tolerance = hit_tolerance

    def hit_test(self, mouse_x, mouse_y, center_x, center_y, radius):
        if radius <= 0:
            return False
        d = distance(center_x, center_y, mouse_x, mouse_y)
        return abs(d - radius) <= self.hit_tolerance

    def drag(self, context, mouse_x, mouse_y, current_transform):
        """Rotate around the centre by the angle swept since the grab.

        With Shift held on this event, also rescale by the ratio of the
        current pointer distance to the grab distance, clamped.
        """
        start = context.start_transform
        center_x, center_y = start.pos.x, start.pos.y

        current_angle = angle_degrees(center_x, center_y, mouse_x, mouse_y)
        new_rot = normalize_rotation(start.rotation + (current_angle - context.grab_angle))

        new_scale = current_transform.scale
        if 'shift' in context.modifiers and context.grab_distance > 0:
            ratio = distance(center_x, center_y, mouse_x, mouse_y) / context.grab_distance
            new_scale = clamp(start.scale * ratio, SCALE_MIN, SCALE_MAX)

        return Transform(Vec2(start.pos.x, start.pos.y), new_scale, new_rot)

    def draw(self, painter, center_x, center_y, radius):
        painter.setPen(QPen(QColor(*SELECTION_RING_COLOR), 2, Qt.DashLine))
        painter.setBrush(QBrush())
        painter.drawEllipse(QPointF(center_x, center_y), float(radius), float(radius))

    def get_cursor(self):
        """Cross cursor for rotation."""
        return Qt.CrossCursor


class BodyHandle(Handle):
    """Disc inside the element's radius: move."""

    operation = 'move'

    def hit_test(self, mouse_x, mouse_y, center_x, center_y, radius):
        if radius <= 0:
            return False
        return distance(center_x, center_y, mouse_x, mouse_y) <= radius

    def drag(self, context, mouse_x, mouse_y, current_transform):
        """Snap the element centre to the pointer (direct positioning)."""
        return Transform(Vec2(mouse_x, mouse_y), current_transform.scale, current_transform.rotation)

    def draw(self, painter, center_x, center_y, radius):
        """Draw a centre cross mark."""
        x_size = 5
        painter.setPen(QPen(QColor(*SELECTION_BODY_COLOR), 2))
        painter.drawLine(QPointF(center_x - x_size, center_y - x_size), QPointF(center_x + x_size, center_y + x_size))
        painter.drawLine(QPointF(center_x - x_size, center_y + x_size), QPointF(center_x + x_size, center_y - x_size))

    def get_cursor(self):
        """Move cursor for the body."""
        return Qt.SizeAllCursor
