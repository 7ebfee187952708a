"""Transform data structures for coordinate and state representation."""
from dataclasses import dataclass


@dataclass
class Vec2:
    """2D vector for coordinate pairs.

    Used for any x/y coordinate pair across different spaces:
    - Reference canvas positions
    - Target image pixels
    - Qt widget pixels
    """
    x: float
    y: float

    def __iter__(self):
        """Allow tuple unpacking: x, y = vec2"""
        return iter((self.x, self.y))


@dataclass
class Transform:
    """Transform state of one overlay: position, uniform scale, rotation.

    pos is in reference canvas space, scale multiplies the overlay's native
    pixel size, rotation is in degrees (clockwise on screen, Y-down).
    """
    pos: Vec2
    scale: float = 1.0
    rotation: float = 0.0
