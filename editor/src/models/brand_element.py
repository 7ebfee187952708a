"""
Brand Kit Editor - Brand Element Data Model

One positionable, rotatable, scalable, semi-transparent overlay image
(logo, watermark, or contact-info graphic).

Positions are expressed in reference canvas space, never in target image
pixels. Setters enforce the element invariants:
- scale > 0
- opacity in [0, 1]
- rotation normalized into [0, 360)

This is part of the MODEL layer - pure data, no UI logic.
"""

import math
import uuid as uuid_module
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from constants import (
    ELEMENT_TYPE_LOGO, ELEMENT_TYPE_WATERMARK, ELEMENT_TYPE_CONTACT_INFO,
    ELEMENT_TYPE_DEFAULTS, REFERENCE_CANVAS_SIZE,
    DEFAULT_SCALE, DEFAULT_ROTATION,
    OPACITY_MIN, OPACITY_MAX, DEFAULT_OPACITY,
)
from models.transform import Vec2, Transform
from utils.errors import InvalidConfigError
from utils.transform_math import normalize_rotation, clamp


class ElementType(str, Enum):
    """Kind of overlay. Values are the persisted spelling."""
    LOGO = ELEMENT_TYPE_LOGO
    WATERMARK = ELEMENT_TYPE_WATERMARK
    CONTACT_INFO = ELEMENT_TYPE_CONTACT_INFO


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


@dataclass
class BrandElement:
    """A single overlay and its transform on the reference canvas."""
    id: str
    type: ElementType
    source_url: str
    position: Vec2 = field(default_factory=lambda: Vec2(0.0, 0.0))
    scale: float = DEFAULT_SCALE
    rotation_deg: float = DEFAULT_ROTATION
    opacity: float = DEFAULT_OPACITY

    def __post_init__(self):
        self.type = ElementType(self.type)
        self.set_scale(self.scale)
        self.set_rotation(self.rotation_deg)
        self.set_opacity(self.opacity)

    @classmethod
    def create(cls, element_type, source_url: str,
               canvas_size: Tuple[float, float] = REFERENCE_CANVAS_SIZE,
               element_id: Optional[str] = None) -> 'BrandElement':
        """Create a new element with the per-type defaults

        Args:
            element_type: ElementType or its string value
            source_url: Where the overlay image comes from
            canvas_size: Reference canvas size used to place the default position
            element_id: Explicit id (a fresh uuid4 hex is generated otherwise)
        """
        element_type = ElementType(element_type)
        defaults = ELEMENT_TYPE_DEFAULTS[element_type.value]
        frac_x, frac_y = defaults['position']
        return cls(
            id=element_id or uuid_module.uuid4().hex,
            type=element_type,
            source_url=source_url,
            position=Vec2(canvas_size[0] * frac_x, canvas_size[1] * frac_y),
            scale=DEFAULT_SCALE,
            rotation_deg=DEFAULT_ROTATION,
            opacity=defaults['opacity'],
        )

    # ------------------------------------------------------------------
    # Invariant-enforcing setters
    # ------------------------------------------------------------------

    def set_position(self, x: float, y: float) -> None:
        self.position = Vec2(float(x), float(y))

    def set_scale(self, scale: float) -> None:
        if not _is_number(scale) or scale <= 0:
            raise ValueError(f"Scale must be a positive number, got {scale!r}")
        self.scale = float(scale)

    def set_rotation(self, degrees: float) -> None:
        self.rotation_deg = normalize_rotation(float(degrees))

    def set_opacity(self, opacity: float) -> None:
        if not _is_number(opacity):
            raise ValueError(f"Opacity must be a number, got {opacity!r}")
        self.opacity = clamp(float(opacity), OPACITY_MIN, OPACITY_MAX)

    # ------------------------------------------------------------------
    # Transform view
    # ------------------------------------------------------------------

    @property
    def transform(self) -> Transform:
        return Transform(Vec2(self.position.x, self.position.y), self.scale, self.rotation_deg)

    def apply_transform(self, transform: Transform) -> None:
        """Write a Transform back into the element (setters normalize it)"""
        self.set_position(transform.pos.x, transform.pos.y)
        self.set_scale(transform.scale)
        self.set_rotation(transform.rotation)

    def copy(self) -> 'BrandElement':
        return BrandElement(
            id=self.id,
            type=self.type,
            source_url=self.source_url,
            position=Vec2(self.position.x, self.position.y),
            scale=self.scale,
            rotation_deg=self.rotation_deg,
            opacity=self.opacity,
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_record(self) -> Dict[str, Any]:
        """Export to the persisted JSON shape"""
        return {
            'id': self.id,
            'type': self.type.value,
            'sourceUrl': self.source_url,
            'position': {'x': self.position.x, 'y': self.position.y},
            'scale': self.scale,
            'rotationDeg': self.rotation_deg,
            'opacity': self.opacity,
        }

    @classmethod
    def from_record(cls, record: Any, index: int = 0) -> 'BrandElement':
        """Build an element from one persisted record

        Rotation is normalized on load. Anything else that violates the
        element invariants makes the whole record invalid.

        Raises:
            InvalidConfigError: if the record is malformed
        """
        if not isinstance(record, dict):
            raise InvalidConfigError(index, f"expected an object, got {type(record).__name__}")

        element_id = record.get('id')
        if not isinstance(element_id, str) or not element_id:
            raise InvalidConfigError(index, "missing or empty 'id'")

        try:
            element_type = ElementType(record.get('type'))
        except ValueError:
            raise InvalidConfigError(index, f"unknown element type {record.get('type')!r}")

        source_url = record.get('sourceUrl')
        if not isinstance(source_url, str) or not source_url:
            raise InvalidConfigError(index, "missing or empty 'sourceUrl'")

        position = record.get('position')
        if not isinstance(position, dict) or not _is_number(position.get('x')) or not _is_number(position.get('y')):
            raise InvalidConfigError(index, "'position' must be an object with numeric x and y")

        scale = record.get('scale', DEFAULT_SCALE)
        if not _is_number(scale) or scale <= 0:
            raise InvalidConfigError(index, f"'scale' must be a positive number, got {scale!r}")

        rotation = record.get('rotationDeg', DEFAULT_ROTATION)
        if not _is_number(rotation):
            raise InvalidConfigError(index, f"'rotationDeg' must be a number, got {rotation!r}")

        opacity = record.get('opacity', DEFAULT_OPACITY)
        if not _is_number(opacity) or not OPACITY_MIN <= opacity <= OPACITY_MAX:
            raise InvalidConfigError(index, f"'opacity' must be a number in [0, 1], got {opacity!r}")

        return cls(
            id=element_id,
            type=element_type,
            source_url=source_url,
            position=Vec2(float(position['x']), float(position['y'])),
            scale=float(scale),
            rotation_deg=float(rotation),
            opacity=float(opacity),
        )
