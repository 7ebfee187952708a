"""
Brand Kit Editor - Transform Widget Components

This package contains the canvas transform architecture:
- handles.py: ABC-based handle classes (RotationRingHandle, BodyHandle)
- modes.py: Mode classes defining handle sets (RingMode, MoveOnlyMode)
- drag_context.py: Unified drag state management
"""

from .handles import Handle, RotationRingHandle, BodyHandle
from .modes import TransformMode, RingMode, MoveOnlyMode, create_mode
from .drag_context import DragContext

__all__ = [
    'Handle', 'RotationRingHandle', 'BodyHandle',
    'TransformMode', 'RingMode', 'MoveOnlyMode', 'create_mode',
    'DragContext',
]
