"""Drag context dataclass for the brand kit canvas.

Unified drag state for one in-progress pointer drag.
"""

from dataclasses import dataclass, field

from models.transform import Transform


@dataclass
class DragContext:
    """State captured at pointer-down and carried until pointer-up."""
    operation: str  # 'move' or 'rotate'
    element_id: str
    start_transform: Transform  # element transform at grab time
    grab_x: float  # pointer at grab, canvas space
    grab_y: float
    grab_angle: float = 0.0  # degrees, element centre -> pointer
    grab_distance: float = 0.0  # element centre -> pointer
    modifiers: set = field(default_factory=set)  # modifiers seen on the latest event
    last_pointer: tuple = None  # latest pointer position received
    changed: bool = False  # any move event mutated the element
