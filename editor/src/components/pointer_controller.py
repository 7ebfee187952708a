"""
Pointer Interaction Controller - state machine for the brand kit canvas

Turns raw pointer and keyboard events (already mapped into reference canvas
space) into TransformSession mutations:

    Idle --pointer-down on ring--> Rotating <--Shift--> RotatingScaling
    Idle --pointer-down on body--> Moving
    Moving / Rotating / RotatingScaling --pointer-up--> Idle

Every event is handled to completion before the next one; nothing here
suspends. Keyboard input is only honoured while brand kit editing mode is
active on the session.
"""

import logging
from enum import Enum

from constants import HANDLE_TOLERANCE, ARROW_KEY_MOVE_NORMAL, ARROW_KEY_MOVE_FAST
from components.transform_widgets import DragContext, create_mode
from utils.transform_math import angle_degrees, distance, element_radius

logger = logging.getLogger(__name__)


class InteractionState(Enum):
    IDLE = 'idle'
    MOVING = 'moving'
    ROTATING = 'rotating'
    ROTATING_SCALING = 'rotating_scaling'


# Key names accepted by key_press (Qt key names without the Key_ prefix)
DELETE_KEYS = ('Delete', 'Backspace')
ARROW_KEYS = {
    'Left': (-1, 0),
    'Right': (1, 0),
    'Up': (0, -1),
    'Down': (0, 1),
}


def _normalize_modifiers(modifiers):
    return {m.lower() for m in modifiers or ()}


class PointerInteractionController:
    """Drives a TransformSession from pointer/keyboard events"""

    def __init__(self, session, mode='ring', hit_tolerance=HANDLE_TOLERANCE):
        """
        Args:
            session: TransformSession to mutate
            mode: Handle set name ('ring' or 'move_only')
            hit_tolerance: Rotation ring tolerance in canvas units
        """
        self.session = session
        self.mode = create_mode(mode, hit_tolerance)
        self.state = InteractionState.IDLE
        self._active_handle = None

    # ------------------------------------------------------------------
    # Hit testing
    # ------------------------------------------------------------------

    def element_radius(self, element):
        native_w, _ = self.session.native_size(element.id)
        return element_radius(native_w, element.scale)

    def handle_at(self, x, y):
        """Handle of the selected element under the pointer, or None"""
        element = self.session.selected_element
        if element is None:
            return None
        return self.mode.get_handle_at_pos(
            x, y, element.position.x, element.position.y, self.element_radius(element))

    def element_at(self, x, y):
        """Topmost element whose body contains the pointer, or None"""
        for element in reversed(list(self.session.elements)):
            radius = self.element_radius(element)
            if radius > 0 and distance(element.position.x, element.position.y, x, y) <= radius:
                return element
        return None

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_down(self, x, y, modifiers=()):
        """Start a drag on the selected element, or change the selection.

        Returns:
            The started operation ('move' / 'rotate') or None
        """
        if not self.session.active:
            return None
        if self.session.active_drag is not None:
            # Lost the previous release (e.g. pointer left the window)
            self.pointer_up()

        handle = self.handle_at(x, y)
        if handle is None:
            hit = self.element_at(x, y)
            self.session.select(hit.id if hit is not None else None)
            logger.debug("Selection -> %s", self.session.selected_id)
            return None

        element = self.session.selected_element
        center_x, center_y = element.position.x, element.position.y
        self.session.active_drag = DragContext(
            operation=handle.operation,
            element_id=element.id,
            start_transform=element.transform,
            grab_x=x,
            grab_y=y,
            grab_angle=angle_degrees(center_x, center_y, x, y),
            grab_distance=distance(center_x, center_y, x, y),
            modifiers=_normalize_modifiers(modifiers),
        )
        self._active_handle = handle
        self.state = InteractionState.MOVING if handle.operation == 'move' else InteractionState.ROTATING
        logger.debug("Idle -> %s on %s", self.state.name, element.id)
        return handle.operation

    def pointer_move(self, x, y, modifiers=()):
        """Apply one pointer-move to the active drag.

        Returns:
            True if the element changed
        """
        context = self.session.active_drag
        if context is None:
            return False

        element = self.session.elements.get(context.element_id)
        if element is None:
            self._end_drag()
            return False

        context.modifiers = _normalize_modifiers(modifiers)
        new_transform = self._active_handle.drag(context, x, y, element.transform)
        element.apply_transform(new_transform)
        context.last_pointer = (x, y)
        context.changed = True

        if context.operation == 'rotate':
            self.state = (InteractionState.ROTATING_SCALING if 'shift' in context.modifiers
                          else InteractionState.ROTATING)
        return True

    def pointer_up(self, x=None, y=None):
        """Commit the active drag and return to Idle.

        Pointer-up without an active drag is a no-op.

        Returns:
            True if a change was committed
        """
        context = self.session.active_drag
        if context is None:
            return False

        self._end_drag()
        if context.changed:
            verb = 'Move' if context.operation == 'move' else 'Rotate'
            self.session.commit(f"{verb} element")
        logger.debug("%s -> IDLE (changed=%s)", context.operation, context.changed)
        return context.changed

    def cancel_drag(self):
        """Abort the active drag, restoring the transform captured at grab"""
        context = self.session.active_drag
        if context is None:
            return False
        element = self.session.elements.get(context.element_id)
        if element is not None:
            element.apply_transform(context.start_transform)
        self._end_drag()
        return True

    def _end_drag(self):
        self.session.active_drag = None
        self._active_handle = None
        self.state = InteractionState.IDLE

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def key_press(self, key, modifiers=()):
        """Handle a key while brand kit mode is active.

        Args:
            key: Key name ('Delete', 'Backspace', 'Left', 'Escape', 'Z', ...)
            modifiers: Iterable of modifier names ('shift', 'ctrl')

        Returns:
            True if the key was consumed
        """
        if not self.session.brand_kit_mode or not self.session.active:
            return False
        modifiers = _normalize_modifiers(modifiers)

        if key in DELETE_KEYS:
            if self.session.selected_id is None:
                return False
            self._end_drag()
            removed = self.session.delete_selected()
            logger.debug("Deleted %s", removed.id if removed else None)
            return removed is not None

        if key == 'Escape':
            if self.cancel_drag():
                return True
            if self.session.selected_id is not None:
                self.session.clear_selection()
                return True
            return False

        if key in ARROW_KEYS:
            return self._nudge(ARROW_KEYS[key], 'shift' in modifiers)

        if key.upper() == 'Z' and 'ctrl' in modifiers and self.session.active_drag is None:
            return self.session.redo() if 'shift' in modifiers else self.session.undo()

        if key.upper() == 'Y' and 'ctrl' in modifiers and self.session.active_drag is None:
            return self.session.redo()

        return False

    def _nudge(self, direction, fast):
        element = self.session.selected_element
        if element is None or self.session.active_drag is not None:
            return False
        step = ARROW_KEY_MOVE_FAST if fast else ARROW_KEY_MOVE_NORMAL
        element.set_position(element.position.x + direction[0] * step,
                             element.position.y + direction[1] * step)
        self.session.commit("Nudge element")
        return True
