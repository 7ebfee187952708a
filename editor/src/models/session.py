"""
Brand Kit Editor - Transform Session

Owned, mutable state for one editing visit:
- the ordered brand kit config being edited
- the current selection
- the in-progress drag (if any)
- native overlay sizes known to the host (needed for hit testing)
- undo/redo history of committed mutations
- the cancellation token handed to compositing jobs

The session is created when the editor opens and closed when it closes.
Closing cancels running composites and drops unsaved changes (the caller
saves explicitly through the repository beforehand if it wants to keep them).
"""

import logging
from typing import Dict, Optional, Tuple

from constants import REFERENCE_CANVAS_SIZE
from models.brand_element import BrandElement
from models.brand_kit import BrandKitConfig
from utils.cancellation import CancellationToken
from utils.history_manager import HistoryManager

logger = logging.getLogger(__name__)


class TransformSession:
    """Explicitly owned editing state, passed to the pointer controller"""

    def __init__(self, config: Optional[BrandKitConfig] = None,
                 canvas_size: Tuple[float, float] = REFERENCE_CANVAS_SIZE):
        self.elements = config if config is not None else BrandKitConfig()
        self.canvas_size = canvas_size
        self.selected_id: Optional[str] = None
        self.active_drag = None
        self.brand_kit_mode = True
        self.native_sizes: Dict[str, Tuple[int, int]] = {}
        self.cancel_token = CancellationToken()
        self.history = HistoryManager()
        self.history.save_state(self.elements.to_records(), "Initial state")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return not self.cancel_token.cancelled

    def close(self) -> None:
        """End the session: cancel compositing work, drop drag and selection"""
        if not self.active:
            return
        self.cancel_token.cancel()
        self.active_drag = None
        self.selected_id = None
        logger.debug("Transform session closed")

    def replace_config(self, config: BrandKitConfig) -> None:
        """Swap in a freshly loaded config and restart history"""
        self.elements = config
        self.active_drag = None
        if self.selected_id not in config:
            self.selected_id = None
        self.history.clear()
        self.history.save_state(self.elements.to_records(), "Loaded brand kit")

    @property
    def has_edits(self) -> bool:
        """True once a mutation was committed since the session started or last loaded"""
        return len(self.history.history) > 1

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected_element(self) -> Optional[BrandElement]:
        if self.selected_id is None:
            return None
        return self.elements.get(self.selected_id)

    def select(self, element_id: Optional[str]) -> None:
        if element_id is not None and element_id not in self.elements:
            raise KeyError(f"No brand element with id {element_id}")
        self.selected_id = element_id

    def clear_selection(self) -> None:
        self.selected_id = None

    # ------------------------------------------------------------------
    # Native overlay sizes
    # ------------------------------------------------------------------

    def set_native_size(self, element_id: str, size: Tuple[int, int]) -> None:
        """Record the decoded pixel size of an element's overlay"""
        self.native_sizes[element_id] = (int(size[0]), int(size[1]))

    def native_size(self, element_id: str) -> Tuple[int, int]:
        """Native overlay size, (0, 0) while the overlay is not decoded yet"""
        return self.native_sizes.get(element_id, (0, 0))

    # ------------------------------------------------------------------
    # Committed mutations
    # ------------------------------------------------------------------

    def add_element(self, element: BrandElement, select: bool = True) -> BrandElement:
        self.elements.add(element)
        if select:
            self.selected_id = element.id
        self.commit(f"Add {element.type.value}")
        return element

    def delete_selected(self) -> Optional[BrandElement]:
        """Remove the selected element and clear the selection"""
        if self.selected_id is None:
            return None
        removed = self.elements.remove(self.selected_id)
        self.selected_id = None
        self.active_drag = None
        if removed is not None:
            self.native_sizes.pop(removed.id, None)
            self.commit(f"Delete {removed.type.value}")
        return removed

    def move_element(self, element_id: str, new_index: int) -> bool:
        """Explicit paint-order change"""
        changed = self.elements.move(element_id, new_index)
        if changed:
            self.commit("Reorder elements")
        return changed

    def commit(self, description: str) -> None:
        """Record the current config as an undo step"""
        self.history.save_state(self.elements.to_records(), description)

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        return self._restore(self.history.redo())

    def _restore(self, records) -> bool:
        if records is None:
            return False
        config, _ = BrandKitConfig.from_records(records)
        self.elements = config
        self.active_drag = None
        if self.selected_id not in config:
            self.selected_id = None
        return True
