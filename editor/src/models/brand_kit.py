"""
Brand Kit Editor - Brand Kit Configuration Model

Ordered collection of BrandElements owned by one user.

List order IS paint order: index 0 is drawn first (bottom), the last element
is drawn on top. Order only changes through an explicit move; adding appends
on top, removing keeps the relative order of everything else.

Element ids are unique within a config.
"""

import logging
from typing import Any, Iterator, List, Optional, Tuple

from models.brand_element import BrandElement
from utils.errors import InvalidConfigError

logger = logging.getLogger(__name__)


class BrandKitConfig:
    """Ordered, id-unique list of brand elements"""

    def __init__(self, elements: Optional[List[BrandElement]] = None):
        self._elements: List[BrandElement] = []
        for element in elements or []:
            self.add(element)

    # ------------------------------------------------------------------
    # Collection protocol
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[BrandElement]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, element_id) -> bool:
        return self.index_of(element_id) is not None

    def __getitem__(self, index) -> BrandElement:
        return self._elements[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, BrandKitConfig):
            return NotImplemented
        return self._elements == other._elements

    def __repr__(self) -> str:
        return f"BrandKitConfig({[e.id for e in self._elements]})"

    @property
    def ids(self) -> List[str]:
        """Element ids in paint order"""
        return [e.id for e in self._elements]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def index_of(self, element_id: str) -> Optional[int]:
        for index, element in enumerate(self._elements):
            if element.id == element_id:
                return index
        return None

    def get(self, element_id: str) -> Optional[BrandElement]:
        index = self.index_of(element_id)
        return self._elements[index] if index is not None else None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, element: BrandElement) -> BrandElement:
        """Append an element on top of the paint order

        Raises:
            ValueError: if an element with the same id already exists
        """
        if element.id in self:
            raise ValueError(f"Duplicate brand element id: {element.id}")
        self._elements.append(element)
        return element

    def remove(self, element_id: str) -> Optional[BrandElement]:
        """Remove an element by id, returns it (or None if absent)"""
        index = self.index_of(element_id)
        if index is None:
            return None
        return self._elements.pop(index)

    def move(self, element_id: str, new_index: int) -> bool:
        """Explicitly move an element to a new paint-order index

        new_index is clamped into the valid range.

        Returns:
            True if the order changed
        """
        index = self.index_of(element_id)
        if index is None:
            return False
        new_index = max(0, min(len(self._elements) - 1, new_index))
        if new_index == index:
            return False
        element = self._elements.pop(index)
        self._elements.insert(new_index, element)
        return True

    def bring_forward(self, element_id: str) -> bool:
        """Move one step toward the top of the paint order"""
        index = self.index_of(element_id)
        return index is not None and self.move(element_id, index + 1)

    def send_backward(self, element_id: str) -> bool:
        """Move one step toward the bottom of the paint order"""
        index = self.index_of(element_id)
        return index is not None and self.move(element_id, index - 1)

    def copy(self) -> 'BrandKitConfig':
        """Deep copy (elements are copied, not shared)"""
        return BrandKitConfig([e.copy() for e in self._elements])

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_records(self) -> List[dict]:
        """Export as the persisted ordered JSON array"""
        return [e.to_record() for e in self._elements]

    @classmethod
    def from_records(cls, records: Any) -> Tuple['BrandKitConfig', List[InvalidConfigError]]:
        """Build a config from persisted records

        Malformed records are dropped individually, the rest still load.
        A record repeating an earlier id is treated as malformed.

        Returns:
            (config, problems) - problems lists one InvalidConfigError per
            dropped record
        """
        if not isinstance(records, list):
            raise InvalidConfigError(-1, f"expected a JSON array, got {type(records).__name__}")

        config = cls()
        problems = []
        for index, record in enumerate(records):
            try:
                element = BrandElement.from_record(record, index)
                if element.id in config:
                    raise InvalidConfigError(index, f"duplicate id {element.id!r}")
                config.add(element)
            except InvalidConfigError as e:
                logger.warning("Dropping brand element record: %s", e)
                problems.append(e)
        return config, problems
