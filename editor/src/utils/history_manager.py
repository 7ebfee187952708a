"""
Undo/Redo History Manager for the Brand Kit Editor

Linear stack of snapshots of the session's element records. A snapshot is
taken after every committed mutation (drag end, delete, nudge, add,
reorder); undo/redo hand back deep copies so callers can rebuild models
from them without aliasing the stored history.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any

from constants import MAX_HISTORY_ENTRIES

logger = logging.getLogger(__name__)


@dataclass
class HistoryEntry:
	"""One stored snapshot"""
	data: Any
	description: str = ""


class HistoryManager:
	"""Bounded undo/redo stack; current_index points at the live snapshot"""

	def __init__(self, max_history=MAX_HISTORY_ENTRIES):
		"""
		Args:
			max_history: Oldest snapshots are dropped beyond this many
		"""
		self.max_history = max_history
		self.history = []
		self.current_index = -1  # -1 while empty
		self._listeners = []

	# ------------------------------------------------------------------
	# Recording
	# ------------------------------------------------------------------

	def save_state(self, state_data, description=""):
		"""Push a snapshot (deep-copied), discarding any redo branch"""
		del self.history[self.current_index + 1:]
		self.history.append(HistoryEntry(copy.deepcopy(state_data), description))

		overflow = len(self.history) - self.max_history
		if overflow > 0:
			del self.history[:overflow]
		self.current_index = len(self.history) - 1

		logger.debug("Snapshot '%s' stored (%d/%d)", description, self.current_index + 1, len(self.history))
		self._notify_listeners()

	def clear(self):
		self.history = []
		self.current_index = -1
		self._notify_listeners()

	# ------------------------------------------------------------------
	# Navigation
	# ------------------------------------------------------------------

	def can_undo(self):
		return self.current_index > 0

	def can_redo(self):
		return self.current_index < len(self.history) - 1

	def undo(self):
		"""Step back. Returns a copy of the restored snapshot, or None."""
		if not self.can_undo():
			return None
		logger.debug("Undo '%s'", self.history[self.current_index].description)
		return self._step(-1)

	def redo(self):
		"""Step forward. Returns a copy of the restored snapshot, or None."""
		if not self.can_redo():
			return None
		logger.debug("Redo '%s'", self.history[self.current_index + 1].description)
		return self._step(1)

	def _step(self, delta):
		self.current_index += delta
		self._notify_listeners()
		return copy.deepcopy(self.history[self.current_index].data)

	def get_undo_description(self):
		"""Label of the change undo would revert ('' if none)"""
		return self.history[self.current_index].description if self.can_undo() else ""

	def get_redo_description(self):
		"""Label of the change redo would re-apply ('' if none)"""
		return self.history[self.current_index + 1].description if self.can_redo() else ""

	# ------------------------------------------------------------------
	# Listeners: callback(can_undo, can_redo)
	# ------------------------------------------------------------------

	def add_listener(self, callback):
		self._listeners.append(callback)

	def remove_listener(self, callback):
		if callback in self._listeners:
			self._listeners.remove(callback)

	def _notify_listeners(self):
		can_undo, can_redo = self.can_undo(), self.can_redo()
		for callback in list(self._listeners):
			callback(can_undo, can_redo)
