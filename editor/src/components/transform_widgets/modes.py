"""Transform modes - defines which handles are active and their priority."""

from .handles import RotationRingHandle, BodyHandle
from constants import HANDLE_TOLERANCE


class TransformMode:
	"""Base class for transform modes."""

	# Handle keys in hit-test priority order
	check_order = ()

	def __init__(self):
		self.handles = {}  # handle_type -> handle_object

	def get_handles(self):
		"""Return all handles for this mode."""
		return self.handles

	def get_handle_at_pos(self, mouse_x, mouse_y, center_x, center_y, radius):
		"""Find which handle (if any) is at pointer position.

		Returns:
			Handle object or None
		"""
		for handle_type in self.check_order:
			handle = self.handles[handle_type]
			if handle.hit_test(mouse_x, mouse_y, center_x, center_y, radius):
				return handle
		return None


class RingMode(TransformMode):
	"""Brand kit mode - rotation ring at the element radius, body disc inside."""

	# Ring first: its inner band overlaps the body disc
	check_order = ('rotate', 'body')

	def __init__(self, hit_tolerance=HANDLE_TOLERANCE):
		super().__init__()
		self.handles = {
			'rotate': RotationRingHandle(hit_tolerance),
			'body': BodyHandle(),
		}


class MoveOnlyMode(TransformMode):
	"""Locked-rotation mode - body disc only."""

	check_order = ('body',)

	def __init__(self, hit_tolerance=HANDLE_TOLERANCE):
		super().__init__()
		self.handles = {
			'body': BodyHandle(),
		}


# Mode registry
MODES = {
	'ring': RingMode,
	'move_only': MoveOnlyMode,
}


def create_mode(mode_name, hit_tolerance=HANDLE_TOLERANCE):
	"""Factory function to create mode instances.

	Args:
		mode_name: 'ring' or 'move_only'
		hit_tolerance: Rotation ring tolerance in canvas units

	Returns:
		TransformMode instance
	"""
	mode_class = MODES.get(mode_name, RingMode)
	return mode_class(hit_tolerance)
