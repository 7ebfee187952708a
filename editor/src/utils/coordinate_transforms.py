"""Coordinate transformation utilities for the brand kit canvas.

Provides conversion between different coordinate systems:
- Reference canvas space (fixed logical size, e.g. 800x600, Y-down)
- Target image space (native pixels of the image being branded, Y-down)
- Qt widget pixels (reference canvas letterboxed inside the widget, Y-down)
"""


def _validate_size(size, name):
	width, height = size
	if width <= 0 or height <= 0:
		raise ValueError(f"{name} must have positive dimensions, got {width}x{height}")
	return width, height


def canvas_to_image_space(x, y, canvas_size, image_size):
	"""Convert a reference canvas position to target image pixels.

	Args:
		x, y: Position on the reference canvas
		canvas_size: (width, height) of the reference canvas
		image_size: (width, height) of the target image

	Returns:
		(image_x, image_y): Position in target image pixels
	"""
	canvas_w, canvas_h = _validate_size(canvas_size, "canvas_size")
	image_w, image_h = _validate_size(image_size, "image_size")
	return x / canvas_w * image_w, y / canvas_h * image_h


def image_to_canvas_space(x, y, canvas_size, image_size):
	"""Convert target image pixels to a reference canvas position.

	Inverse of canvas_to_image_space.

	Args:
		x, y: Position in target image pixels
		canvas_size: (width, height) of the reference canvas
		image_size: (width, height) of the target image

	Returns:
		(canvas_x, canvas_y): Position on the reference canvas
	"""
	canvas_w, canvas_h = _validate_size(canvas_size, "canvas_size")
	image_w, image_h = _validate_size(image_size, "image_size")
	return x / image_w * canvas_w, y / image_h * canvas_h


def canvas_fit_in_widget(canvas_size, widget_size):
	"""Uniform fit of the reference canvas inside a widget.

	The canvas keeps its aspect ratio and is centred (letterboxed).

	Returns:
		(zoom, offset_x, offset_y): widget pixels per canvas unit and the
		widget position of the canvas top-left corner
	"""
	canvas_w, canvas_h = _validate_size(canvas_size, "canvas_size")
	widget_w, widget_h = _validate_size(widget_size, "widget_size")
	zoom = min(widget_w / canvas_w, widget_h / canvas_h)
	offset_x = (widget_w - canvas_w * zoom) / 2
	offset_y = (widget_h - canvas_h * zoom) / 2
	return zoom, offset_x, offset_y


def widget_to_canvas_space(qt_x, qt_y, canvas_size, widget_size):
	"""Convert Qt widget pixel coordinates to a reference canvas position."""
	zoom, offset_x, offset_y = canvas_fit_in_widget(canvas_size, widget_size)
	return (qt_x - offset_x) / zoom, (qt_y - offset_y) / zoom


def canvas_to_widget_space(x, y, canvas_size, widget_size):
	"""Convert a reference canvas position to Qt widget pixel coordinates."""
	zoom, offset_x, offset_y = canvas_fit_in_widget(canvas_size, widget_size)
	return offset_x + x * zoom, offset_y + y * zoom


class CoordinateMapper:
	"""Binds a reference canvas size to one target image size.

	Pure helper: holds no state beyond the two sizes.
	"""

	def __init__(self, canvas_size, image_size):
		self.canvas_size = _validate_size(canvas_size, "canvas_size")
		self.image_size = _validate_size(image_size, "image_size")

	def to_image_space(self, x, y):
		return canvas_to_image_space(x, y, self.canvas_size, self.image_size)

	def to_canvas_space(self, x, y):
		return image_to_canvas_space(x, y, self.canvas_size, self.image_size)

	def __repr__(self):
		return f"CoordinateMapper(canvas_size={self.canvas_size}, image_size={self.image_size})"
