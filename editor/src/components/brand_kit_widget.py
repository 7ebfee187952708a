"""
Brand Kit Widget - Interactive overlay canvas for brand kit elements

Provides the reference canvas surface with:
- Target image preview letterboxed into the reference canvas
- Overlays drawn with the same placement math the compositor uses
- Rotation ring + centre mark on the selected element
- Pointer and keyboard forwarding to the PointerInteractionController
"""

import logging

from PyQt5.QtWidgets import QWidget
from PyQt5.QtCore import Qt, QRectF, pyqtSignal
from PyQt5.QtGui import QPainter, QColor, QImage, QKeySequence

from constants import CANVAS_BACKGROUND_COLOR
from components.pointer_controller import PointerInteractionController
from services.image_loader import decode_image
from utils.coordinate_transforms import canvas_fit_in_widget, widget_to_canvas_space, canvas_to_widget_space
from utils.errors import ImageLoadError
from utils.logger import loggerWarn
from utils.transform_math import overlay_placement

logger = logging.getLogger(__name__)

# Qt key -> controller key name
_KEY_NAMES = {
	Qt.Key_Delete: 'Delete',
	Qt.Key_Backspace: 'Backspace',
	Qt.Key_Escape: 'Escape',
	Qt.Key_Left: 'Left',
	Qt.Key_Right: 'Right',
	Qt.Key_Up: 'Up',
	Qt.Key_Down: 'Down',
}


def pil_to_qimage(image):
	"""Convert an RGBA Pillow image into a QImage that owns its pixels"""
	if image.mode != 'RGBA':
		image = image.convert('RGBA')
	data = image.tobytes('raw', 'RGBA')
	qimage = QImage(data, image.width, image.height, image.width * 4, QImage.Format_RGBA8888)
	return qimage.copy()


def modifier_names(modifiers):
	"""Qt keyboard modifiers -> set of names understood by the controller"""
	names = set()
	if modifiers & Qt.ShiftModifier:
		names.add('shift')
	if modifiers & Qt.ControlModifier:
		names.add('ctrl')
	if modifiers & Qt.AltModifier:
		names.add('alt')
	return names


class BrandKitWidget(QWidget):
	"""Interactive canvas for positioning, rotating and scaling overlays"""

	# Signals
	elementsChanged = pyqtSignal()  # Emitted on every live change (drag move, delete, undo)
	selectionChanged = pyqtSignal(str)  # Selected element id, '' when nothing is selected
	transformEnded = pyqtSignal()  # Emitted when a drag is committed

	def __init__(self, session, parent=None):
		super().__init__(parent)
		self.setMouseTracking(True)
		self.setFocusPolicy(Qt.StrongFocus)
		self.setMinimumSize(400, 300)

		self.session = session
		self.controller = PointerInteractionController(session)

		self._target_image = None  # QImage preview of the target
		self._overlay_images = {}  # element id -> (source_url, QImage)
		self._failed_sources = set()  # sources already reported as undecodable

	# ------------------------------------------------------------------
	# Session / content
	# ------------------------------------------------------------------

	def set_session(self, session):
		"""Attach a new session (e.g. after reopening the editor)"""
		self.session = session
		self.controller = PointerInteractionController(session)
		self._overlay_images.clear()
		self.refresh_overlays()
		self.selectionChanged.emit('')
		self.update()

	def set_target_image(self, image):
		"""Show a decoded Pillow image as the canvas background (or None)"""
		self._target_image = pil_to_qimage(image) if image is not None else None
		self.update()

	def set_brand_kit_mode(self, enabled):
		"""Enable/disable brand kit editing (keyboard and pointer handling)"""
		self.session.brand_kit_mode = enabled
		if not enabled:
			self.controller.cancel_drag()
		self.update()

	def refresh_overlays(self):
		"""Decode overlays not seen yet and register their native sizes.

		Elements whose overlay cannot be decoded stay in the config but are
		not drawn (and cannot be hit) until their source is fixed.
		"""
		known_ids = set()
		for element in self.session.elements:
			known_ids.add(element.id)
			cached = self._overlay_images.get(element.id)
			if cached is not None and cached[0] == element.source_url:
				continue
			try:
				overlay = decode_image(element.source_url)
			except ImageLoadError as e:
				self._overlay_images.pop(element.id, None)
				if element.source_url not in self._failed_sources:
					self._failed_sources.add(element.source_url)
					loggerWarn(f"Overlay for {element.type.value} could not be loaded: {e.reason}", "Brand Kit")
				continue
			self._overlay_images[element.id] = (element.source_url, pil_to_qimage(overlay))
			self.session.set_native_size(element.id, overlay.size)

		for stale_id in set(self._overlay_images) - known_ids:
			del self._overlay_images[stale_id]
		self.update()

	# ------------------------------------------------------------------
	# Coordinate helpers
	# ------------------------------------------------------------------

	def _widget_size(self):
		return (max(1, self.width()), max(1, self.height()))

	def to_canvas(self, qt_x, qt_y):
		return widget_to_canvas_space(qt_x, qt_y, self.session.canvas_size, self._widget_size())

	def to_widget(self, x, y):
		return canvas_to_widget_space(x, y, self.session.canvas_size, self._widget_size())

	# ------------------------------------------------------------------
	# Painting
	# ------------------------------------------------------------------

	def paintEvent(self, event):
		"""Draw target preview, overlays in paint order, then selection handles"""
		painter = QPainter(self)
		painter.setRenderHint(QPainter.Antialiasing)
		painter.setRenderHint(QPainter.SmoothPixmapTransform)

		canvas_w, canvas_h = self.session.canvas_size
		zoom, offset_x, offset_y = canvas_fit_in_widget(self.session.canvas_size, self._widget_size())
		canvas_rect = QRectF(offset_x, offset_y, canvas_w * zoom, canvas_h * zoom)

		painter.fillRect(self.rect(), QColor(*CANVAS_BACKGROUND_COLOR))
		if self._target_image is not None:
			painter.drawImage(canvas_rect, self._target_image)

		painter.setClipRect(canvas_rect)
		for element in self.session.elements:
			cached = self._overlay_images.get(element.id)
			if cached is None:
				continue
			self._paint_overlay(painter, element, cached[1], zoom)
		painter.setClipping(False)

		self._paint_selection(painter, zoom)
		painter.end()

	def _paint_overlay(self, painter, element, qimage, zoom):
		placement = overlay_placement(
			(element.position.x, element.position.y), self.session.native_size(element.id),
			element.scale, element.rotation_deg,
		)
		center_x, center_y = self.to_widget(placement.center_x, placement.center_y)
		width = placement.width * zoom
		height = placement.height * zoom

		painter.save()
		painter.translate(center_x, center_y)
		painter.rotate(placement.rotation)
		painter.setOpacity(element.opacity)
		painter.drawImage(QRectF(-width / 2, -height / 2, width, height), qimage)
		painter.restore()

	def _paint_selection(self, painter, zoom):
		if not self.session.brand_kit_mode:
			return
		element = self.session.selected_element
		if element is None:
			return
		radius = self.controller.element_radius(element) * zoom
		if radius <= 0:
			return
		center_x, center_y = self.to_widget(element.position.x, element.position.y)
		for handle in self.controller.mode.get_handles().values():
			handle.draw(painter, center_x, center_y, radius)

	# ------------------------------------------------------------------
	# Pointer events
	# ------------------------------------------------------------------

	def mousePressEvent(self, event):
		if not self.session.brand_kit_mode or event.button() != Qt.LeftButton:
			super().mousePressEvent(event)
			return
		previous_selection = self.session.selected_id
		x, y = self.to_canvas(event.x(), event.y())
		self.controller.pointer_down(x, y, modifier_names(event.modifiers()))
		if self.session.selected_id != previous_selection:
			self.selectionChanged.emit(self.session.selected_id or '')
		self.update()
		event.accept()

	def mouseMoveEvent(self, event):
		x, y = self.to_canvas(event.x(), event.y())
		if self.controller.pointer_move(x, y, modifier_names(event.modifiers())):
			self.elementsChanged.emit()
			self.update()
		elif self.session.brand_kit_mode:
			handle = self.controller.handle_at(x, y)
			if handle is not None:
				self.setCursor(handle.get_cursor())
			else:
				self.unsetCursor()

	def mouseReleaseEvent(self, event):
		if event.button() != Qt.LeftButton:
			super().mouseReleaseEvent(event)
			return
		if self.controller.pointer_up():
			self.transformEnded.emit()
		self.update()

	# ------------------------------------------------------------------
	# Keyboard (scoped to this widget while brand kit mode is active)
	# ------------------------------------------------------------------

	def keyPressEvent(self, event):
		key_name = _KEY_NAMES.get(event.key()) or QKeySequence(event.key()).toString()
		previous_selection = self.session.selected_id
		previous_ids = self.session.elements.ids

		if not key_name or not self.controller.key_press(key_name, modifier_names(event.modifiers())):
			super().keyPressEvent(event)
			return

		event.accept()
		if self.session.elements.ids != previous_ids:
			self.refresh_overlays()
		self.elementsChanged.emit()
		if self.session.selected_id != previous_selection:
			self.selectionChanged.emit(self.session.selected_id or '')
		self.update()

	# ------------------------------------------------------------------
	# Lifecycle
	# ------------------------------------------------------------------

	def close_session(self):
		"""Close the session: cancels running composites, drops unsaved edits"""
		self.controller.cancel_drag()
		self.session.close()
		self.update()

	def closeEvent(self, event):
		self.close_session()
		super().closeEvent(event)
