import sys
import os
import getpass
import logging

# Configure logging
logging.basicConfig(
    level=logging.WARNING,  # Only show warnings and errors
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)  # Output to console
    ]
)

# Add editor/src to path so imports work when running directly
if __name__ == "__main__":
    current_dir = os.path.dirname(os.path.abspath(__file__))
    if current_dir not in sys.path:
        sys.path.insert(0, current_dir)

# PyQt5 import/s
from PyQt5 import QtWidgets
from PyQt5.QtWidgets import QMainWindow, QFileDialog, QMessageBox, QLabel, QAction
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QPalette, QColor, QKeySequence

# Component imports
from components.brand_kit_widget import BrandKitWidget

# Model imports
from models.brand_element import BrandElement, ElementType
from models.session import TransformSession

# Service imports
from services.async_worker import AsyncWorker
from services.batch_orchestrator import BatchOrchestrator
from services.brand_kit_repository import JsonFileBrandKitRepository, RepositoryGateway
from services.compositor import composite
from services.image_loader import decode_image

# Utility imports
from utils.errors import ImageLoadError
from utils.logger import loggerRaise, loggerWarn, set_main_window

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.webp *.bmp *.gif);;All Files (*)"


class BrandKitEditor(QMainWindow):
    def __init__(self, user_id=None, repository=None):
        super().__init__()
        self.setWindowTitle("Brand Kit Editor")
        self.resize(1100, 760)

        self.user_id = user_id or getpass.getuser()
        self.gateway = RepositoryGateway(repository or JsonFileBrandKitRepository())

        # One session per editor visit
        self.session = TransformSession()
        self.canvas = BrandKitWidget(self.session, self)
        self.setCentralWidget(self.canvas)

        self.target_paths = []
        self.current_target = None
        self.results = {}  # target path -> composited PIL image
        self.auto_square_crop = False
        self._workers = set()

        set_main_window(self)

        self._create_menu_bar()
        self.status_left = QLabel("Ready")
        self.statusBar().addWidget(self.status_left, 1)

        self.canvas.selectionChanged.connect(self._on_selection_changed)
        self.canvas.transformEnded.connect(lambda: self._set_status("Transform applied"))
        self.session.history.add_listener(self._on_history_changed)
        self._on_history_changed(self.session.history.can_undo(), self.session.history.can_redo())

        # Edits made before this settles win over the stored kit
        self.load_brand_kit(keep_edits=True)

    # ============= UI Setup =============

    def _create_menu_bar(self):
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        self._add_action(file_menu, "&Open Images...", self.open_images, QKeySequence.Open)
        self._add_action(file_menu, "&Export Result...", self.export_result, "Ctrl+E")
        file_menu.addSeparator()
        self._add_action(file_menu, "&Save Brand Kit", self.save_brand_kit, QKeySequence.Save)
        self._add_action(file_menu, "&Reload Brand Kit", lambda: self.load_brand_kit())
        file_menu.addSeparator()
        self._add_action(file_menu, "E&xit", self.close, QKeySequence.Quit)

        edit_menu = menubar.addMenu("&Edit")
        self.undo_action = self._add_action(edit_menu, "&Undo", self.undo, QKeySequence.Undo)
        self.redo_action = self._add_action(edit_menu, "&Redo", self.redo, QKeySequence.Redo)
        self._add_action(edit_menu, "&Delete Element", self.delete_selected)

        kit_menu = menubar.addMenu("&Brand Kit")
        self._add_action(kit_menu, "Add &Logo...", lambda: self.add_element(ElementType.LOGO))
        self._add_action(kit_menu, "Add &Watermark...", lambda: self.add_element(ElementType.WATERMARK))
        self._add_action(kit_menu, "Add &Contact Info...", lambda: self.add_element(ElementType.CONTACT_INFO))
        kit_menu.addSeparator()
        self._add_action(kit_menu, "&Apply", self.apply_current, "Ctrl+Return")
        self._add_action(kit_menu, "Apply to All &Images", self.apply_all, "Ctrl+Shift+Return")
        kit_menu.addSeparator()

        self.square_crop_action = QAction("Auto &Square Crop", self, checkable=True)
        self.square_crop_action.toggled.connect(self._on_square_crop_toggled)
        kit_menu.addAction(self.square_crop_action)

        self.edit_mode_action = QAction("&Editing Mode", self, checkable=True)
        self.edit_mode_action.setChecked(True)
        self.edit_mode_action.toggled.connect(self.canvas.set_brand_kit_mode)
        kit_menu.addAction(self.edit_mode_action)

    def _add_action(self, menu, text, slot, shortcut=None):
        action = QAction(text, self)
        if shortcut is not None:
            action.setShortcut(shortcut)
            # Canvas owns its keys while it has focus
            action.setShortcutContext(Qt.WidgetWithChildrenShortcut)
        action.triggered.connect(slot)
        menu.addAction(action)
        return action

    def _set_status(self, message):
        self.status_left.setText(message)

    # ============= Workers =============

    def _start_worker(self, coroutine_factory, on_success, description):
        worker = AsyncWorker(coroutine_factory, description)
        worker.succeeded.connect(on_success)
        worker.failed.connect(lambda message: self._on_worker_failed(description, message))
        worker.finished.connect(lambda: self._workers.discard(worker))
        self._workers.add(worker)
        worker.start()
        return worker

    def _on_worker_failed(self, description, message):
        self._set_status(f"{description} failed")
        QMessageBox.warning(self, "Brand Kit", f"{description} failed:\n{message}")

    # ============= Brand kit persistence =============

    def load_brand_kit(self, keep_edits=False):
        self._set_status("Loading brand kit...")
        fallback = self.session.elements
        self._start_worker(lambda: self.gateway.load(self.user_id, fallback),
                           lambda outcome: self._on_brand_kit_loaded(outcome, keep_edits),
                           "Loading the brand kit")

    def _on_brand_kit_loaded(self, outcome, keep_edits=False):
        ok, config = outcome
        if ok and config is not None and keep_edits and self.session.has_edits:
            loggerWarn("The saved brand kit was not applied because you already edited this one. "
                       "Use File > Reload Brand Kit to discard your edits and load it.", "Brand Kit")
            self._set_status("Kept your edits over the saved brand kit")
        elif ok and config is not None:
            self.session.replace_config(config)
            self.canvas.refresh_overlays()
            self._set_status(f"Brand kit loaded ({len(config)} element(s))")
        elif ok:
            self._set_status("No saved brand kit yet")
        else:
            self._set_status("Brand kit unavailable, editing the current one")

    def save_brand_kit(self):
        snapshot = self.session.elements.copy()
        self._start_worker(lambda: self.gateway.save(self.user_id, snapshot),
                           self._on_brand_kit_saved, "Saving the brand kit")

    def _on_brand_kit_saved(self, ok):
        self._set_status("Brand kit saved" if ok else "Brand kit not saved")

    # ============= Editing =============

    def add_element(self, element_type):
        filename, _ = QFileDialog.getOpenFileName(self, f"Choose {element_type.value} image", "", IMAGE_FILTER)
        if not filename:
            return
        element = BrandElement.create(element_type, filename, self.session.canvas_size)
        self.session.add_element(element)
        self.canvas.refresh_overlays()
        self._on_selection_changed(element.id)

    def delete_selected(self):
        if self.session.delete_selected() is not None:
            self.canvas.refresh_overlays()
            self._on_selection_changed('')

    def undo(self):
        if self.session.undo():
            self.canvas.refresh_overlays()

    def redo(self):
        if self.session.redo():
            self.canvas.refresh_overlays()

    def _on_selection_changed(self, element_id):
        element = self.session.elements.get(element_id) if element_id else None
        if element is None:
            self._set_status("Ready")
        else:
            self._set_status(f"Selected {element.type.value}")

    def _on_history_changed(self, can_undo, can_redo):
        self.undo_action.setEnabled(can_undo)
        self.redo_action.setEnabled(can_redo)

    def _on_square_crop_toggled(self, checked):
        self.auto_square_crop = checked

    # ============= Targets and compositing =============

    def open_images(self):
        filenames, _ = QFileDialog.getOpenFileNames(self, "Open Images", "", IMAGE_FILTER)
        if not filenames:
            return
        self.target_paths = filenames
        self.results.clear()
        self.show_target(filenames[0])

    def show_target(self, path):
        try:
            image = decode_image(path)
        except ImageLoadError as e:
            loggerWarn(f"Could not open {os.path.basename(path)}: {e.reason}", "Open Image")
            return
        self.current_target = path
        self.canvas.set_target_image(image)
        self._set_status(f"{os.path.basename(path)} ({image.width}x{image.height})")

    def apply_current(self):
        if self.current_target is None:
            QMessageBox.information(self, "Apply", "Open an image first.")
            return
        target = self.current_target
        elements = self.session.elements.copy()
        token = self.session.cancel_token
        self._set_status("Applying brand kit...")
        self._start_worker(
            lambda: composite(target, elements, self.session.canvas_size, cancel_token=token,
                              on_warning=self._warn_skipped),
            lambda result: self._on_applied(target, result), "Applying the brand kit")

    def _on_applied(self, target, result):
        self.results[target] = result.image
        self.canvas.set_target_image(result.image)
        if result.skipped:
            self._set_status(f"Brand kit applied, {len(result.skipped)} element(s) skipped")
        else:
            self._set_status("Brand kit applied")

    @staticmethod
    def _warn_skipped(error):
        # Called on the worker thread; loggerWarn queues the popup to the GUI thread
        loggerWarn(f"{error.reason}. The element was skipped.", f"Apply: element {error.element_id}")

    def apply_all(self):
        if not self.target_paths:
            QMessageBox.information(self, "Apply to All", "Open one or more images first.")
            return
        orchestrator = BatchOrchestrator(canvas_size=self.session.canvas_size)
        if len(self.target_paths) > orchestrator.max_images:
            QMessageBox.warning(self, "Apply to All",
                                f"At most {orchestrator.max_images} images can be processed at once.")
            return
        targets = list(self.target_paths)
        elements = self.session.elements.copy()
        token = self.session.cancel_token
        square = self.auto_square_crop
        self._set_status(f"Applying brand kit to {len(targets)} image(s)...")
        self._start_worker(
            lambda: orchestrator.run(targets, elements, auto_square_crop=square, cancel_token=token),
            self._on_batch_finished, "Applying the brand kit to all images")

    def _on_batch_finished(self, results):
        failures = []
        for item in results:
            if item.ok:
                self.results[item.source] = item.image
            else:
                failures.append(f"- {os.path.basename(str(item.source))}: {item.error}")
        if self.current_target in self.results:
            self.canvas.set_target_image(self.results[self.current_target])
        self._set_status(f"{len(results) - len(failures)} of {len(results)} image(s) branded")
        if failures:
            QMessageBox.warning(self, "Apply to All", "Some images failed:\n" + "\n".join(failures))

    def export_result(self):
        image = self.results.get(self.current_target)
        if image is None:
            QMessageBox.information(self, "Export", "Apply the brand kit first.")
            return
        try:
            filename, _ = QFileDialog.getSaveFileName(self, "Export as PNG", "", "PNG Files (*.png);;All Files (*)")
            if not filename:
                return
            if not filename.lower().endswith('.png'):
                filename += '.png'
            image.save(filename, format='PNG')
            self._set_status(f"Exported {os.path.basename(filename)}")
        except Exception as e:
            loggerRaise(e, "Failed to export PNG")

    # ============= Lifecycle =============

    def closeEvent(self, event):
        # Unsaved edits are dropped; running composites see the cancelled token
        self.canvas.close_session()
        for worker in list(self._workers):
            worker.wait()
        super().closeEvent(event)


def main():
    """Main entry point for the Brand Kit Editor application"""
    app = QtWidgets.QApplication([])

    # Use Fusion style with dark palette
    app.setStyle("Fusion")

    dark_palette = QPalette()
    dark_palette.setColor(QPalette.Window, QColor(53, 53, 53))
    dark_palette.setColor(QPalette.WindowText, Qt.white)
    dark_palette.setColor(QPalette.Base, QColor(25, 25, 25))
    dark_palette.setColor(QPalette.Text, Qt.white)
    dark_palette.setColor(QPalette.Button, QColor(53, 53, 53))
    dark_palette.setColor(QPalette.ButtonText, Qt.white)
    dark_palette.setColor(QPalette.Highlight, QColor(42, 130, 218))
    dark_palette.setColor(QPalette.HighlightedText, Qt.black)
    app.setPalette(dark_palette)

    window = BrandKitEditor()
    window.show()
    app.exec_()


if __name__ == "__main__":
    main()
