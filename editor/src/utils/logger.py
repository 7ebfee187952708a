"""Global logging and error handling utilities"""
import logging
import sys
import traceback
from PyQt5.QtCore import QObject, Qt, pyqtSignal
from PyQt5.QtWidgets import QMessageBox

# Detect debug mode - True if running from source, False if packaged
DEBUG_MODE = not getattr(sys, 'frozen', False)

logger = logging.getLogger('brandkit')

_main_window = None
_notifier = None


class _WarningNotifier(QObject):
    """Lives in the GUI thread; warnings emitted from worker threads are queued to it"""

    warned = pyqtSignal(str, str)  # title, message

    def __init__(self, window):
        super().__init__()
        self.window = window
        self.warned.connect(self._show)

    def _show(self, title, message):
        box = QMessageBox(QMessageBox.Warning, title, message, QMessageBox.Ok, self.window)
        box.setModal(False)
        box.setAttribute(Qt.WA_DeleteOnClose, True)
        box.show()


def set_main_window(window):
    """Set the main window reference for showing popups (call from the GUI thread)"""
    global _main_window, _notifier
    _main_window = window
    _notifier = _WarningNotifier(window) if window is not None else None

def loggerRaise(e: Exception, user_message: str = None, title: str = "Error"):
    """Handle exceptions with optional popup in release mode

    Args:
        e: The exception to handle
        user_message: User-friendly message to show in popup (optional)
        title: Title for the popup dialog

    In DEBUG_MODE:
        - Just raises the exception (shows full traceback)

    In RELEASE_MODE:
        - Shows popup with user message or exception string
        - Logs the full traceback
        - Then raises the exception
    """
    if DEBUG_MODE:
        raise e

    logger.error("%s", traceback.format_exc())

    message = user_message if user_message else str(e)
    if _main_window:
        QMessageBox.critical(_main_window, title, message)
    else:
        logger.error("Error popup (no window): %s - %s", title, message)

    raise e

def loggerWarn(message: str, title: str = "Warning"):
    """Report a recoverable problem without interrupting the user

    Always logs the message. When a main window is registered, also shows a
    non-modal, dismissible message box (toast-style). Safe to call from any
    thread. Never raises.

    Args:
        message: Text shown to the user
        title: Title for the message box
    """
    logger.warning("%s: %s", title, message)

    if _notifier is not None:
        _notifier.warned.emit(title, message)
