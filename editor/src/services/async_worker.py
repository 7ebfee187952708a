"""
Async worker thread.

QThread that drives one coroutine (composite, batch run, repository
load/save) on its own event loop so the GUI stays responsive.
"""

import asyncio
import logging

from PyQt5.QtCore import QThread, pyqtSignal

logger = logging.getLogger(__name__)


class AsyncWorker(QThread):
    """Worker thread running a coroutine factory to completion."""

    succeeded = pyqtSignal(object)  # coroutine result
    failed = pyqtSignal(str)        # error message

    def __init__(self, coroutine_factory, description="task"):
        """
        Args:
            coroutine_factory: Zero-argument callable returning the coroutine to run
            description: Short label used in log messages
        """
        super().__init__()
        self.coroutine_factory = coroutine_factory
        self.description = description

    def run(self):
        try:
            result = asyncio.run(self.coroutine_factory())
        except Exception as e:
            logger.exception("%s failed", self.description)
            self.failed.emit(str(e) or type(e).__name__)
            return
        self.succeeded.emit(result)
