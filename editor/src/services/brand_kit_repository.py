"""
Brand Kit Editor - Brand Kit Repository Service

Load/save of a user's persisted brand kit. The persisted shape is an ordered
JSON array of element records:

    [{"id", "type", "sourceUrl", "position": {"x", "y"},
      "scale", "rotationDeg", "opacity"}, ...]

Repositories raise PersistenceError on failure. RepositoryGateway wraps a
repository for the editor: it applies a timeout and turns every failure into
a non-blocking warning, so the session keeps its last in-memory config.
"""

import asyncio
import json
import logging
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from constants import (
    REPOSITORY_TIMEOUT, BRAND_KIT_DIR_NAME, BRAND_KIT_SUBDIR, BRAND_KIT_FILE_EXTENSION,
)
from models.brand_kit import BrandKitConfig
from utils.errors import InvalidConfigError, PersistenceError
from utils.logger import loggerWarn

logger = logging.getLogger(__name__)


def default_brand_kit_dir() -> Path:
    """Per-user brand kit directory in the user's home"""
    return Path.home() / BRAND_KIT_DIR_NAME / BRAND_KIT_SUBDIR


def parse_brand_kit(records) -> BrandKitConfig:
    """Build a config from persisted records, dropping malformed ones with a warning"""
    try:
        config, problems = BrandKitConfig.from_records(records)
    except InvalidConfigError as e:
        raise PersistenceError(f"Stored brand kit is unreadable: {e.reason}")
    if problems:
        loggerWarn(
            f"{len(problems)} brand kit element(s) could not be loaded and were dropped:\n"
            + "\n".join(f"- {p.reason}" for p in problems),
            "Brand Kit",
        )
    return config


class BrandKitRepository(ABC):
    """load(user_id) -> BrandKitConfig or None (not found); save(user_id, config)"""

    @abstractmethod
    def load(self, user_id: str) -> Optional[BrandKitConfig]:
        """Load a user's brand kit.

        Returns:
            The config, or None if the user has no saved brand kit

        Raises:
            PersistenceError: if the stored data cannot be read
        """

    @abstractmethod
    def save(self, user_id: str, config: BrandKitConfig) -> None:
        """Persist a user's brand kit.

        Raises:
            PersistenceError: if the data cannot be written
        """


class JsonFileBrandKitRepository(BrandKitRepository):
    """One <user_id>.json file per user inside a directory"""

    _SAFE_ID = re.compile(r'[^A-Za-z0-9_.-]')

    def __init__(self, directory=None):
        self.directory = Path(directory) if directory else default_brand_kit_dir()

    def path_for(self, user_id: str) -> Path:
        if not user_id:
            raise PersistenceError("A user id is required")
        return self.directory / (self._SAFE_ID.sub('_', user_id) + BRAND_KIT_FILE_EXTENSION)

    def load(self, user_id):
        path = self.path_for(user_id)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                records = json.load(f)
        except (OSError, ValueError) as e:
            # ValueError covers JSONDecodeError and UnicodeDecodeError
            raise PersistenceError(f"Could not read brand kit {path}: {e}")
        config = parse_brand_kit(records)
        logger.info("Brand kit loaded for %s (%d element(s))", user_id, len(config))
        return config

    def save(self, user_id, config):
        path = self.path_for(user_id)
        try:
            os.makedirs(path.parent, exist_ok=True)
            # Write next to the target then swap, so a crash never leaves half a file
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.stem, suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(config.to_records(), f, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise
        except OSError as e:
            raise PersistenceError(f"Could not write brand kit {path}: {e}")
        logger.info("Brand kit saved for %s (%d element(s))", user_id, len(config))


class InMemoryBrandKitRepository(BrandKitRepository):
    """Keeps serialized records in a dict (tests, headless use)"""

    def __init__(self):
        self._store: Dict[str, List[dict]] = {}

    def load(self, user_id):
        records = self._store.get(user_id)
        if records is None:
            return None
        return parse_brand_kit(json.loads(json.dumps(records)))

    def save(self, user_id, config):
        self._store[user_id] = json.loads(json.dumps(config.to_records()))


class RepositoryGateway:
    """Timeout-bounded, non-fatal access to a BrandKitRepository.

    Failures and timeouts are logged and reported through loggerWarn; the
    caller receives ok=False and keeps whatever config it already had.
    """

    def __init__(self, repository: BrandKitRepository, timeout=REPOSITORY_TIMEOUT):
        self.repository = repository
        self.timeout = timeout

    async def _call(self, func, *args):
        """Run func on its own daemon thread and await it for at most timeout.

        A call that hangs past the timeout is abandoned. The loop (and the
        worker running it) can finish without joining that thread.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def deliver(setter, value):
            if not future.done():
                setter(value)

        def work():
            try:
                outcome = (future.set_result, func(*args))
            except BaseException as e:
                outcome = (future.set_exception, e)
            try:
                loop.call_soon_threadsafe(deliver, *outcome)
            except RuntimeError:
                # Loop already closed: the caller gave up on this call
                logger.debug("Dropped late repository result from %s", getattr(func, "__name__", func))

        threading.Thread(target=work, name="BrandKit-Repository", daemon=True).start()
        return await asyncio.wait_for(future, self.timeout)

    async def load(self, user_id: str, fallback: Optional[BrandKitConfig] = None) -> Tuple[bool, Optional[BrandKitConfig]]:
        """Load a brand kit.

        Returns:
            (ok, config) - on success config is the loaded kit (None = not
            found); on failure ok is False and config is fallback
        """
        try:
            return True, await self._call(self.repository.load, user_id)
        except asyncio.TimeoutError:
            self._report(f"Loading the brand kit timed out after {self.timeout:g}s")
        except PersistenceError as e:
            self._report(f"Could not load the brand kit: {e}")
        return False, fallback

    async def save(self, user_id: str, config: BrandKitConfig) -> bool:
        """Save a brand kit. Returns True on success."""
        snapshot = config.copy()
        try:
            await self._call(self.repository.save, user_id, snapshot)
            return True
        except asyncio.TimeoutError:
            self._report(f"Saving the brand kit timed out after {self.timeout:g}s")
        except PersistenceError as e:
            self._report(f"Could not save the brand kit: {e}")
        return False

    @staticmethod
    def _report(message: str) -> None:
        loggerWarn(message + ". Your changes are still available in the editor.", "Brand Kit")
