"""
pytest-qt tests for the editor window's brand kit loading.
"""
import pytest

import main
from main import BrandKitEditor
from models.brand_kit import BrandKitConfig
from services.brand_kit_repository import InMemoryBrandKitRepository
from utils.errors import ElementDecodeError
from utils.logger import set_main_window

from conftest import make_element


@pytest.fixture
def window(qtbot, monkeypatch):
    warnings = []
    monkeypatch.setattr(main, 'loggerWarn', lambda message, title="Warning": warnings.append(message))
    editor = BrandKitEditor(user_id="tester", repository=InMemoryBrandKitRepository())
    qtbot.addWidget(editor)
    qtbot.waitUntil(lambda: not editor._workers)
    editor.warnings = warnings
    yield editor
    set_main_window(None)


def stored_kit():
    return BrandKitConfig([make_element("stored", "stored.png")])


def test_late_startup_load_keeps_user_edits(window):
    window.session.add_element(make_element("mine", "mine.png"))

    window._on_brand_kit_loaded((True, stored_kit()), keep_edits=True)

    assert window.session.elements.ids == ["mine"]
    assert window.warnings


def test_startup_load_applies_when_untouched(window):
    window._on_brand_kit_loaded((True, stored_kit()), keep_edits=True)
    assert window.session.elements.ids == ["stored"]


def test_explicit_reload_replaces_edits(window):
    window.session.add_element(make_element("mine", "mine.png"))
    window._on_brand_kit_loaded((True, stored_kit()))
    assert window.session.elements.ids == ["stored"]


def test_skipped_element_warns_individually(window):
    window._warn_skipped(ElementDecodeError("logo-9", "cannot identify image file"))
    assert window.warnings == ["cannot identify image file. The element was skipped."]
