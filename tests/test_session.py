"""
Tests for TransformSession and its undo/redo history.

Covers:
- HistoryManager as a standalone state stack
- Selection rules
- Committed mutations (add, delete, reorder) and undo/redo
- Session close (cancellation)
"""
import pytest

from models.brand_kit import BrandKitConfig
from models.session import TransformSession
from utils.history_manager import HistoryManager

from conftest import make_element


# ══════════════════════════════════════════════════════════════════════════
# HistoryManager (standalone state stack)
# ══════════════════════════════════════════════════════════════════════════

class TestHistoryManagerStack:

    @pytest.fixture
    def hm(self):
        return HistoryManager(max_history=3)

    def test_initial_state_empty(self, hm):
        assert not hm.can_undo()
        assert not hm.can_redo()
        assert hm.current_index == -1

    def test_undo_redo(self, hm):
        hm.save_state({"v": 1}, "first")
        hm.save_state({"v": 2}, "second")
        assert hm.get_undo_description() == "second"
        assert hm.undo() == {"v": 1}
        assert hm.get_redo_description() == "second"
        assert hm.redo() == {"v": 2}
        assert hm.redo() is None

    def test_save_after_undo_drops_redo_branch(self, hm):
        hm.save_state(1, "a")
        hm.save_state(2, "b")
        hm.undo()
        hm.save_state(3, "c")
        assert not hm.can_redo()
        assert hm.undo() == 1

    def test_snapshots_are_copies(self, hm):
        state = {"items": [1]}
        hm.save_state(state)
        hm.save_state({"items": [1, 2]})
        state["items"].append(99)
        assert hm.undo() == {"items": [1]}

    def test_trimmed_at_capacity(self, hm):
        for i in range(5):
            hm.save_state(i)
        assert len(hm.history) == 3
        assert hm.undo() == 3
        assert hm.undo() == 2
        assert hm.undo() is None

    def test_listeners(self, hm):
        calls = []
        hm.add_listener(lambda can_undo, can_redo: calls.append((can_undo, can_redo)))
        hm.save_state(1)
        hm.save_state(2)
        hm.undo()
        assert calls == [(False, False), (True, False), (False, True)]


# ══════════════════════════════════════════════════════════════════════════
# TransformSession
# ══════════════════════════════════════════════════════════════════════════

class TestSessionSelection:

    def test_select_unknown_id_raises(self, session_with_logo):
        with pytest.raises(KeyError):
            session_with_logo.select("nope")

    def test_select_none_clears(self, session_with_logo):
        session_with_logo.select(None)
        assert session_with_logo.selected_element is None

    def test_native_size_defaults_to_zero(self):
        assert TransformSession().native_size("unknown") == (0, 0)


class TestSessionMutations:

    def test_delete_selected(self, session_with_logo):
        removed = session_with_logo.delete_selected()
        assert removed.id == "logo-1"
        assert len(session_with_logo.elements) == 0
        assert session_with_logo.selected_id is None
        assert session_with_logo.native_size("logo-1") == (0, 0)

    def test_delete_without_selection_is_noop(self, session_with_logo):
        session_with_logo.clear_selection()
        assert session_with_logo.delete_selected() is None
        assert len(session_with_logo.elements) == 1

    def test_undo_delete_restores_element(self, session_with_logo):
        session_with_logo.delete_selected()
        assert session_with_logo.undo()
        assert session_with_logo.elements.ids == ["logo-1"]
        assert session_with_logo.redo()
        assert session_with_logo.elements.ids == []

    def test_undo_add_drops_stale_selection(self):
        session = TransformSession()
        session.add_element(make_element("a", "a.png"))
        assert session.selected_id == "a"
        assert session.undo()
        assert len(session.elements) == 0
        assert session.selected_id is None

    def test_nothing_to_undo_initially(self):
        assert not TransformSession().undo()

    def test_reorder_commits(self):
        session = TransformSession(BrandKitConfig([make_element("a", "a.png"), make_element("b", "b.png")]))
        assert session.move_element("a", 1)
        assert session.elements.ids == ["b", "a"]
        session.undo()
        assert session.elements.ids == ["a", "b"]

    def test_replace_config_restarts_history(self, session_with_logo):
        session_with_logo.delete_selected()
        session_with_logo.replace_config(BrandKitConfig([make_element("x", "x.png")]))
        assert not session_with_logo.undo()
        assert session_with_logo.elements.ids == ["x"]

    def test_has_edits_tracks_commits_since_load(self, session_with_logo):
        assert not session_with_logo.has_edits
        session_with_logo.add_element(make_element("wm", "wm.png"))
        assert session_with_logo.has_edits
        session_with_logo.replace_config(BrandKitConfig())
        assert not session_with_logo.has_edits


class TestSessionLifecycle:

    def test_close_cancels_token(self, session_with_logo):
        token = session_with_logo.cancel_token
        session_with_logo.close()
        assert token.cancelled
        assert not session_with_logo.active
        assert session_with_logo.selected_id is None
