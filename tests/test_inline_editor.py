"""Tests for inline rich-text editing."""

import pytest

from funnel_studio.core.config import EditorConfig
from funnel_studio.editor.inline_editor import (
    EditorState,
    InlineTextEditor,
    Rect,
    ToolbarPosition,
    toolbar_position,
)
from funnel_studio.editor.rich_text import FormatCommand


@pytest.fixture
def saves():
    """Collected save payloads."""
    return []


@pytest.fixture
def editor(scheduler, saves):
    """Editor over a headline with manual timers."""
    return InlineTextEditor("headline", "Hello", saves.append, EditorConfig(), scheduler)


class TestEditingStates:
    """Tests for entering and leaving edit mode."""

    def test_starts_idle(self, editor):
        """Editors display only until clicked."""
        assert editor.state == EditorState.IDLE
        editor.type_text("x")
        assert editor.html == "Hello"

    def test_click_enters_editing(self, editor):
        """Clicking makes the content live."""
        editor.click()
        assert editor.is_editing
        assert editor.caret == 5

    def test_blur_without_changes_does_not_save(self, editor, saves):
        """Leaving unchanged content saves nothing."""
        editor.click()
        editor.blur()
        assert not editor.is_editing
        assert saves == []


class TestSaving:
    """Tests for debounced and flushed saves."""

    def test_debounced_save(self, editor, saves, scheduler):
        """Typing saves once the typing pauses."""
        editor.click()
        editor.type_text(" there")
        assert saves == []
        assert editor.save_pending
        scheduler.advance(0.35)
        assert saves == ["Hello there"]

    def test_typing_burst_saves_once(self, editor, saves, scheduler):
        """Each keystroke restarts the timer."""
        editor.click()
        editor.type_text("!")
        scheduler.advance(0.2)
        editor.type_text("!")
        scheduler.advance(0.2)
        assert saves == []
        scheduler.advance(0.2)
        assert saves == ["Hello!!"]

    def test_blur_flushes(self, editor, saves, scheduler):
        """Blur saves pending edits immediately."""
        editor.click()
        editor.backspace()
        editor.blur()
        assert saves == ["Hell"]
        scheduler.advance(1.0)
        assert saves == ["Hell"]

    def test_escape_keeps_edits(self, editor, saves):
        """Escape flushes and exits rather than reverting."""
        editor.click()
        editor.type_text("?")
        assert editor.key_down("Escape")
        assert not editor.is_editing
        assert saves == ["Hello?"]
        assert editor.html == "Hello?"

    def test_close_flushes(self, editor, saves):
        """Closing an editor does not drop pending edits."""
        editor.click()
        editor.type_text("?")
        editor.close()
        assert saves == ["Hello?"]


class TestToolbar:
    """Tests for selection and formatting."""

    def test_toolbar_centered_above_selection(self):
        """The toolbar sits above the selection's centre."""
        assert toolbar_position(Rect(top=100, left=200, width=100), 50, 8) == ToolbarPosition(50, 250)

    def test_toolbar_clamped_to_viewport(self):
        """The toolbar never goes above the viewport top."""
        assert toolbar_position(Rect(top=20, left=0, width=40), 50, 8).top == 8

    def test_selection_shows_toolbar(self, editor):
        """A non-collapsed selection shows the toolbar."""
        editor.click()
        editor.select(0, 5, Rect(top=100, left=10, width=80))
        assert editor.text_selected
        assert editor.toolbar == ToolbarPosition(50, 50)

    def test_collapsed_selection_hides_toolbar(self, editor):
        """A caret is not a selection."""
        editor.click()
        editor.select(2, 2, Rect(top=100, left=10, width=0))
        assert not editor.text_selected
        assert editor.toolbar is None

    def test_format_needs_selection(self, editor, saves):
        """Character formatting without a selection does nothing."""
        editor.click()
        assert not editor.apply(FormatCommand.BOLD)
        assert saves == []

    def test_format_saves_immediately(self, editor, saves):
        """Formatting saves without waiting for the debounce."""
        editor.click()
        editor.select(0, 5)
        assert editor.apply(FormatCommand.BOLD)
        assert saves == ["<b>Hello</b>"]
        assert not editor.save_pending

    def test_alignment_without_selection(self, editor, saves):
        """Alignment applies to the element as a whole."""
        editor.click()
        assert editor.apply(FormatCommand.ALIGN_RIGHT)
        assert saves == ['<div style="text-align:right">Hello</div>']

    def test_keyboard_shortcuts(self, editor, saves):
        """Ctrl/Cmd+B/I/U format the selection."""
        editor.click()
        editor.select(0, 5)
        assert editor.key_down("i", ctrl=True)
        assert editor.key_down("B", meta=True)
        assert saves[-1] == "<b><i>Hello</i></b>"

    def test_plain_key_not_consumed(self, editor):
        """Ordinary keys are left to the surface."""
        editor.click()
        assert not editor.key_down("b")

    def test_typing_replaces_selection(self, editor):
        """Typed text replaces the selected range."""
        editor.click()
        editor.select(0, 5)
        editor.type_text("Bye")
        assert editor.html == "Bye"
        assert editor.caret == 3


class TestSync:
    """Tests for external value updates."""

    def test_ignored_while_editing(self, editor):
        """Live content is never overwritten mid-edit."""
        editor.click()
        assert not editor.sync("Other")
        assert editor.html == "Hello"

    def test_echo_of_own_save_is_ignored(self, editor, saves):
        """Re-receiving the saved value keeps the caret."""
        editor.click()
        editor.type_text("!")
        editor.blur()
        editor.caret = 3
        assert not editor.sync(saves[-1])
        assert editor.caret == 3

    def test_new_value_when_idle(self, editor):
        """Idle editors take new values."""
        assert editor.sync("<b>New</b>")
        assert editor.html == "<b>New</b>"
        assert editor.caret == 3
