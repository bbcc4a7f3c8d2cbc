"""Inline rich-text editing for one text-bearing element.

States: IDLE (display only) and EDITING (live). While editing, a
non-collapsed selection shows the floating toolbar. Edits are saved
``debounce_ms`` after the last keystroke, and flushed synchronously on
blur or Escape.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..core.config import EditorConfig
from .debounce import Debouncer
from .rich_text import FormatCommand, RichText

logger = logging.getLogger(__name__)


class EditorState(Enum):
    IDLE = "idle"
    EDITING = "editing"


@dataclass(frozen=True)
class TextRange:
    start: int
    end: int

    @property
    def collapsed(self) -> bool:
        return self.start == self.end

    def normalized(self) -> "TextRange":
        return TextRange(min(self.start, self.end), max(self.start, self.end))


@dataclass(frozen=True)
class Rect:
    """Bounding rectangle of a selection in viewport coordinates."""
    top: float
    left: float
    width: float = 0
    height: float = 0


@dataclass(frozen=True)
class ToolbarPosition:
    top: float
    left: float


SHORTCUTS = {
    "b": FormatCommand.BOLD,
    "i": FormatCommand.ITALIC,
    "u": FormatCommand.UNDERLINE,
}


def toolbar_position(rect: Rect, offset: float, min_top: float) -> ToolbarPosition:
    """Centre above the selection, clamped below the viewport top."""
    return ToolbarPosition(top=max(min_top, rect.top - offset), left=rect.left + rect.width / 2)


class InlineTextEditor:
    """Editing state machine and persistence contract for one element."""

    def __init__(
        self,
        element_id: str,
        value: str,
        on_save: Callable[[str], None],
        config: Optional[EditorConfig] = None,
        scheduler=None,
    ):
        self.element_id = element_id
        self.config = config or EditorConfig()
        self.on_save = on_save
        self.state = EditorState.IDLE
        self.document = RichText.from_html(value)
        self.last_saved = value or ""
        self.caret = len(self.document)
        self.selection: Optional[TextRange] = None
        self.toolbar: Optional[ToolbarPosition] = None
        self._debouncer = Debouncer(self.config.debounce_seconds, self._save, scheduler)

    @property
    def is_editing(self) -> bool:
        return self.state == EditorState.EDITING

    @property
    def text_selected(self) -> bool:
        return self.is_editing and self.selection is not None and not self.selection.collapsed

    @property
    def save_pending(self) -> bool:
        return self._debouncer.pending

    @property
    def html(self) -> str:
        return self.document.to_html()

    def click(self):
        """Enter editing with the caret at the end."""
        if self.is_editing:
            return
        self.state = EditorState.EDITING
        self.caret = len(self.document)
        self.selection = None
        logger.debug(f"Editing {self.element_id}")

    def type_text(self, text: str):
        """Insert at the caret, replacing any selected text."""
        if not self.is_editing:
            return
        if self.text_selected:
            rng = self.selection.normalized()
            self.document = self.document.delete_range(rng.start, rng.end)
            self.caret = rng.start
        self.document = self.document.insert_text(self.caret, text)
        self.caret += len(text)
        self._clear_selection()
        self._debouncer.trigger()

    def backspace(self):
        if not self.is_editing:
            return
        if self.text_selected:
            rng = self.selection.normalized()
            self.document = self.document.delete_range(rng.start, rng.end)
            self.caret = rng.start
        elif self.caret > 0:
            self.document = self.document.delete_range(self.caret - 1, self.caret)
            self.caret -= 1
        else:
            return
        self._clear_selection()
        self._debouncer.trigger()

    def replace_content(self, value: str):
        """Take the whole content from the live surface, e.g. after a paste."""
        if not self.is_editing:
            return
        self.document = RichText.from_html(value)
        self.caret = min(self.caret, len(self.document))
        self._clear_selection()
        self._debouncer.trigger()

    def select(self, start: int, end: int, rect: Optional[Rect] = None):
        """Report the user's selection; a non-collapsed one shows the toolbar."""
        if not self.is_editing:
            return
        length = len(self.document)
        self.selection = TextRange(max(0, min(start, length)), max(0, min(end, length)))
        self.caret = self.selection.normalized().end
        if self.text_selected and rect is not None:
            self.toolbar = toolbar_position(rect, self.config.toolbar_offset, self.config.toolbar_min_top)
        else:
            self.toolbar = None

    def _clear_selection(self):
        self.selection = None
        self.toolbar = None

    def apply(self, command: FormatCommand, value=None) -> bool:
        """Apply a toolbar command and save immediately.

        Character commands need a selection; alignment and spacing apply to
        the whole element.
        """
        if not self.is_editing:
            return False
        if command.is_range_command:
            if not self.text_selected:
                return False
            rng = self.selection.normalized()
            self.document = self.document.apply(command, rng.start, rng.end, value)
        else:
            self.document = self.document.apply(command, value=value)
        self._debouncer.cancel()
        self._save()
        return True

    def key_down(self, key: str, ctrl: bool = False, meta: bool = False) -> bool:
        """Handle a key press. Returns True when the key was consumed."""
        if not self.is_editing:
            return False
        if key == "Escape":
            self.escape()
            return True
        if (ctrl or meta) and key.lower() in SHORTCUTS:
            return self.apply(SHORTCUTS[key.lower()])
        return False

    def blur(self):
        """Flush any pending save and leave editing."""
        if not self.is_editing:
            return
        if not self._debouncer.flush():
            self._save()
        self.state = EditorState.IDLE
        self._clear_selection()
        logger.debug(f"Stopped editing {self.element_id}")

    def escape(self):
        """Exit editing without discarding: flush, then leave."""
        self.blur()

    def sync(self, value: str) -> bool:
        """Accept an externally updated value.

        Ignored while editing, and when it equals what was last saved, so the
        live content and caret are never reset by an echo of our own save.
        """
        value = value or ""
        if self.is_editing:
            return False
        if value == self.last_saved:
            return False
        self.document = RichText.from_html(value)
        self.last_saved = value
        self.caret = len(self.document)
        return True

    def _save(self):
        html = self.document.to_html()
        if html == self.last_saved:
            return
        self.last_saved = html
        self.on_save(html)

    def close(self):
        """Flush any pending save, e.g. when the element is unmounted."""
        self._debouncer.flush()
