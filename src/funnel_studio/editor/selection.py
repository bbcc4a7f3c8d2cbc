"""What the editor currently targets: funnel, step, block or element.

Selections are carried as a tagged union. The compound string form
``<step_id>::<child_id>`` exists only for callers that must store a
selection as a single string (URL state, drag data); generated ids
never contain the separator.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

SEP = "::"


class SelectionKind(Enum):
    """Entity kinds that can be selected."""
    FUNNEL = "funnel"
    STEP = "step"
    BLOCK = "block"
    ELEMENT = "element"


def encode(parent_id: str, child_id: Optional[str] = None) -> str:
    """Join a parent id and optional child id into one string."""
    if not child_id:
        return parent_id
    return f"{parent_id}{SEP}{child_id}"


def decode(compound_id: str) -> Tuple[str, Optional[str]]:
    """Split on the first separator; the child is None when there is none."""
    parent_id, found, child_id = compound_id.partition(SEP)
    if not found:
        return parent_id, None
    return parent_id, child_id or None


@dataclass(frozen=True)
class Selection:
    """The currently targeted entity."""
    kind: SelectionKind = SelectionKind.FUNNEL
    step_id: Optional[str] = None
    child_id: Optional[str] = None

    @classmethod
    def funnel(cls) -> "Selection":
        return cls()

    @classmethod
    def step(cls, step_id: str) -> "Selection":
        return cls(SelectionKind.STEP, step_id)

    @classmethod
    def block(cls, step_id: str, block_id: str) -> "Selection":
        return cls(SelectionKind.BLOCK, step_id, block_id)

    @classmethod
    def element(cls, step_id: str, element_id: str) -> "Selection":
        return cls(SelectionKind.ELEMENT, step_id, element_id)

    @classmethod
    def from_compound(cls, kind: SelectionKind, compound_id: str) -> "Selection":
        """Build a selection from its string form.

        A block or element id without a child part degrades to a
        selection of the step it names.
        """
        if kind == SelectionKind.FUNNEL:
            return cls.funnel()
        parent_id, child_id = decode(compound_id)
        if kind == SelectionKind.STEP:
            return cls.step(parent_id)
        if child_id is None:
            logger.warning(f"Selection id {compound_id!r} has no child part; selecting step")
            return cls.step(parent_id)
        return cls(kind, parent_id, child_id)

    @property
    def compound_id(self) -> Optional[str]:
        """String form of the selection id, None for the funnel."""
        if self.kind == SelectionKind.FUNNEL:
            return None
        if self.kind == SelectionKind.STEP:
            return self.step_id
        return encode(self.step_id, self.child_id)

    def targets(self, step_id: str, child_id: Optional[str] = None) -> bool:
        return self.step_id == step_id and self.child_id == child_id


def step_id_of(selection: Selection) -> Optional[str]:
    """Owning step of a selection, None for the funnel."""
    if selection.kind == SelectionKind.FUNNEL:
        return None
    return selection.step_id


def child_id_of(selection: Selection) -> Optional[str]:
    if selection.kind in (SelectionKind.BLOCK, SelectionKind.ELEMENT):
        return selection.child_id
    return None


# Built-in element -> (sidebar tab, section)
ELEMENT_PANEL_MAP: Dict[str, Tuple[str, Optional[str]]] = {
    "headline": ("content", "headline"),
    "subtext": ("content", "subtext"),
    "button": ("design", "button-styling"),
    "button_text": ("content", "button"),
    "input": ("design", "input-styling"),
    "placeholder": ("content", "placeholder"),
    "options": ("design", "option-cards"),
    "video": ("content", "video"),
    "image_top": ("design", "image"),
    "image_bottom": ("design", "image"),
    "opt_in_form": ("design", "input-styling"),
    "background": ("design", "background"),
}

DYNAMIC_ELEMENT_PANEL = ("content", "dynamic-elements")


def panel_for(selection: Selection, is_dynamic: bool = False) -> Tuple[str, Optional[str]]:
    """Sidebar tab and section to reveal for a selection."""
    if selection.kind == SelectionKind.FUNNEL:
        return ("funnel", None)
    if selection.kind == SelectionKind.STEP:
        return ("design", None)
    if selection.kind == SelectionKind.BLOCK:
        return ("blocks", selection.child_id)
    if is_dynamic:
        return DYNAMIC_ELEMENT_PANEL
    return ELEMENT_PANEL_MAP.get(selection.child_id, ("design", None))
