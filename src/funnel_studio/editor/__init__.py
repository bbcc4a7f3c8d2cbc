"""Editing primitives for funnel steps: selection, ordering, content, design."""

from .selection import Selection, SelectionKind, encode, decode, panel_for
from .dynamic_content import DynamicContentStore, DynamicElement, ElementKind
from .content_blocks import BlockType, ContentBlock
from .design import FunnelSettings, StepDesign, ResolvedDesign, resolve_design
from .rich_text import FormatCommand, RichText
from .debounce import Debouncer
from .inline_editor import InlineTextEditor, Rect
from .drag_reorder import DragActivation, DragReorderEngine, DropResult
from .canvas import CanvasElement, editor_elements, public_elements

__all__ = [
    "Selection",
    "SelectionKind",
    "encode",
    "decode",
    "panel_for",
    "DynamicContentStore",
    "DynamicElement",
    "ElementKind",
    "BlockType",
    "ContentBlock",
    "FunnelSettings",
    "StepDesign",
    "ResolvedDesign",
    "resolve_design",
    "FormatCommand",
    "RichText",
    "Debouncer",
    "InlineTextEditor",
    "Rect",
    "DragActivation",
    "DragReorderEngine",
    "DropResult",
    "CanvasElement",
    "editor_elements",
    "public_elements",
]
