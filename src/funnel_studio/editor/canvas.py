"""Element lists for the editor canvas and the public page."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from .design import FunnelSettings, ResolvedDesign, resolve_button_text, resolve_design
from .dynamic_content import ElementKind
from .element_order import can_move_down, can_move_up, current_order, filter_renderable
from .media import video_embed_url
from .selection import Selection, SelectionKind

BUILT_IN_LABELS = {
    "headline": "Headline",
    "subtext": "Subtext",
    "button": "Button",
    "input": "Input Field",
    "options": "Options",
    "video": "Video",
    "hint": "Hint",
    "opt_in_form": "Contact Form",
    "image_top": "Image",
    "image_bottom": "Image",
}


def element_label(element_id: str, kind: Optional[ElementKind] = None) -> str:
    if element_id in BUILT_IN_LABELS:
        return BUILT_IN_LABELS[element_id]
    kind = kind or ElementKind.from_element_id(element_id)
    return kind.label if kind else element_id


@dataclass
class CanvasElement:
    """One element as the canvas draws it."""
    id: str
    label: str
    kind: Optional[ElementKind] = None
    content: Dict[str, Any] = field(default_factory=dict)
    selected: bool = False
    can_move_up: bool = False
    can_move_down: bool = False

    @property
    def is_dynamic(self) -> bool:
        return self.kind is not None


def _element_content(element_id: str, kind: Optional[ElementKind], step,
                     design: ResolvedDesign, settings: Optional[FunnelSettings]) -> Dict[str, Any]:
    if kind is not None:
        payload = step.dynamic_elements.get(element_id, kind)
        if kind == ElementKind.VIDEO:
            payload["embed_url"] = video_embed_url(payload.get("video_url"))
        return payload

    content = step.content
    if element_id in ("headline", "subtext"):
        return {"text": content.get(element_id, "")}
    if element_id == "button":
        return {"text": resolve_button_text(content, settings)}
    if element_id == "input":
        return {"placeholder": content.get("placeholder", "")}
    if element_id == "options":
        return {"options": list(content.get("options", []))}
    if element_id == "video":
        return {"video_url": content.get("video_url", ""),
                "embed_url": video_embed_url(content.get("video_url"))}
    if element_id in ("image_top", "image_bottom"):
        return {"image_url": design.image_url, "aspect_ratio": design.image_aspect_ratio}
    return {}


def _image_slot_visible(element_id: str, design: ResolvedDesign) -> bool:
    position = "top" if element_id == "image_top" else "bottom"
    return bool(design.image_url) and design.image_position == position


def editor_elements(step, settings: Optional[FunnelSettings] = None,
                    selection: Optional[Selection] = None) -> List[CanvasElement]:
    """Every element the author can click, in order.

    Empty dynamic elements show their default content; image slots appear
    only when an image is placed there.
    """
    design = resolve_design(step.design, settings)
    order = current_order(step)
    elements = []
    for element_id in order:
        kind = step.dynamic_elements.kind_of(element_id) or ElementKind.from_element_id(element_id)
        if kind is None and element_id in ("image_top", "image_bottom") \
                and not _image_slot_visible(element_id, design):
            continue
        selected = (
            selection is not None
            and selection.kind == SelectionKind.ELEMENT
            and selection.targets(step.id, element_id)
        )
        elements.append(CanvasElement(
            id=element_id,
            label=element_label(element_id, kind),
            kind=kind,
            content=_element_content(element_id, kind, step, design, settings),
            selected=selected,
            can_move_up=can_move_up(order, element_id),
            can_move_down=can_move_down(order, element_id),
        ))
    return elements


def public_elements(step, settings: Optional[FunnelSettings] = None) -> List[CanvasElement]:
    """Elements a visitor sees: only those with renderable content."""
    design = resolve_design(step.design, settings)
    visible = filter_renderable(
        current_order(step), step.content, step.dynamic_elements,
        design.image_url, design.image_position,
    )
    elements = []
    for element_id in visible:
        kind = step.dynamic_elements.kind_of(element_id) or ElementKind.from_element_id(element_id)
        elements.append(CanvasElement(
            id=element_id,
            label=element_label(element_id, kind),
            kind=kind,
            content=_element_content(element_id, kind, step, design, settings),
        ))
    return elements
