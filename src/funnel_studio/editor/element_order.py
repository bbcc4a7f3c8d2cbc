"""Ordered element ids per step.

All operations are pure: they take an order and return a new list, so the
stored order is swapped in one assignment and never spliced in place.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple, Any

from .dynamic_content import (
    BUILT_IN_ELEMENT_IDS,
    DynamicContentStore,
    ElementKind,
    copy_element_id,
    new_element_id,
)
from .media import video_embed_url

logger = logging.getLogger(__name__)


DEFAULT_ELEMENT_ORDERS: Dict[str, List[str]] = {
    "welcome": ["image_top", "headline", "subtext", "button", "hint"],
    "text_question": ["image_top", "headline", "input", "hint"],
    "multi_choice": ["image_top", "headline", "options"],
    "email_capture": ["image_top", "headline", "subtext", "input", "hint"],
    "phone_capture": ["image_top", "headline", "subtext", "input", "hint"],
    "video": ["headline", "video", "button"],
    "opt_in": ["image_top", "headline", "subtext", "opt_in_form"],
    "embed": ["headline", "subtext"],
    "thank_you": ["image_top", "headline", "subtext"],
    "application_flow": ["image_top", "headline", "subtext", "button"],
}

FALLBACK_ORDER = ["headline", "subtext", "button"]


def _type_key(step_type) -> str:
    return getattr(step_type, "value", step_type)


def default_order(step_type) -> List[str]:
    """Built-in slot order for a step type."""
    return list(DEFAULT_ELEMENT_ORDERS.get(_type_key(step_type), FALLBACK_ORDER))


def current_order(step) -> List[str]:
    """The step's stored order, or its type's default when none is stored."""
    if step.element_order:
        return list(step.element_order)
    return default_order(step.step_type)


def append(order: Sequence[str], kind: ElementKind) -> Tuple[List[str], str]:
    """Append a freshly generated dynamic id."""
    existing = set(order)
    element_id = new_element_id(kind)
    while element_id in existing:
        element_id = new_element_id(kind)
    return list(order) + [element_id], element_id


def move_up(order: Sequence[str], element_id: str) -> List[str]:
    new_order = list(order)
    if element_id not in new_order:
        return new_order
    index = new_order.index(element_id)
    if index > 0:
        new_order[index - 1], new_order[index] = new_order[index], new_order[index - 1]
    return new_order


def move_down(order: Sequence[str], element_id: str) -> List[str]:
    new_order = list(order)
    if element_id not in new_order:
        return new_order
    index = new_order.index(element_id)
    if index < len(new_order) - 1:
        new_order[index + 1], new_order[index] = new_order[index], new_order[index + 1]
    return new_order


def can_move_up(order: Sequence[str], element_id: str) -> bool:
    return element_id in order and list(order).index(element_id) > 0


def can_move_down(order: Sequence[str], element_id: str) -> bool:
    return element_id in order and list(order).index(element_id) < len(order) - 1


def duplicate(order: Sequence[str], element_id: str) -> Tuple[List[str], Optional[str]]:
    """Insert a copy id directly after ``element_id``.

    Returns the unchanged order and None when the id is not present.
    """
    new_order = list(order)
    if element_id not in new_order:
        logger.warning(f"Cannot duplicate missing element {element_id}")
        return new_order, None
    existing = set(new_order)
    copy_id = copy_element_id(element_id)
    while copy_id in existing:
        copy_id = copy_element_id(element_id)
    new_order.insert(new_order.index(element_id) + 1, copy_id)
    return new_order, copy_id


def remove(order: Sequence[str], element_id: str) -> List[str]:
    return [eid for eid in order if eid != element_id]


def is_permutation(order: Sequence[str], new_order: Sequence[str]) -> bool:
    return len(order) == len(new_order) and sorted(order) == sorted(new_order)


def reorder(order: Sequence[str], new_order: Sequence[str]) -> List[str]:
    """Replace the order wholesale with a permutation of itself.

    Anything else would silently lose or invent ids, so it is rejected and
    the original order is returned.
    """
    if not is_permutation(order, new_order):
        missing = sorted(set(order) - set(new_order))
        extra = sorted(set(new_order) - set(order))
        logger.warning(
            f"Rejected reorder that is not a permutation (missing={missing}, extra={extra}, "
            f"sizes {len(order)}->{len(new_order)})"
        )
        return list(order)
    return list(new_order)


def is_renderable(
    element_id: str,
    content: Dict[str, Any],
    dynamic_elements: DynamicContentStore,
    image_url: Optional[str] = None,
    image_position: Optional[str] = None,
) -> bool:
    """Whether an element has content that produces visible output."""
    kind = dynamic_elements.kind_of(element_id) or ElementKind.from_element_id(element_id)
    if kind is not None:
        payload = dynamic_elements.get(element_id)
        if kind in (ElementKind.TEXT, ElementKind.HEADLINE):
            return bool(payload.get("text"))
        if kind == ElementKind.VIDEO:
            return video_embed_url(payload.get("video_url")) is not None
        if kind == ElementKind.IMAGE:
            return bool(payload.get("image_url"))
        if kind == ElementKind.EMBED:
            return bool(payload.get("embed_url"))
        return kind in (ElementKind.BUTTON, ElementKind.DIVIDER)

    if element_id in ("headline", "subtext"):
        return bool(content.get(element_id))
    if element_id == "video":
        return video_embed_url(content.get("video_url")) is not None
    if element_id == "image_top":
        return bool(image_url) and image_position == "top"
    if element_id == "image_bottom":
        return bool(image_url) and image_position == "bottom"
    return element_id in BUILT_IN_ELEMENT_IDS


def filter_renderable(
    order: Sequence[str],
    content: Dict[str, Any],
    dynamic_elements: DynamicContentStore,
    image_url: Optional[str] = None,
    image_position: Optional[str] = None,
) -> List[str]:
    """Drop ids with nothing to show; the stored order is not touched."""
    return [
        eid for eid in order
        if is_renderable(eid, content, dynamic_elements, image_url, image_position)
    ]
