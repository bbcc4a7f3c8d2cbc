"""Side table of content for dynamically added elements."""

import copy
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Any

logger = logging.getLogger(__name__)


class ElementKind(Enum):
    """Dynamic element types; the value is the id prefix."""
    TEXT = "text"
    HEADLINE = "headline"
    IMAGE = "image"
    BUTTON = "button"
    DIVIDER = "divider"
    VIDEO = "video"
    EMBED = "embed"

    @property
    def label(self) -> str:
        return ELEMENT_LABELS[self]

    def default_payload(self) -> Dict[str, Any]:
        """Fresh content record for a new element of this kind."""
        return copy.deepcopy(DEFAULT_PAYLOADS[self])

    @classmethod
    def from_element_id(cls, element_id: str) -> Optional["ElementKind"]:
        """Kind of a stored dynamic id, None for built-in slots.

        Used once when a document is loaded; live records carry their kind.
        """
        if element_id in BUILT_IN_ELEMENT_IDS:
            return None
        prefix, sep, _ = element_id.partition("_")
        if not sep:
            return None
        if prefix in BUILT_IN_COPY_KINDS:
            return BUILT_IN_COPY_KINDS[prefix]
        try:
            return cls(prefix)
        except ValueError:
            return None


BUILT_IN_ELEMENT_IDS = frozenset([
    "headline", "subtext", "button", "input", "options",
    "video", "hint", "opt_in_form", "image_top", "image_bottom",
])

# Built-in slots that can be copied into a dynamic element of the same kind.
# Their copies keep the slot name as id prefix: ``subtext_copy_<uuid>``.
BUILT_IN_COPY_KINDS = {
    "headline": ElementKind.HEADLINE,
    "subtext": ElementKind.TEXT,
    "button": ElementKind.BUTTON,
    "video": ElementKind.VIDEO,
}

DEFAULT_PAYLOADS: Dict[ElementKind, Dict[str, Any]] = {
    ElementKind.TEXT: {"text": "New text block"},
    ElementKind.HEADLINE: {"text": "New Headline"},
    ElementKind.BUTTON: {"text": "Click me"},
    ElementKind.IMAGE: {"image_url": ""},
    ElementKind.VIDEO: {"video_url": ""},
    ElementKind.EMBED: {"embed_url": "", "embed_scale": 0.75},
    ElementKind.DIVIDER: {},
}

ELEMENT_LABELS = {
    ElementKind.TEXT: "Text Block",
    ElementKind.HEADLINE: "Headline",
    ElementKind.IMAGE: "Image",
    ElementKind.BUTTON: "Button",
    ElementKind.DIVIDER: "Divider",
    ElementKind.VIDEO: "Video",
    ElementKind.EMBED: "Embed",
}


def new_element_id(kind: ElementKind) -> str:
    """Globally unique id: ``<prefix>_<uuid>``."""
    return f"{kind.value}_{uuid.uuid4()}"


def copy_element_id(element_id: str) -> str:
    return f"{element_id}_copy_{uuid.uuid4()}"


@dataclass
class DynamicElement:
    """A dynamic element's kind, fixed at creation, and its content."""
    id: str
    kind: ElementKind
    payload: Dict[str, Any] = field(default_factory=dict)


class DynamicContentStore:
    """Mapping of dynamic element id to content record.

    Every mutator returns a new store; the receiver is left untouched so a
    render in progress never sees a half-applied change.
    """

    def __init__(self, records: Optional[Dict[str, DynamicElement]] = None):
        self._records: Dict[str, DynamicElement] = dict(records or {})

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other) -> bool:
        if not isinstance(other, DynamicContentStore):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def record(self, element_id: str) -> Optional[DynamicElement]:
        return self._records.get(element_id)

    def kind_of(self, element_id: str) -> Optional[ElementKind]:
        element = self._records.get(element_id)
        return element.kind if element else None

    def get(self, element_id: str, kind: Optional[ElementKind] = None) -> Dict[str, Any]:
        """Stored content, or the kind's default when nothing is stored."""
        element = self._records.get(element_id)
        if element is not None:
            return dict(element.payload)
        kind = kind or ElementKind.from_element_id(element_id)
        if kind is None:
            return {}
        return kind.default_payload()

    def create(self, kind: ElementKind, element_id: Optional[str] = None) -> "DynamicContentStore":
        """Add a record with the kind's default content."""
        element_id = element_id or new_element_id(kind)
        records = dict(self._records)
        records[element_id] = DynamicElement(element_id, kind, kind.default_payload())
        return DynamicContentStore(records)

    def set(self, element_id: str, partial: Dict[str, Any],
            kind: Optional[ElementKind] = None) -> "DynamicContentStore":
        """Shallow-merge ``partial`` into the element's record."""
        existing = self._records.get(element_id)
        if existing is None:
            kind = kind or ElementKind.from_element_id(element_id)
            if kind is None:
                logger.warning(f"Cannot set content for non-dynamic element {element_id}")
                return self
            existing = DynamicElement(element_id, kind, kind.default_payload())

        records = dict(self._records)
        records[element_id] = DynamicElement(element_id, existing.kind, {**existing.payload, **partial})
        return DynamicContentStore(records)

    def duplicate(self, from_id: str, to_id: str) -> "DynamicContentStore":
        """Copy the record at ``from_id`` to ``to_id``, independent of the source."""
        source = self._records.get(from_id)
        if source is None:
            return self
        records = dict(self._records)
        records[to_id] = DynamicElement(to_id, source.kind, copy.deepcopy(source.payload))
        return DynamicContentStore(records)

    def delete(self, element_id: str) -> "DynamicContentStore":
        if element_id not in self._records:
            return self
        records = dict(self._records)
        del records[element_id]
        return DynamicContentStore(records)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Wire shape: id -> content record."""
        return {element_id: copy.deepcopy(el.payload) for element_id, el in self._records.items()}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Dict[str, Any]]]) -> "DynamicContentStore":
        """Load the wire shape; entries whose kind cannot be read are dropped."""
        records = {}
        for element_id, payload in (data or {}).items():
            kind = ElementKind.from_element_id(element_id)
            if kind is None:
                logger.warning(f"Dropping dynamic content with unknown kind: {element_id}")
                continue
            records[element_id] = DynamicElement(element_id, kind, dict(payload or {}))
        return cls(records)
