"""Structural content blocks, ordered independently of element order."""

import copy
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Any

from ..core.step_registry import StepIntent, effective_intent
from .element_order import is_permutation

logger = logging.getLogger(__name__)


class BlockType(Enum):
    """Kinds of structural block."""
    HEADLINE = "headline"
    TEXT = "text"
    IMAGE = "image"
    BUTTON = "button"


BLOCK_LABELS = {
    BlockType.HEADLINE: "Headline",
    BlockType.TEXT: "Text Block",
    BlockType.IMAGE: "Image",
    BlockType.BUTTON: "Button",
}


def empty_content(block_type: BlockType) -> Dict[str, Any]:
    if block_type in (BlockType.HEADLINE, BlockType.TEXT):
        return {"text": ""}
    if block_type == BlockType.IMAGE:
        return {"imageUrl": ""}
    return {"buttonText": "", "buttonUrl": ""}


@dataclass
class ContentBlock:
    """A typed structural block."""
    id: str
    type: BlockType
    content: Dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return BLOCK_LABELS[self.type]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": self.type.value, "content": copy.deepcopy(self.content)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentBlock":
        return cls(id=data["id"], type=BlockType(data["type"]), content=dict(data.get("content") or {}))


def new_block_id() -> str:
    return f"block_{uuid.uuid4()}"


def add(blocks: Sequence[ContentBlock], block_type: BlockType) -> List[ContentBlock]:
    """Append an empty block of ``block_type``."""
    block = ContentBlock(id=new_block_id(), type=block_type, content=empty_content(block_type))
    return list(blocks) + [block]


def find(blocks: Sequence[ContentBlock], block_id: str) -> Optional[ContentBlock]:
    for block in blocks:
        if block.id == block_id:
            return block
    return None


def update(blocks: Sequence[ContentBlock], block_id: str, content: Dict[str, Any]) -> List[ContentBlock]:
    """Replace one block's content."""
    return [
        ContentBlock(b.id, b.type, dict(content)) if b.id == block_id else b
        for b in blocks
    ]


def remove(blocks: Sequence[ContentBlock], block_id: str) -> List[ContentBlock]:
    return [b for b in blocks if b.id != block_id]


def reorder(blocks: Sequence[ContentBlock], new_ids: Sequence[str]) -> List[ContentBlock]:
    """Reorder blocks to ``new_ids``; a non-permutation is rejected."""
    current_ids = [b.id for b in blocks]
    if not is_permutation(current_ids, new_ids):
        logger.warning(f"Rejected block reorder: {current_ids} -> {list(new_ids)}")
        return list(blocks)
    by_id = {b.id: b for b in blocks}
    return [by_id[block_id] for block_id in new_ids]


def shows_structure_panel(step) -> bool:
    """Blocks are edited only on steps that neither capture nor schedule."""
    return effective_intent(step) not in (StepIntent.CAPTURE, StepIntent.SCHEDULE)
