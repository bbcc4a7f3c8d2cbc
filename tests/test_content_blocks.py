"""Tests for structural content blocks."""

from funnel_studio.core.step_registry import StepType
from funnel_studio.editor import content_blocks
from funnel_studio.editor.content_blocks import BlockType, ContentBlock
from funnel_studio.models import Step


class TestContentBlocks:
    """Tests for block list operations."""

    def test_add_appends_empty_block(self):
        """New blocks get a unique id and empty content."""
        blocks = content_blocks.add([], BlockType.BUTTON)
        assert len(blocks) == 1
        assert blocks[0].id.startswith("block_")
        assert blocks[0].content == {"buttonText": "", "buttonUrl": ""}
        assert blocks[0].label == "Button"

    def test_update_replaces_content(self):
        """update replaces a block's content."""
        blocks = content_blocks.add([], BlockType.TEXT)
        block_id = blocks[0].id
        updated = content_blocks.update(blocks, block_id, {"text": "Hello"})
        assert content_blocks.find(updated, block_id).content == {"text": "Hello"}
        assert blocks[0].content == {"text": ""}

    def test_remove(self):
        """remove drops the block."""
        blocks = content_blocks.add(content_blocks.add([], BlockType.TEXT), BlockType.IMAGE)
        remaining = content_blocks.remove(blocks, blocks[0].id)
        assert [b.type for b in remaining] == [BlockType.IMAGE]

    def test_reorder(self):
        """reorder follows the given ids."""
        blocks = [ContentBlock("b1", BlockType.TEXT), ContentBlock("b2", BlockType.IMAGE)]
        assert [b.id for b in content_blocks.reorder(blocks, ["b2", "b1"])] == ["b2", "b1"]

    def test_reorder_rejects_non_permutation(self):
        """An order missing a block is rejected."""
        blocks = [ContentBlock("b1", BlockType.TEXT), ContentBlock("b2", BlockType.IMAGE)]
        assert [b.id for b in content_blocks.reorder(blocks, ["b2"])] == ["b1", "b2"]

    def test_to_dict(self):
        """Blocks serialize with their type value."""
        block = ContentBlock("b1", BlockType.HEADLINE, {"text": "Hi"})
        assert block.to_dict() == {"id": "b1", "type": "headline", "content": {"text": "Hi"}}
        assert ContentBlock.from_dict(block.to_dict()) == block


class TestStructurePanel:
    """Tests for block panel visibility."""

    def test_hidden_for_capture_steps(self):
        """Capture steps do not show the structure panel."""
        assert not content_blocks.shows_structure_panel(Step("s", StepType.EMAIL_CAPTURE))

    def test_hidden_for_schedule_steps(self):
        """Schedule steps do not show the structure panel."""
        assert not content_blocks.shows_structure_panel(Step("s", StepType.EMBED))

    def test_shown_for_collect_steps(self):
        """Collect steps show the structure panel."""
        assert content_blocks.shows_structure_panel(Step("s", StepType.WELCOME))

    def test_follows_stored_intent(self):
        """A stored intent overrides the type default."""
        step = Step("s", StepType.EMBED, content={"intent": "collect"})
        assert content_blocks.shows_structure_panel(step)
