"""Tests for funnel documents."""

from funnel_studio.core.step_registry import StepType
from funnel_studio.editor.content_blocks import BlockType, ContentBlock
from funnel_studio.editor.design import StepDesign
from funnel_studio.editor.dynamic_content import DynamicContentStore, ElementKind
from funnel_studio.models import Funnel, Step


class TestStep:
    """Tests for Step serialization."""

    def test_create_has_unique_id(self):
        """Each new step gets its own id."""
        assert Step.create(StepType.WELCOME).id != Step.create(StepType.WELCOME).id

    def test_round_trip(self):
        """A step survives serialization."""
        step = Step(
            "step_1",
            StepType.VIDEO,
            content={"headline": "Watch"},
            element_order=["headline", "video", "text_1"],
            dynamic_elements=DynamicContentStore().create(ElementKind.TEXT, "text_1"),
            design=StepDesign(text_color="#000"),
            content_blocks=[ContentBlock("b1", BlockType.TEXT, {"text": "x"})],
        )
        loaded = Step.from_dict(step.to_dict())
        assert loaded.to_dict() == step.to_dict()

    def test_reads_legacy_content_layout(self):
        """Older documents nest order, dynamic content and design in content."""
        step = Step.from_dict({
            "id": "step_1",
            "step_type": "welcome",
            "content": {
                "headline": "Hi",
                "element_order": ["headline", "text_9"],
                "dynamic_elements": {"text_9": {"text": "Old"}},
                "design": {"textColor": "#fff"},
            },
        })
        assert step.element_order == ["headline", "text_9"]
        assert step.dynamic_elements.get("text_9") == {"text": "Old"}
        assert step.design.text_color == "#fff"
        assert step.content == {"headline": "Hi"}


class TestFunnel:
    """Tests for Funnel."""

    def test_create(self):
        """New funnels get the default settings."""
        funnel = Funnel.create("Leads")
        assert len(funnel.id) == 8
        assert funnel.settings.primary_color == "#8B5CF6"

    def test_settings_are_not_shared(self):
        """Each funnel owns its settings."""
        first, second = Funnel.create("A"), Funnel.create("B")
        first.settings.primary_color = "#000"
        assert second.settings.primary_color == "#8B5CF6"

    def test_round_trip_keeps_step_order(self):
        """Serialized funnels keep their step order."""
        funnel = Funnel.create("Leads")
        for step_type in (StepType.WELCOME, StepType.EMAIL_CAPTURE, StepType.THANK_YOU):
            step = Step.create(step_type)
            funnel.steps[step.id] = step
            funnel.step_ids.append(step.id)
        loaded = Funnel.from_dict(funnel.to_dict())
        assert loaded.step_ids == funnel.step_ids
        assert [s.step_type for s in loaded.ordered_steps()] == [
            StepType.WELCOME, StepType.EMAIL_CAPTURE, StepType.THANK_YOU
        ]
