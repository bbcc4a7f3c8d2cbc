"""Funnel documents: a funnel, its steps and their serialized form."""

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Any

from .core.step_registry import StepType, default_content
from .editor.content_blocks import ContentBlock
from .editor.design import DEFAULT_FUNNEL_SETTINGS, FunnelSettings, StepDesign
from .editor.dynamic_content import DynamicContentStore


def new_step_id() -> str:
    return f"step_{uuid.uuid4()}"


@dataclass
class Step:
    """One page of a funnel."""
    id: str
    step_type: StepType
    content: Dict[str, Any] = field(default_factory=dict)
    element_order: List[str] = field(default_factory=list)
    dynamic_elements: DynamicContentStore = field(default_factory=DynamicContentStore)
    design: StepDesign = field(default_factory=StepDesign)
    content_blocks: List[ContentBlock] = field(default_factory=list)
    updated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(cls, step_type: StepType) -> "Step":
        """New step with the type's starting content."""
        return cls(id=new_step_id(), step_type=step_type, content=default_content(step_type))

    def to_dict(self) -> Dict[str, Any]:
        """Fully materialized document handed to persistence."""
        return {
            'id': self.id,
            'step_type': self.step_type.value,
            'content': copy.deepcopy(self.content),
            'element_order': list(self.element_order),
            'dynamic_elements': self.dynamic_elements.to_dict(),
            'design': self.design.to_dict(),
            'content_blocks': [b.to_dict() for b in self.content_blocks],
            'updated_at': self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Step":
        content = dict(data.get('content') or {})
        # Older documents keep order, dynamic content and design inside content
        element_order = data.get('element_order', content.pop('element_order', None)) or []
        dynamic = data.get('dynamic_elements', content.pop('dynamic_elements', None))
        design = data.get('design', content.pop('design', None))
        updated_at = data.get('updated_at')

        return cls(
            id=data['id'],
            step_type=StepType(data['step_type']),
            content=content,
            element_order=list(element_order),
            dynamic_elements=DynamicContentStore.from_dict(dynamic),
            design=StepDesign.from_dict(design),
            content_blocks=[ContentBlock.from_dict(b) for b in data.get('content_blocks', [])],
            updated_at=datetime.fromisoformat(updated_at) if updated_at else datetime.now(),
        )


@dataclass
class Funnel:
    """An ordered sequence of steps plus shared styling."""
    id: str
    name: str
    step_ids: List[str] = field(default_factory=list)
    steps: Dict[str, Step] = field(default_factory=dict)
    settings: FunnelSettings = field(default_factory=lambda: copy.deepcopy(DEFAULT_FUNNEL_SETTINGS))
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(cls, name: str) -> "Funnel":
        return cls(id=str(uuid.uuid4())[:8], name=name)

    def get_step(self, step_id: str) -> Optional[Step]:
        return self.steps.get(step_id)

    def ordered_steps(self) -> List[Step]:
        return [self.steps[sid] for sid in self.step_ids if sid in self.steps]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'settings': self.settings.to_dict(),
            'steps': [step.to_dict() for step in self.ordered_steps()],
            'created_at': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Funnel":
        steps = [Step.from_dict(s) for s in data.get('steps', [])]
        created_at = data.get('created_at')
        return cls(
            id=data['id'],
            name=data.get('name', 'Funnel'),
            step_ids=[s.id for s in steps],
            steps={s.id: s for s in steps},
            settings=FunnelSettings.from_dict(data.get('settings')),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
        )
