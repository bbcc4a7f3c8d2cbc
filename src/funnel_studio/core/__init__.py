"""Configuration and the step type registry."""

from .config import EditorConfig, EditorConfigManager
from .step_registry import (
    StepIntent,
    StepDefinition,
    STEP_DEFINITIONS,
    get_default_intent,
    get_allowed_intents,
    is_intent_locked,
    effective_intent,
    validate_funnel_structure,
)

__all__ = [
    "EditorConfig",
    "EditorConfigManager",
    "StepIntent",
    "StepDefinition",
    "STEP_DEFINITIONS",
    "get_default_intent",
    "get_allowed_intents",
    "is_intent_locked",
    "effective_intent",
    "validate_funnel_structure",
]
