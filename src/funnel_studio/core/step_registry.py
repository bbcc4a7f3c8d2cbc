"""Step type registry: labels, intents and funnel structure checks."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any


class StepType(Enum):
    """Kinds of funnel pages."""
    WELCOME = "welcome"
    TEXT_QUESTION = "text_question"
    MULTI_CHOICE = "multi_choice"
    EMAIL_CAPTURE = "email_capture"
    PHONE_CAPTURE = "phone_capture"
    VIDEO = "video"
    OPT_IN = "opt_in"
    EMBED = "embed"
    THANK_YOU = "thank_you"
    APPLICATION_FLOW = "application_flow"


class StepIntent(Enum):
    """What finishing a step does with the lead."""
    CAPTURE = "capture"
    COLLECT = "collect"
    SCHEDULE = "schedule"
    COMPLETE = "complete"


INTENT_LABELS = {
    StepIntent.CAPTURE: "Submit",
    StepIntent.COLLECT: "Next step",
    StepIntent.SCHEDULE: "Schedule",
    StepIntent.COMPLETE: "Finish",
}


@dataclass
class StepDefinition:
    """Builder-facing definition of a step type."""
    step_type: StepType
    label: str
    description: str
    default_intent: StepIntent
    allowed_intents: List[StepIntent] = field(default_factory=list)
    intent_locked: bool = False
    requires_input: bool = False
    default_content: Dict[str, Any] = field(default_factory=dict)


STEP_DEFINITIONS: Dict[StepType, StepDefinition] = {
    StepType.WELCOME: StepDefinition(
        step_type=StepType.WELCOME,
        label="Welcome",
        description="Introduction screen with CTA button",
        default_intent=StepIntent.COLLECT,
        allowed_intents=[StepIntent.COLLECT, StepIntent.COMPLETE],
        default_content={
            "headline": "Welcome",
            "subtext": "Answer a few quick questions to get started.",
            "button_text": "Get Started",
        },
    ),
    StepType.TEXT_QUESTION: StepDefinition(
        step_type=StepType.TEXT_QUESTION,
        label="Text Question",
        description="Free-form text input question",
        default_intent=StepIntent.COLLECT,
        allowed_intents=[StepIntent.COLLECT, StepIntent.CAPTURE],
        requires_input=True,
        default_content={"headline": "What's your name?", "placeholder": "Type your answer..."},
    ),
    StepType.MULTI_CHOICE: StepDefinition(
        step_type=StepType.MULTI_CHOICE,
        label="Multi Choice",
        description="Multiple choice selection question",
        default_intent=StepIntent.COLLECT,
        allowed_intents=[StepIntent.COLLECT],
        requires_input=True,
        default_content={"headline": "Choose an option", "options": ["Option 1", "Option 2", "Option 3"]},
    ),
    StepType.EMAIL_CAPTURE: StepDefinition(
        step_type=StepType.EMAIL_CAPTURE,
        label="Email Capture",
        description="Collect an email address",
        default_intent=StepIntent.CAPTURE,
        allowed_intents=[StepIntent.CAPTURE, StepIntent.COLLECT],
        requires_input=True,
        default_content={"headline": "What's your email?", "placeholder": "you@example.com"},
    ),
    StepType.PHONE_CAPTURE: StepDefinition(
        step_type=StepType.PHONE_CAPTURE,
        label="Phone Capture",
        description="Collect a phone number",
        default_intent=StepIntent.CAPTURE,
        allowed_intents=[StepIntent.CAPTURE, StepIntent.COLLECT],
        requires_input=True,
        default_content={"headline": "What's your phone number?", "placeholder": "(555) 123-4567"},
    ),
    StepType.VIDEO: StepDefinition(
        step_type=StepType.VIDEO,
        label="Video",
        description="Video page with a continue button",
        default_intent=StepIntent.COLLECT,
        allowed_intents=[StepIntent.COLLECT],
        default_content={"headline": "Watch this first", "video_url": "", "button_text": "Continue"},
    ),
    StepType.OPT_IN: StepDefinition(
        step_type=StepType.OPT_IN,
        label="Opt-In Form",
        description="Name, email and phone form",
        default_intent=StepIntent.CAPTURE,
        allowed_intents=[StepIntent.CAPTURE],
        requires_input=True,
        default_content={"headline": "Where should we send it?", "submit_button_text": "Submit and proceed"},
    ),
    StepType.EMBED: StepDefinition(
        step_type=StepType.EMBED,
        label="Embed/iFrame",
        description="Calendly or other embedded content",
        default_intent=StepIntent.SCHEDULE,
        allowed_intents=[StepIntent.SCHEDULE, StepIntent.COLLECT],
        default_content={"headline": "Book a time", "embed_url": ""},
    ),
    StepType.THANK_YOU: StepDefinition(
        step_type=StepType.THANK_YOU,
        label="Thank You",
        description="Final confirmation screen",
        default_intent=StepIntent.COMPLETE,
        allowed_intents=[StepIntent.COMPLETE],
        intent_locked=True,
        default_content={"headline": "Thank you!", "subtext": "We'll be in touch soon."},
    ),
    StepType.APPLICATION_FLOW: StepDefinition(
        step_type=StepType.APPLICATION_FLOW,
        label="Application Flow",
        description="Multi-question application",
        default_intent=StepIntent.CAPTURE,
        allowed_intents=[StepIntent.CAPTURE, StepIntent.COLLECT],
        requires_input=True,
        default_content={"headline": "Apply now", "button_text": "Continue"},
    ),
}


def _definition(step_type) -> Optional[StepDefinition]:
    try:
        return STEP_DEFINITIONS.get(StepType(step_type))
    except ValueError:
        return None


def get_default_intent(step_type) -> StepIntent:
    """Default intent for a step type; unknown types collect."""
    definition = _definition(step_type)
    return definition.default_intent if definition else StepIntent.COLLECT


def get_allowed_intents(step_type) -> List[StepIntent]:
    definition = _definition(step_type)
    return list(definition.allowed_intents) if definition else [StepIntent.COLLECT]


def is_intent_locked(step_type) -> bool:
    definition = _definition(step_type)
    return definition.intent_locked if definition else False


def is_valid_intent(step_type, intent: StepIntent) -> bool:
    return intent in get_allowed_intents(step_type)


def default_content(step_type) -> Dict[str, Any]:
    """Fresh copy of the starting content for a new step."""
    definition = _definition(step_type)
    return dict(definition.default_content) if definition else {}


def effective_intent(step) -> StepIntent:
    """Intent stored in the step content, or the type's default.

    A stored intent the type does not allow is ignored.
    """
    raw = (step.content or {}).get("intent")
    if raw:
        try:
            intent = StepIntent(raw)
        except ValueError:
            intent = None
        if intent is not None and is_valid_intent(step.step_type, intent):
            return intent
    return get_default_intent(step.step_type)


def count_capture_steps(steps) -> int:
    return sum(1 for step in steps if effective_intent(step) == StepIntent.CAPTURE)


def validate_funnel_structure(steps) -> List[str]:
    """Return human-readable warnings about the funnel's step sequence."""
    warnings = []

    capture_count = count_capture_steps(steps)
    if capture_count == 0:
        warnings.append("No submit step found. Funnels should have at least one step that sends a lead.")
    elif capture_count > 1:
        warnings.append(
            f"Multiple submit steps detected ({capture_count}). "
            "Keep only one submit step to avoid duplicate sends."
        )

    if steps and StepType(steps[-1].step_type) != StepType.THANK_YOU:
        warnings.append("Consider adding a Thank You page as the final step.")

    return warnings
