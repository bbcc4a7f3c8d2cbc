"""Funnel Studio - editing core for multi-step funnel pages."""

from .core.step_registry import StepIntent, StepType
from .models import Funnel, Step
from .editor.session import EditingSession
from .errors import FunnelStudioError, PersistenceError, UnknownStepError, UploadError

__version__ = "0.1.0"

__all__ = [
    "StepIntent",
    "StepType",
    "Funnel",
    "Step",
    "EditingSession",
    "FunnelStudioError",
    "PersistenceError",
    "UnknownStepError",
    "UploadError",
]
