"""Exceptions raised at the editing core's collaborator boundaries."""


class FunnelStudioError(Exception):
    """Base class for funnel studio errors."""


class UnknownStepError(FunnelStudioError):
    """A step id was not found in the funnel being edited."""

    def __init__(self, step_id: str):
        super().__init__(f"Unknown step: {step_id}")
        self.step_id = step_id


class PersistenceError(FunnelStudioError):
    """The persistence collaborator failed to store a step document."""


class UploadError(FunnelStudioError):
    """The upload collaborator failed to return a URL for a file."""


class ConfigError(FunnelStudioError):
    """Editor configuration could not be parsed."""
