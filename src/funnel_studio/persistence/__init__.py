"""Collaborators that store step documents and uploaded files."""

from .sink import StepSink, RestStepSink, JsonFunnelStore
from .upload import Uploader, RestUploader

__all__ = [
    "StepSink",
    "RestStepSink",
    "JsonFunnelStore",
    "Uploader",
    "RestUploader",
]
