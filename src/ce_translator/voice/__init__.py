"""Voice input and output module boundaries."""

from .interfaces import (
    AudioCaptureSource,
    AudioChunkCallback,
    PermissionGate,
    SpeechRecognizer,
    SpeechSynthesizer,
    TranscriptUpdate,
)
from .output import SpeechOutputConfig, SpeechOutputService

__all__ = [
    "AudioCaptureSource",
    "AudioChunkCallback",
    "PermissionGate",
    "SpeechOutputConfig",
    "SpeechOutputService",
    "SpeechRecognizer",
    "SpeechSynthesizer",
    "TranscriptUpdate",
]
