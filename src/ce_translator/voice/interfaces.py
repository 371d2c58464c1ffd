"""Contracts for audio capture, speech recognition, synthesis and permissions."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Callable
from dataclasses import dataclass
from typing import Protocol

AudioChunkCallback = Callable[[bytes], None]


@dataclass(frozen=True, slots=True)
class TranscriptUpdate:
    """One partial or final transcript produced during a capture."""

    text: str
    is_final: bool = False


class AudioCaptureSource(Protocol):
    """Microphone stream that pushes audio chunks while started."""

    def start(self, on_chunk: AudioChunkCallback) -> None:
        """Open the input device and begin delivering chunks to ``on_chunk``."""

    def stop(self) -> None:
        """Release the input device. Safe to call when already stopped."""


class SpeechRecognizer(Protocol):
    """Turns a stream of audio chunks into transcript updates."""

    def is_available(self, language: str) -> bool:
        """Whether a working recognizer exists for ``language``."""

    def recognize(self, language: str, chunks: AsyncIterable[bytes]) -> AsyncIterator[TranscriptUpdate]:
        """Yield transcript updates until ``chunks`` ends or iteration is cancelled."""


class SpeechSynthesizer(Protocol):
    """Speaks text aloud without blocking the caller."""

    @property
    def is_speaking(self) -> bool:
        """Whether an utterance is currently playing."""

    def speak(self, text: str, language: str) -> None:
        """Start speaking ``text`` with a voice for ``language``."""

    def stop(self) -> None:
        """Cancel the current utterance immediately."""


class PermissionGate(Protocol):
    """Checks, and requests when needed, microphone and recognition access."""

    async def check_and_request(self) -> bool:
        """Return ``True`` when capture is allowed."""
