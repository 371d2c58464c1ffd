"""Text-to-speech orchestration for translated results."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .interfaces import SpeechSynthesizer


@dataclass(slots=True)
class SpeechOutputConfig:
    """Configurable controls for translated speech."""

    muted: bool = False
    max_chars: int = 500


class SpeechOutputService:
    """Exclusive speaking slot: at most one utterance plays at a time.

    A new request preempts whatever is playing, and muting cancels it. Synthesis
    failures are logged and never propagate to the caller.
    """

    def __init__(
        self,
        synthesizer: SpeechSynthesizer,
        config: SpeechOutputConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._synthesizer = synthesizer
        self._config = config or SpeechOutputConfig()
        self._logger = logger or logging.getLogger("ce_translator.voice.output")

    @property
    def muted(self) -> bool:
        return self._config.muted

    @property
    def is_speaking(self) -> bool:
        return self._synthesizer.is_speaking

    def set_muted(self, muted: bool) -> None:
        self._config.muted = muted
        if muted:
            self.cancel()

    def speak(self, text: str, language: str) -> bool:
        """Start speaking ``text`` unless muted. Returns whether playback started."""
        if self._config.muted:
            return False

        normalized = " ".join(text.split())
        if not normalized:
            return False

        self.cancel()
        limited = normalized[: self._config.max_chars]
        try:
            self._synthesizer.speak(limited, language)
        except Exception:  # noqa: BLE001 - playback failures must not affect translation state.
            self._logger.exception("synthesis_failed", extra={"language": language, "chars": len(limited)})
            return False

        self._logger.info("speaking", extra={"language": language, "chars": len(limited)})
        return True

    def cancel(self) -> None:
        if not self._synthesizer.is_speaking:
            return
        try:
            self._synthesizer.stop()
        except Exception:  # noqa: BLE001
            self._logger.exception("synthesis_cancel_failed")
        else:
            self._logger.info("speech_cancelled")
