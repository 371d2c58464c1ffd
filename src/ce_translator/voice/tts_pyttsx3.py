"""Text-to-speech backend powered by ``pyttsx3``."""

from __future__ import annotations

import logging
import queue
import threading

from ce_translator.errors import SynthesisError
from ce_translator.languages import speech_tag_for

from .interfaces import SpeechSynthesizer

_logger = logging.getLogger("ce_translator.voice.tts_pyttsx3")


class Pyttsx3SpeechSynthesizer(SpeechSynthesizer):
    """Speaker playback on a dedicated worker thread so ``speak`` never blocks."""

    def __init__(self, *, rate: int | None = None, volume: float | None = None) -> None:
        try:
            import pyttsx3
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Voice TTS backend unavailable. Install extras with: pip install 'ce-translator[voice]'"
            ) from exc

        try:
            self._engine = pyttsx3.init()
        except Exception as exc:  # noqa: BLE001 - driver errors vary by platform.
            raise SynthesisError(f"Speech engine could not start: {exc}") from exc

        if rate is not None:
            self._engine.setProperty("rate", rate)
        if volume is not None:
            self._engine.setProperty("volume", max(0.0, min(1.0, volume)))

        self._voices = list(self._engine.getProperty("voices") or [])
        self._requests: queue.Queue[tuple[str, str] | None] = queue.Queue()
        self._speaking = threading.Event()
        self._worker = threading.Thread(target=self._run, name="pyttsx3-speaker", daemon=True)
        self._worker.start()

    @property
    def is_speaking(self) -> bool:
        return self._speaking.is_set() or not self._requests.empty()

    def speak(self, text: str, language: str) -> None:
        if not text.strip():
            return
        self._requests.put((text, speech_tag_for(language)))

    def stop(self) -> None:
        while True:
            try:
                self._requests.get_nowait()
            except queue.Empty:
                break
        if self._speaking.is_set():
            self._engine.stop()

    def close(self) -> None:
        self.stop()
        self._requests.put(None)

    def _run(self) -> None:
        while True:
            request = self._requests.get()
            if request is None:
                return

            text, tag = request
            voice_id = self._voice_for(tag)
            self._speaking.set()
            try:
                if voice_id:
                    self._engine.setProperty("voice", voice_id)
                self._engine.say(text)
                self._engine.runAndWait()
            except Exception:  # noqa: BLE001 - keep the speaker thread alive.
                _logger.exception("synthesis_failed", extra={"language": tag})
            finally:
                self._speaking.clear()

    def _voice_for(self, tag: str) -> str | None:
        wanted = tag.replace("_", "-").lower()
        primary = wanted.split("-", 1)[0]
        fallback: str | None = None
        for voice in self._voices:
            languages = [_decode_language(item) for item in getattr(voice, "languages", []) or []]
            haystack = [*languages, str(getattr(voice, "id", "")).lower()]
            if any(wanted in item for item in haystack):
                return voice.id
            if fallback is None and any(item.startswith(primary) or f"{primary}-" in item for item in languages):
                fallback = voice.id
        return fallback


def _decode_language(value: object) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    return str(value).lstrip("\x05").replace("_", "-").lower()
