"""Session orchestration for push-to-talk speech translation.

One ``TranslationSessionController`` serves one language pair. It runs the
pipeline capture -> recognize -> settle -> translate -> speak for either direction,
never for both at once, and publishes every step on an observable ``SessionState``.
All transitions happen on the event loop that owns the controller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from enum import Enum
from functools import partial
from typing import Any

from ce_translator.audio import AudioChunkStream
from ce_translator.errors import (
    AudioEngineError,
    ErrorKind,
    NoSpeechDetectedError,
    PermissionDeniedError,
    RecognitionError,
    RecognizerUnavailableError,
    TranslatorError,
)
from ce_translator.languages import Direction, LanguagePair
from ce_translator.translation.interfaces import Translator, TranslatorSession
from ce_translator.voice.interfaces import AudioCaptureSource, PermissionGate, SpeechRecognizer
from ce_translator.voice.output import SpeechOutputService

StateObserver = Callable[[Any], None]
SessionKey = tuple[str, str]

_MISSING = object()


class SessionPhase(str, Enum):
    """Lifecycle states of the controller."""

    IDLE = "idle"
    CAPTURING = "capturing"
    SETTLING = "settling"
    TRANSLATING = "translating"
    UNSUPPORTED = "unsupported"


@dataclass(slots=True)
class SessionState:
    """Observable controller state. Subscribers are notified per field, on change only."""

    phase: SessionPhase = SessionPhase.IDLE
    active_direction: Direction | None = None
    recognized_text: str = ""
    pending_translation_text: str = ""
    translated_text: str = ""
    is_translating: bool = False
    is_muted: bool = False
    error_message: str | None = None
    error_kind: ErrorKind | None = None
    translation_sessions: dict[SessionKey, TranslatorSession] = field(default_factory=dict)
    _observers: dict[str, list[StateObserver]] = field(default_factory=dict, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        previous = getattr(self, name, _MISSING)
        object.__setattr__(self, name, value)
        if previous is not _MISSING and previous != value:
            self.publish(name)

    @property
    def is_idle(self) -> bool:
        return self.phase is SessionPhase.IDLE

    def subscribe(self, field_name: str, observer: StateObserver) -> Callable[[], None]:
        """Call ``observer(new_value)`` whenever ``field_name`` changes. Returns an unsubscribe."""
        if field_name not in _PUBLIC_FIELDS:
            raise KeyError(f"Unknown session state field: {field_name}")
        observers = self._observers.setdefault(field_name, [])
        observers.append(observer)

        def _unsubscribe() -> None:
            if observer in observers:
                observers.remove(observer)

        return _unsubscribe

    def publish(self, field_name: str) -> None:
        """Notify subscribers of ``field_name`` with its current value."""
        observers = getattr(self, "_observers", None)
        if not observers:
            return
        value = getattr(self, field_name)
        for observer in list(observers.get(field_name, ())):
            observer(value)


_PUBLIC_FIELDS = frozenset(item.name for item in fields(SessionState) if not item.name.startswith("_"))


@dataclass(slots=True)
class SessionTimings:
    """Empirically chosen pipeline delays."""

    settle_delay_seconds: float = 0.5
    # How long a committed capture waits for the recognizer's final result.
    recognition_grace_seconds: float = 5.0


def _error_message(error: BaseException) -> str:
    if isinstance(error, NoSpeechDetectedError):
        return "No speech detected. Please try again."
    if isinstance(error, RecognitionError):
        return f"Recognition error: {error}"
    return str(error) or type(error).__name__


class TranslationSessionController:
    """Coordinates capture, recognition, translation and speech for one language pair."""

    def __init__(
        self,
        pair: LanguagePair,
        *,
        capture_source: AudioCaptureSource,
        recognizer: SpeechRecognizer,
        translator: Translator,
        speech_output: SpeechOutputService,
        permission_gate: PermissionGate,
        timings: SessionTimings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._pair = pair
        self._capture_source = capture_source
        self._recognizer = recognizer
        self._translator = translator
        self._speech_output = speech_output
        self._permission_gate = permission_gate
        self._timings = timings or SessionTimings()
        self._logger = logger or logging.getLogger("ce_translator.session")

        self._state = SessionState(is_muted=speech_output.muted)
        self._stream: AudioChunkStream | None = None
        self._recognition_task: asyncio.Task[None] | None = None
        self._settle_task: asyncio.Task[None] | None = None
        self._settle_direction: Direction | None = None
        self._session_events: dict[SessionKey, asyncio.Event] = {}
        # Bumped on every capture and on close; stale recognizer output is ignored.
        self._capture_id = 0

        if not pair.is_supported:
            self._state.phase = SessionPhase.UNSUPPORTED
            self._state.error_kind = ErrorKind.UNSUPPORTED_PAIR
            self._state.error_message = f"Cannot translate {pair.source_locale} into itself."
            self._logger.warning("unsupported_language_pair", extra={"locale": pair.source_locale})

    @property
    def pair(self) -> LanguagePair:
        return self._pair

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def timings(self) -> SessionTimings:
        return self._timings

    # ---- translation sessions ----
    def open(self) -> None:
        """Ask the translator to provision a session for both directions."""
        if self._state.phase is SessionPhase.UNSUPPORTED:
            return
        for direction in Direction:
            key = self._pair.locales_for(direction)
            if key in self._state.translation_sessions:
                continue
            self._translator.request_session(key[0], key[1], partial(self._on_session_ready, key))
            self._logger.info("translation_session_requested", extra={"pair": f"{key[0]}->{key[1]}"})

    def has_session(self, direction: Direction) -> bool:
        return self._pair.locales_for(direction) in self._state.translation_sessions

    async def wait_for_session(self, direction: Direction, timeout: float | None = None) -> bool:
        """Wait until the session for ``direction`` is provisioned. Returns ``False`` on timeout."""
        if self.has_session(direction):
            return True
        event = self._session_event(self._pair.locales_for(direction))
        try:
            await asyncio.wait_for(event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    def _on_session_ready(self, key: SessionKey, session: TranslatorSession) -> None:
        if key in self._state.translation_sessions:
            self._logger.debug("translation_session_duplicate", extra={"pair": f"{key[0]}->{key[1]}"})
            return
        self._state.translation_sessions[key] = session
        self._state.publish("translation_sessions")
        self._session_event(key).set()
        self._logger.info("translation_session_obtained", extra={"pair": f"{key[0]}->{key[1]}"})

    def _session_event(self, key: SessionKey) -> asyncio.Event:
        if key not in self._session_events:
            self._session_events[key] = asyncio.Event()
        return self._session_events[key]

    # ---- capture ----
    async def begin_capture(self, direction: Direction) -> bool:
        """Start listening in ``direction``'s input language.

        Only legal while idle; otherwise this is a no-op returning ``False`` so two
        microphone sessions can never overlap.
        """
        state = self._state
        if state.phase is not SessionPhase.IDLE:
            self._logger.info(
                "capture_rejected",
                extra={"requested": direction.value, "phase": state.phase.value},
            )
            return False

        input_locale, _ = self._pair.locales_for(direction)
        self._capture_id += 1
        capture_id = self._capture_id
        state.phase = SessionPhase.CAPTURING
        state.active_direction = direction
        state.recognized_text = ""
        state.translated_text = ""
        state.pending_translation_text = ""
        state.error_message = None
        state.error_kind = None

        if not await self._permission_gate.check_and_request():
            self._fail_capture(
                PermissionDeniedError(
                    "Speech recognition not authorized. Allow microphone access in settings and try again."
                )
            )
            return False
        if capture_id != self._capture_id or state.phase is not SessionPhase.CAPTURING:
            # Released or closed while the permission prompt was pending.
            return False

        if not self._recognizer.is_available(input_locale):
            self._fail_capture(RecognizerUnavailableError(f"{input_locale} recognizer not available."))
            return False

        stream = AudioChunkStream()
        self._stream = stream
        try:
            self._capture_source.start(stream.push)
        except Exception as exc:  # noqa: BLE001 - any device failure aborts this capture.
            error = exc if isinstance(exc, AudioEngineError) else AudioEngineError(f"Audio engine start failed: {exc}")
            self._fail_capture(error)
            return False

        self._recognition_task = asyncio.create_task(
            self._consume_recognition(capture_id, input_locale, stream),
            name=f"recognition-{direction.value}",
        )
        self._logger.info("capture_started", extra={"direction": direction.value, "language": input_locale})
        return True

    def end_capture(self) -> None:
        """Stop listening and commit the transcript after the settle delay.

        Audio is released before this returns. A no-op unless capturing.
        """
        state = self._state
        if state.phase is not SessionPhase.CAPTURING or state.active_direction is None:
            self._logger.debug("end_capture_ignored", extra={"phase": state.phase.value})
            return

        direction = state.active_direction
        self._release_audio()
        state.phase = SessionPhase.SETTLING

        if self._settle_task is not None and not self._settle_task.done():
            self._settle_task.cancel()
        self._settle_direction = direction
        self._settle_task = asyncio.create_task(
            self._settle_then_translate(direction, self._capture_id),
            name=f"settle-{direction.value}",
        )
        self._logger.info(
            "capture_ended",
            extra={"direction": direction.value, "settle_delay_seconds": self._timings.settle_delay_seconds},
        )

    async def wait_until_idle(self) -> None:
        """Wait for a pending settle/translate cycle to finish."""
        task = self._settle_task
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def _consume_recognition(self, capture_id: int, language: str, stream: AudioChunkStream) -> None:
        try:
            async for update in self._recognizer.recognize(language, stream):
                if capture_id != self._capture_id:
                    return
                if update.text != self._state.recognized_text:
                    self._state.recognized_text = update.text
                if update.is_final:
                    self._logger.info("recognition_final", extra={"text": update.text})
                    if self._state.phase is SessionPhase.CAPTURING:
                        self._release_audio()
                    return
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001 - every recognizer failure ends this capture.
            if capture_id == self._capture_id:
                self._on_recognition_error(exc)

    def _on_recognition_error(self, exc: Exception) -> None:
        error = exc if isinstance(exc, TranslatorError) else RecognitionError(str(exc) or type(exc).__name__)
        if self._state.phase is SessionPhase.CAPTURING:
            self._fail_capture(error)
            return
        # Audio is already released while settling; keep the transcript and report.
        self._set_error(error)
        self._logger.warning("recognition_error_after_release", extra={"error": str(error)})

    def _fail_capture(self, error: TranslatorError) -> None:
        self._release_audio()
        task = self._recognition_task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        self._recognition_task = None
        settle = self._settle_task
        if settle is not None and settle is not asyncio.current_task():
            # Released during the permission prompt: the settle belongs to this failed capture.
            settle.cancel()
            self._settle_task = None
        self._set_error(error)
        self._to_idle()
        self._logger.warning("capture_failed", extra={"kind": error.kind.value, "error": str(error)})

    def _set_error(self, error: TranslatorError) -> None:
        self._state.error_kind = error.kind
        self._state.error_message = _error_message(error)

    def _release_audio(self) -> None:
        try:
            self._capture_source.stop()
        except Exception:  # noqa: BLE001 - stop must always finish releasing.
            self._logger.exception("audio_stop_failed")
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    async def _finish_recognition(self, grace_seconds: float = 0.0) -> None:
        """Let the recognizer deliver its final result for up to ``grace_seconds``, then cancel it."""
        task = self._recognition_task
        if task is None:
            return
        if not task.done() and grace_seconds > 0:
            await asyncio.wait({task}, timeout=grace_seconds)
            if not task.done():
                self._logger.warning("recognition_final_timeout", extra={"grace_seconds": grace_seconds})
        if not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        if self._recognition_task is task:
            self._recognition_task = None

    async def _settle_then_translate(self, direction: Direction, capture_id: int) -> None:
        state = self._state
        try:
            await asyncio.sleep(self._timings.settle_delay_seconds)
            if capture_id != self._capture_id:
                return
            await self._finish_recognition(self._timings.recognition_grace_seconds)
            if capture_id != self._capture_id:
                return

            state.pending_translation_text = state.recognized_text
            text = state.pending_translation_text
            self._logger.info("transcript_committed", extra={"direction": direction.value, "text": text})
            if not text:
                return

            state.phase = SessionPhase.TRANSLATING
            await self._translate(direction, text)
        finally:
            if self._settle_task is asyncio.current_task():
                self._settle_task = None
                self._settle_direction = None
            if capture_id == self._capture_id and state.phase in (SessionPhase.SETTLING, SessionPhase.TRANSLATING):
                self._to_idle()

    # ---- translation ----
    async def translate(self, direction: Direction, text: str | None = None) -> str | None:
        """Translate ``text`` (default: the current transcript) outside the capture cycle.

        Returns the translation, or ``None`` when the request was skipped or failed.
        """
        state = self._state
        if state.phase is SessionPhase.UNSUPPORTED:
            return None
        if state.phase is not SessionPhase.IDLE:
            reason = "already_translating" if state.is_translating else state.phase.value
            self._logger.info("translation_skipped", extra={"direction": direction.value, "reason": reason})
            return None

        text = state.recognized_text if text is None else text
        if not text or not self.has_session(direction):
            return await self._translate(direction, text)

        state.phase = SessionPhase.TRANSLATING
        state.active_direction = direction
        try:
            return await self._translate(direction, text)
        finally:
            if state.phase is SessionPhase.TRANSLATING:
                self._to_idle()

    async def _translate(self, direction: Direction, text: str) -> str | None:
        state = self._state
        input_locale, output_locale = self._pair.locales_for(direction)
        pair_label = f"{input_locale}->{output_locale}"

        session = state.translation_sessions.get((input_locale, output_locale))
        if session is None:
            self._logger.info("translation_skipped", extra={"pair": pair_label, "reason": "session_not_ready"})
            return None
        if not text:
            return None
        if state.is_translating:
            self._logger.info("translation_skipped", extra={"pair": pair_label, "reason": "already_translating"})
            return None

        state.is_translating = True
        self._logger.info("translation_started", extra={"pair": pair_label, "text": text})
        try:
            result = await session.translate(text)
        except asyncio.CancelledError:
            state.is_translating = False
            raise
        except Exception as exc:  # noqa: BLE001 - failures are reported inline, never raised.
            state.translated_text = f"Translation error: {str(exc) or type(exc).__name__}"
            state.is_translating = False
            self._logger.exception("translation_failed", extra={"pair": pair_label})
            return None

        state.translated_text = result
        state.is_translating = False
        self._logger.info("translation_succeeded", extra={"pair": pair_label, "text": result})
        self._speech_output.speak(result, output_locale)
        return result

    # ---- speech ----
    def set_muted(self, muted: bool) -> None:
        """Suppress speech without affecting translation; muting cancels playback."""
        self._state.is_muted = muted
        self._speech_output.set_muted(muted)
        self._logger.info("mute_changed", extra={"muted": muted})

    # ---- teardown ----
    async def close(self) -> None:
        """Release every resource the controller holds."""
        self._capture_id += 1
        self._release_audio()
        settle = self._settle_task
        if settle is not None and not settle.done():
            settle.cancel()
            await asyncio.gather(settle, return_exceptions=True)
        self._settle_task = None
        await self._finish_recognition()
        self._speech_output.cancel()
        if self._state.phase is not SessionPhase.UNSUPPORTED:
            self._to_idle()
        self._logger.info("session_closed")

    def _to_idle(self) -> None:
        self._state.phase = SessionPhase.IDLE
        self._state.active_direction = None
