"""Speech-to-text backend powered by ``speech_recognition``."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterable, AsyncIterator

from ce_translator.errors import (
    AudioEngineError,
    NoSpeechDetectedError,
    RecognitionError,
    RecognizerUnavailableError,
)
from ce_translator.languages import find_language, speech_tag_for

from .interfaces import AudioCaptureSource, AudioChunkCallback, PermissionGate, SpeechRecognizer, TranscriptUpdate

_logger = logging.getLogger("ce_translator.voice.stt_speechrecognition")

SAMPLE_RATE = 16_000
SAMPLE_WIDTH = 2


def _import_speech_recognition(purpose: str):
    try:
        import speech_recognition as sr
    except ImportError as exc:  # pragma: no cover - import guard
        raise RuntimeError(
            f"{purpose} backend unavailable. Install extras with: pip install 'ce-translator[voice]'"
        ) from exc
    return sr


class SpeechRecognitionCaptureSource(AudioCaptureSource):
    """Microphone capture that pushes raw 16-bit PCM frames until ``stop()``.

    Frames are read on a worker thread. ``stop()`` waits for that thread, so every
    frame recorded before the release has been pushed when it returns.
    """

    def __init__(
        self,
        *,
        chunk_size: int = 1024,
        max_capture_seconds: float = 30.0,
        stop_timeout_seconds: float = 1.0,
    ) -> None:
        self._sr = _import_speech_recognition("Microphone")
        self._chunk_size = chunk_size
        self._max_frames = int(max_capture_seconds * SAMPLE_RATE)
        self._stop_timeout = stop_timeout_seconds
        self._worker: threading.Thread | None = None
        self._stop_event: threading.Event | None = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._worker is not None

    def start(self, on_chunk: AudioChunkCallback) -> None:
        with self._lock:
            # Never run a second reader over a live one.
            self._stop_locked()
            try:
                microphone = self._sr.Microphone(sample_rate=SAMPLE_RATE, chunk_size=self._chunk_size)
                microphone.__enter__()
            except Exception as exc:  # noqa: BLE001 - PyAudio/PortAudio raise assorted errors.
                raise AudioEngineError(f"Audio engine start failed: {exc}") from exc

            stop_event = threading.Event()
            worker = threading.Thread(
                target=self._pump,
                args=(microphone, on_chunk, stop_event),
                name="microphone-capture",
                daemon=True,
            )
            self._stop_event, self._worker = stop_event, worker
            worker.start()

    def stop(self) -> None:
        with self._lock:
            self._stop_locked()

    def _stop_locked(self) -> None:
        if self._worker is None or self._stop_event is None:
            return
        worker, stop_event = self._worker, self._stop_event
        self._worker = self._stop_event = None
        stop_event.set()
        worker.join(timeout=self._stop_timeout)
        if worker.is_alive():
            _logger.warning("microphone_stop_timeout", extra={"timeout_seconds": self._stop_timeout})

    def _pump(self, microphone, on_chunk: AudioChunkCallback, stop_event: threading.Event) -> None:
        frames = 0
        try:
            while not stop_event.is_set():
                if frames >= self._max_frames:
                    _logger.info("capture_limit_reached", extra={"frames": frames})
                    break
                data = microphone.stream.read(microphone.CHUNK)
                frames += microphone.CHUNK
                if data:
                    on_chunk(data)
        except Exception:  # noqa: BLE001 - a dead device ends the capture; the recognizer sees end of audio.
            _logger.exception("microphone_read_failed")
        finally:
            microphone.__exit__(None, None, None)


class SpeechRecognitionRecognizer(SpeechRecognizer):
    """Transcribe a capture with the Google Web Speech API.

    The whole capture is buffered. While audio arrives the buffer is
    re-transcribed every ``partial_interval_seconds`` of new audio for partial
    results (``None`` disables partials). When the stream ends the full buffer
    is transcribed once more for the final result.
    """

    def __init__(self, *, partial_interval_seconds: float | None = 2.0) -> None:
        self._sr = _import_speech_recognition("Voice STT")
        self._recognizer = self._sr.Recognizer()
        self._partial_bytes = (
            None if partial_interval_seconds is None else int(partial_interval_seconds * SAMPLE_RATE * SAMPLE_WIDTH)
        )

    def is_available(self, language: str) -> bool:
        return find_language(language) is not None

    async def recognize(self, language: str, chunks: AsyncIterable[bytes]) -> AsyncIterator[TranscriptUpdate]:
        if not self.is_available(language):
            raise RecognizerUnavailableError(f"{language} recognizer not available.")

        tag = speech_tag_for(language)
        buffer = bytearray()
        transcribed = 0
        text = ""
        async for chunk in chunks:
            buffer.extend(chunk)
            if self._partial_bytes is None or len(buffer) - transcribed < self._partial_bytes:
                continue
            transcribed = len(buffer)
            partial = await asyncio.to_thread(self._transcribe, bytes(buffer), tag)
            if partial and partial != text:
                text = partial
                yield TranscriptUpdate(text)

        if len(buffer) > transcribed:
            text = await asyncio.to_thread(self._transcribe, bytes(buffer), tag) or text
        if not text:
            raise NoSpeechDetectedError("No speech detected.")
        yield TranscriptUpdate(text, is_final=True)

    def _transcribe(self, audio_bytes: bytes, tag: str) -> str:
        audio = self._sr.AudioData(audio_bytes, SAMPLE_RATE, SAMPLE_WIDTH)
        try:
            return self._recognizer.recognize_google(audio, language=tag).strip()
        except self._sr.UnknownValueError:
            return ""
        except self._sr.RequestError as exc:
            raise RecognitionError(
                f"Speech recognition service request failed: {exc}. Check internet access."
            ) from exc


class MicrophonePermissionGate(PermissionGate):
    """Desktop stand-in for a permission prompt: capture needs an input device."""

    def __init__(self) -> None:
        self._sr = _import_speech_recognition("Microphone")

    async def check_and_request(self) -> bool:
        try:
            names = await asyncio.to_thread(self._sr.Microphone.list_microphone_names)
        except Exception:  # noqa: BLE001 - missing PyAudio means no microphone access.
            _logger.warning("microphone_enumeration_failed", exc_info=True)
            return False
        return bool(names)
