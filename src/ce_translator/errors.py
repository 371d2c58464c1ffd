"""Failure taxonomy shared by the session controller and backend adapters."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories carried by every ``TranslatorError``.

    Only capture-side kinds and ``UNSUPPORTED_PAIR`` are ever published on
    ``SessionState.error_kind``. ``TRANSLATION_NOT_READY``,
    ``TRANSLATION_FAILURE`` and ``SYNTHESIS_FAILURE`` label backend exceptions
    only: a missing session is logged, a failed translation is shown inline in
    ``translated_text`` and a synthesis failure is logged.
    """

    PERMISSION_DENIED = "permission_denied"
    RECOGNIZER_UNAVAILABLE = "recognizer_unavailable"
    AUDIO_ENGINE_FAILURE = "audio_engine_failure"
    NO_SPEECH_DETECTED = "no_speech_detected"
    RECOGNITION_ERROR = "recognition_error"
    TRANSLATION_NOT_READY = "translation_not_ready"
    TRANSLATION_FAILURE = "translation_failure"
    SYNTHESIS_FAILURE = "synthesis_failure"
    UNSUPPORTED_PAIR = "unsupported_pair"


class TranslatorError(RuntimeError):
    """Base class for failures raised inside the translation pipeline."""

    kind: ErrorKind = ErrorKind.RECOGNITION_ERROR


class PermissionDeniedError(TranslatorError):
    """Microphone or speech-recognition permission is unavailable."""

    kind = ErrorKind.PERMISSION_DENIED


class RecognizerUnavailableError(TranslatorError):
    """No working recognizer exists for the requested language."""

    kind = ErrorKind.RECOGNIZER_UNAVAILABLE


class AudioEngineError(TranslatorError):
    """The input device could not be opened or configured."""

    kind = ErrorKind.AUDIO_ENGINE_FAILURE


class NoSpeechDetectedError(TranslatorError):
    """The recognizer finished without hearing any speech."""

    kind = ErrorKind.NO_SPEECH_DETECTED


class RecognitionError(TranslatorError):
    """Generic recognizer failure in the middle of a stream."""

    kind = ErrorKind.RECOGNITION_ERROR


class TranslationNotReadyError(TranslatorError):
    """No translation session has been provisioned for the locale pair yet."""

    kind = ErrorKind.TRANSLATION_NOT_READY


class TranslationFailedError(TranslatorError):
    """A provisioned translation session failed to translate."""

    kind = ErrorKind.TRANSLATION_FAILURE


class SynthesisError(TranslatorError):
    """Speech playback could not start."""

    kind = ErrorKind.SYNTHESIS_FAILURE


class UnsupportedLanguagePairError(TranslatorError, ValueError):
    """Source and target locales are identical."""

    kind = ErrorKind.UNSUPPORTED_PAIR
