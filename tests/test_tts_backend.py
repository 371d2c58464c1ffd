from __future__ import annotations

import sys
import threading
import time
import types
from types import SimpleNamespace

import pytest

from ce_translator.errors import SynthesisError


class _FakeEngine:
    def __init__(self, voices: list) -> None:
        self.voices = voices
        self.properties: dict[str, object] = {}
        self.said: list[tuple[str, object]] = []
        self.stops = 0
        self.playing = threading.Event()
        self._interrupted = threading.Event()

    def setProperty(self, name: str, value) -> None:
        self.properties[name] = value

    def getProperty(self, name: str):
        if name == "voices":
            return self.voices
        return self.properties.get(name)

    def say(self, text: str) -> None:
        self.said.append((text, self.properties.get("voice")))

    def runAndWait(self) -> None:
        self.playing.set()
        self._interrupted.wait(timeout=2)
        self._interrupted.clear()
        self.playing.clear()

    def stop(self) -> None:
        self.stops += 1
        self._interrupted.set()


_VOICES = [
    SimpleNamespace(id="english", languages=[b"\x05en-us"]),
    SimpleNamespace(id="mandarin", languages=["zh_CN"]),
    SimpleNamespace(id="canadian-french", languages=["fr-ca"]),
]


def _install_fake_pyttsx3(monkeypatch, engine: _FakeEngine | None = None, error: Exception | None = None):
    module = types.ModuleType("pyttsx3")

    def _init():
        if error is not None:
            raise error
        return engine

    module.init = _init
    monkeypatch.setitem(sys.modules, "pyttsx3", module)


def _wait_for(predicate, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition was never reached")
        time.sleep(0.005)


def test_stop_interrupts_current_utterance_and_drops_queued_ones(monkeypatch) -> None:
    engine = _FakeEngine(_VOICES)
    _install_fake_pyttsx3(monkeypatch, engine)
    from ce_translator.voice.tts_pyttsx3 import Pyttsx3SpeechSynthesizer

    synthesizer = Pyttsx3SpeechSynthesizer()
    synthesizer.speak("first", "en")
    _wait_for(engine.playing.is_set)
    synthesizer.speak("second", "en")
    speaking_with_queue = synthesizer.is_speaking

    synthesizer.stop()
    _wait_for(lambda: not synthesizer.is_speaking)
    synthesizer.close()

    assert speaking_with_queue is True
    assert engine.said == [("first", "english")]
    assert engine.stops == 1


def test_stop_when_silent_leaves_engine_alone(monkeypatch) -> None:
    engine = _FakeEngine(_VOICES)
    _install_fake_pyttsx3(monkeypatch, engine)
    from ce_translator.voice.tts_pyttsx3 import Pyttsx3SpeechSynthesizer

    synthesizer = Pyttsx3SpeechSynthesizer()
    synthesizer.speak("   ", "en")
    synthesizer.stop()
    synthesizer.close()

    assert synthesizer.is_speaking is False
    assert engine.stops == 0
    assert engine.said == []


def test_translation_locale_selects_matching_regional_voice(monkeypatch) -> None:
    engine = _FakeEngine(_VOICES)
    _install_fake_pyttsx3(monkeypatch, engine)
    from ce_translator.voice.tts_pyttsx3 import Pyttsx3SpeechSynthesizer

    synthesizer = Pyttsx3SpeechSynthesizer()
    synthesizer.speak("你好", "zh-Hans")
    _wait_for(engine.playing.is_set)
    synthesizer.stop()
    synthesizer.close()

    assert engine.said == [("你好", "mandarin")]


@pytest.mark.parametrize(
    ("tag", "expected"),
    [("zh-CN", "mandarin"), ("en-US", "english"), ("fr-FR", "canadian-french"), ("ko-KR", None)],
)
def test_voice_falls_back_to_primary_language(monkeypatch, tag, expected) -> None:
    _install_fake_pyttsx3(monkeypatch, _FakeEngine(_VOICES))
    from ce_translator.voice.tts_pyttsx3 import Pyttsx3SpeechSynthesizer

    synthesizer = Pyttsx3SpeechSynthesizer()
    try:
        assert synthesizer._voice_for(tag) == expected
    finally:
        synthesizer.close()


def test_rate_and_volume_are_applied_with_volume_clamped(monkeypatch) -> None:
    engine = _FakeEngine([])
    _install_fake_pyttsx3(monkeypatch, engine)
    from ce_translator.voice.tts_pyttsx3 import Pyttsx3SpeechSynthesizer

    Pyttsx3SpeechSynthesizer(rate=150, volume=1.5).close()

    assert engine.properties == {"rate": 150, "volume": 1.0}


def test_engine_start_failure_is_a_synthesis_error(monkeypatch) -> None:
    _install_fake_pyttsx3(monkeypatch, error=OSError("no audio driver"))
    from ce_translator.voice.tts_pyttsx3 import Pyttsx3SpeechSynthesizer

    with pytest.raises(SynthesisError, match="no audio driver"):
        Pyttsx3SpeechSynthesizer()
