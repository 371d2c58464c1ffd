import io

from rich.console import Console

from ce_translator.cli import ConsoleSessionRenderer
from ce_translator.languages import Direction, LanguagePair
from ce_translator.session import SessionPhase, TranslationSessionController
from ce_translator.voice.output import SpeechOutputService


class _Null:
    is_speaking = False

    async def check_and_request(self) -> bool:
        return True

    def is_available(self, language: str) -> bool:
        return True

    def request_session(self, source_locale, target_locale, on_ready) -> None:
        return None

    def start(self, on_chunk) -> None:
        return None

    def stop(self) -> None:
        return None

    def speak(self, text: str, language: str) -> None:
        return None


def _controller() -> TranslationSessionController:
    null = _Null()
    return TranslationSessionController(
        LanguagePair("en", "zh-Hans"),
        capture_source=null,
        recognizer=null,
        translator=null,
        speech_output=SpeechOutputService(null),
        permission_gate=null,
    )


def test_renderer_prints_published_updates() -> None:
    buffer = io.StringIO()
    controller = _controller()
    renderer = ConsoleSessionRenderer(controller, console=Console(file=buffer, width=120))
    renderer.attach()

    controller.state.active_direction = Direction.SOURCE_TO_TARGET
    controller.state.phase = SessionPhase.CAPTURING
    controller.state.recognized_text = "Hello [friend]"
    controller.state.translated_text = "你好"
    controller.state.error_message = "Recognition error: offline"
    renderer.detach()
    controller.state.recognized_text = "not rendered"

    output = buffer.getvalue()
    assert "Listening English → 中文" in output
    assert "Heard: Hello [friend]" in output
    assert "Translation: 你好" in output
    assert "Error: Recognition error: offline" in output
    assert "not rendered" not in output


def test_renderer_placeholders_follow_direction() -> None:
    renderer = ConsoleSessionRenderer(_controller(), console=Console(file=io.StringIO()))

    recognition, translation = renderer.placeholders(Direction.TARGET_TO_SOURCE)

    assert recognition == "按住中文按钮... (Tap & Hold 中文 button...)"
    assert translation == "Translation will appear here"
    assert renderer.title(Direction.TARGET_TO_SOURCE) == "中文 → English"
