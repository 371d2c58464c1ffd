"""CLI startup entrypoint for CE Translator."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator

import typer
from rich import print
from rich.console import Console

from ce_translator.cli import ConsoleSessionRenderer
from ce_translator.config import settings
from ce_translator.errors import UnsupportedLanguagePairError
from ce_translator.languages import Direction, LanguagePair, SupportedLanguage, default_pairs
from ce_translator.session import SessionTimings, TranslationSessionController
from ce_translator.telemetry.logging import configure_logging
from ce_translator.voice.interfaces import AudioChunkCallback, TranscriptUpdate
from ce_translator.voice.output import SpeechOutputConfig, SpeechOutputService

app = typer.Typer(help="CE Translator speech-to-speech translation")


class _TextOnlyInput:
    """Microphone stand-in for text-only commands: capture is never permitted."""

    async def check_and_request(self) -> bool:
        return False

    def is_available(self, language: str) -> bool:
        return False

    async def recognize(self, language: str, chunks: AsyncIterable[bytes]) -> AsyncIterator[TranscriptUpdate]:
        async for _ in chunks:
            pass
        return
        yield  # pragma: no cover

    def start(self, on_chunk: AudioChunkCallback) -> None:
        return None

    def stop(self) -> None:
        return None


class _SilentSynthesizer:
    """Fallback synthesizer used when speech output is muted."""

    is_speaking = False

    def speak(self, text: str, language: str) -> None:
        return None

    def stop(self) -> None:
        return None

    def close(self) -> None:
        return None


def _resolve_pair(source: str, target: str) -> LanguagePair:
    try:
        pair = LanguagePair.from_languages(SupportedLanguage.from_code(source), SupportedLanguage.from_code(target))
        return pair.validate()
    except (ValueError, UnsupportedLanguagePairError) as exc:
        raise typer.BadParameter(str(exc)) from exc


def _build_synthesizer(muted: bool):
    if muted:
        return _SilentSynthesizer()
    from ce_translator.voice.tts_pyttsx3 import Pyttsx3SpeechSynthesizer

    return Pyttsx3SpeechSynthesizer(rate=settings.speech_rate, volume=settings.speech_volume)


def _build_translator():
    from ce_translator.translation.argos import ArgosTranslator

    return ArgosTranslator(auto_install=settings.argos_auto_install)


def _timings() -> SessionTimings:
    return SessionTimings(
        settle_delay_seconds=settings.settle_delay_seconds,
        recognition_grace_seconds=settings.recognition_grace_seconds,
    )


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "source_language": settings.source_language,
            "target_language": settings.target_language,
            "settle_delay_seconds": settings.settle_delay_seconds,
            "muted": settings.muted,
            "argos_auto_install": settings.argos_auto_install,
        }
    )


@app.command()
def languages() -> None:
    """List supported languages and the default translation pairs."""
    print(
        {
            "languages": [
                {
                    "name": language.display_name,
                    "speech_tag": language.speech_tag,
                    "locale_id": language.locale_id,
                }
                for language in SupportedLanguage
            ],
            "pairs": [f"{pair.source_locale} <-> {pair.target_locale}" for pair in default_pairs()],
        }
    )


@app.command("translate-text")
def translate_text(
    text: str,
    source: str = typer.Option(None, help="Source language (name, speech tag or locale id)"),
    target: str = typer.Option(None, help="Target language (name, speech tag or locale id)"),
    reverse: bool = typer.Option(False, help="Translate from target into source"),
    muted: bool = typer.Option(False, help="Do not speak the translation"),
) -> None:
    """Translate one piece of text and speak the result."""
    configure_logging(settings.log_level)
    pair = _resolve_pair(source or settings.source_language, target or settings.target_language)
    direction = Direction.TARGET_TO_SOURCE if reverse else Direction.SOURCE_TO_TARGET
    muted = muted or settings.muted

    try:
        translator = _build_translator()
        synthesizer = _build_synthesizer(muted)
    except RuntimeError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    text_input = _TextOnlyInput()
    speech_output = SpeechOutputService(synthesizer, SpeechOutputConfig(muted=muted))
    controller = TranslationSessionController(
        pair,
        capture_source=text_input,
        recognizer=text_input,
        translator=translator,
        speech_output=speech_output,
        permission_gate=text_input,
        timings=_timings(),
    )

    async def _run() -> dict:
        controller.open()
        try:
            ready = await controller.wait_for_session(direction, timeout=settings.session_ready_timeout_seconds)
            if not ready:
                return {"error": f"Translation for {pair.label(direction)} is not ready."}
            result = await controller.translate(direction, text)
            while speech_output.is_speaking:
                await asyncio.sleep(0.1)
            return {"input": text, "translation": controller.state.translated_text, "ok": result is not None}
        finally:
            await controller.close()
            await translator.close()
            synthesizer.close()

    outcome = asyncio.run(_run())
    print(outcome)
    if "error" in outcome or not outcome.get("ok"):
        raise typer.Exit(code=1)


@app.command()
def session(
    source: str = typer.Option(None, help="Source language (name, speech tag or locale id)"),
    target: str = typer.Option(None, help="Target language (name, speech tag or locale id)"),
    muted: bool = typer.Option(False, help="Start with speech output muted"),
) -> None:
    """Run an interactive push-to-talk translation session."""
    configure_logging(settings.log_level)
    pair = _resolve_pair(source or settings.source_language, target or settings.target_language)
    muted = muted or settings.muted

    try:
        from ce_translator.voice.stt_speechrecognition import (
            MicrophonePermissionGate,
            SpeechRecognitionCaptureSource,
            SpeechRecognitionRecognizer,
        )

        capture_source = SpeechRecognitionCaptureSource(max_capture_seconds=settings.max_capture_seconds)
        recognizer = SpeechRecognitionRecognizer(partial_interval_seconds=settings.partial_interval_seconds)
        permission_gate = MicrophonePermissionGate()
        translator = _build_translator()
        synthesizer = _build_synthesizer(False)
    except RuntimeError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    console = Console()
    controller = TranslationSessionController(
        pair,
        capture_source=capture_source,
        recognizer=recognizer,
        translator=translator,
        speech_output=SpeechOutputService(synthesizer, SpeechOutputConfig(muted=muted)),
        permission_gate=permission_gate,
        timings=_timings(),
    )
    renderer = ConsoleSessionRenderer(controller, console=console)
    directions = {"a": Direction.SOURCE_TO_TARGET, "b": Direction.TARGET_TO_SOURCE}

    async def _run() -> None:
        controller.open()
        renderer.attach()
        renderer.show_placeholders(Direction.SOURCE_TO_TARGET)
        console.print(
            f"[bold]a[/] = {renderer.title(Direction.SOURCE_TO_TARGET)}, "
            f"[bold]b[/] = {renderer.title(Direction.TARGET_TO_SOURCE)}, "
            "[bold]t[/] = translate again, [bold]m[/] = mute, [bold]q[/] = quit"
        )
        last_direction = Direction.SOURCE_TO_TARGET
        try:
            while True:
                command = (await asyncio.to_thread(input, "> ")).strip().lower()
                if command == "q":
                    break
                if command == "m":
                    controller.set_muted(not controller.state.is_muted)
                    continue
                if command == "t":
                    await controller.translate(last_direction)
                    continue

                direction = directions.get(command or "a")
                if direction is None:
                    console.print(f"Unknown command: {command!r}")
                    continue
                if not await controller.begin_capture(direction):
                    continue
                last_direction = direction
                await asyncio.to_thread(input, "Speak now, press Enter when done ")
                controller.end_capture()
                await controller.wait_until_idle()
        finally:
            renderer.detach()
            await controller.close()
            await translator.close()
            synthesizer.close()

    try:
        asyncio.run(_run())
    except (KeyboardInterrupt, EOFError):
        print({"session": "stopped"})


if __name__ == "__main__":
    app()
