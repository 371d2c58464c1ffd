"""Console rendering adapter for a translation session."""

from __future__ import annotations

from collections.abc import Callable

from rich.console import Console
from rich.markup import escape

from ce_translator.languages import (
    Direction,
    SupportedLanguage,
    find_language,
    recognition_placeholder,
    translation_placeholder,
)
from ce_translator.session import SessionPhase, TranslationSessionController


def _display_name(locale: str) -> str:
    language = find_language(locale)
    return language.display_name if language else locale


class ConsoleSessionRenderer:
    """Prints controller state changes as they are published."""

    def __init__(self, controller: TranslationSessionController, console: Console | None = None) -> None:
        self._controller = controller
        self._console = console or Console()
        self._unsubscribers: list[Callable[[], None]] = []

    def attach(self) -> None:
        state = self._controller.state
        handlers = {
            "phase": self._on_phase,
            "recognized_text": self._on_recognized_text,
            "translated_text": self._on_translated_text,
            "is_translating": self._on_translating,
            "is_muted": self._on_muted,
            "error_message": self._on_error,
        }
        for field_name, handler in handlers.items():
            self._unsubscribers.append(state.subscribe(field_name, handler))

    def detach(self) -> None:
        while self._unsubscribers:
            self._unsubscribers.pop()()

    def title(self, direction: Direction) -> str:
        input_locale, output_locale = self._controller.pair.locales_for(direction)
        return f"{_display_name(input_locale)} → {_display_name(output_locale)}"

    def placeholders(self, direction: Direction) -> tuple[str, str]:
        """Prompts for the transcript and translation boxes before anything arrives."""
        input_locale, _ = self._controller.pair.locales_for(direction)
        active = find_language(input_locale) or SupportedLanguage.ENGLISH
        source = find_language(self._controller.pair.source_locale) or SupportedLanguage.ENGLISH
        return recognition_placeholder(active), translation_placeholder(source)

    def show_placeholders(self, direction: Direction) -> None:
        recognition, translation = self.placeholders(direction)
        self._console.print(f"[bold]{escape(self.title(direction))}[/]")
        self._console.print(f"[dim]{escape(recognition)}[/]")
        self._console.print(f"[dim]{escape(translation)}[/]")

    def _on_phase(self, phase: SessionPhase) -> None:
        if phase is SessionPhase.CAPTURING:
            direction = self._controller.state.active_direction
            label = self.title(direction) if direction else ""
            self._console.print(f"[bold red]● Listening[/] {escape(label)}")
        elif phase is SessionPhase.SETTLING:
            self._console.print("[dim]Finishing transcript...[/]")

    def _on_recognized_text(self, text: str) -> None:
        if text:
            self._console.print(f"[cyan]Heard:[/] {escape(text)}")

    def _on_translated_text(self, text: str) -> None:
        if text:
            self._console.print(f"[bold green]Translation:[/] {escape(text)}")

    def _on_translating(self, translating: bool) -> None:
        if translating:
            self._console.print("[dim]Translating...[/]")

    def _on_muted(self, muted: bool) -> None:
        self._console.print("[yellow]Speech muted[/]" if muted else "[yellow]Speech on[/]")

    def _on_error(self, message: str | None) -> None:
        if message:
            self._console.print(f"[bold red]Error:[/] {escape(message)}")
