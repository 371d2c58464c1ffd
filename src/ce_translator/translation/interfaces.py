"""Contracts for machine translation backends."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class TranslatorSession(Protocol):
    """Translates text for one ordered ``(source, target)`` locale pair."""

    async def translate(self, text: str) -> str:
        """Return ``text`` translated into the session's target locale."""


SessionReadyCallback = Callable[[TranslatorSession], None]


class Translator(Protocol):
    """Provisions translation sessions per ordered locale pair."""

    def request_session(self, source_locale: str, target_locale: str, on_ready: SessionReadyCallback) -> None:
        """Start provisioning a session and call ``on_ready`` once it is usable.

        Provisioning may finish later, or never when the pair is unavailable.
        """
