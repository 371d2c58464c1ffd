"""Machine translation contracts and backends."""

from .interfaces import SessionReadyCallback, Translator, TranslatorSession

__all__ = [
    "SessionReadyCallback",
    "Translator",
    "TranslatorSession",
]
