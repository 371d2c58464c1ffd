"""Language catalog, translation directions and locale pairs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import UnsupportedLanguagePairError


@dataclass(frozen=True, slots=True)
class LanguageInfo:
    """Display and locale metadata for one supported language."""

    display_name: str
    speech_tag: str
    locale_id: str
    tap_and_hold_format: str
    translation_placeholder: str


class SupportedLanguage(str, Enum):
    """Languages the app ships recognizer, translator and voice mappings for."""

    ENGLISH = "english"
    CHINESE = "chinese"
    FRENCH = "french"
    ITALIAN = "italian"
    JAPANESE = "japanese"
    KOREAN = "korean"
    PORTUGUESE = "portuguese"
    SPANISH = "spanish"

    @property
    def info(self) -> LanguageInfo:
        return _CATALOG[self]

    @property
    def display_name(self) -> str:
        return self.info.display_name

    @property
    def speech_tag(self) -> str:
        """BCP-47 tag used for recognition and synthesis."""
        return self.info.speech_tag

    @property
    def locale_id(self) -> str:
        """Identifier used to provision translation sessions."""
        return self.info.locale_id

    @classmethod
    def from_code(cls, code: str) -> SupportedLanguage:
        """Resolve a language from its name, speech tag or locale identifier."""
        language = find_language(code)
        if language is None:
            raise ValueError(f"Unsupported language: {code!r}")
        return language


_CATALOG: dict[SupportedLanguage, LanguageInfo] = {
    SupportedLanguage.ENGLISH: LanguageInfo(
        "English", "en-US", "en", "Tap & Hold {name} button...", "Translation will appear here"
    ),
    SupportedLanguage.CHINESE: LanguageInfo("中文", "zh-CN", "zh-Hans", "按住{name}按钮...", "翻译将显示在这里"),
    SupportedLanguage.FRENCH: LanguageInfo(
        "Français", "fr-FR", "fr", "Maintenez le bouton {name}...", "La traduction apparaîtra ici"
    ),
    SupportedLanguage.ITALIAN: LanguageInfo(
        "Italiano", "it-IT", "it", "Tieni premuto il pulsante {name}...", "La traduzione apparirà qui"
    ),
    SupportedLanguage.JAPANESE: LanguageInfo(
        "日本語", "ja-JP", "ja", "{name}ボタンを長押し...", "翻訳がここに表示されます"
    ),
    SupportedLanguage.KOREAN: LanguageInfo("한국어", "ko-KR", "ko", "{name} 버튼을 길게 누르세요...", "번역이 여기에 표시됩니다"),
    SupportedLanguage.PORTUGUESE: LanguageInfo(
        "Português", "pt-BR", "pt", "Toque e segure o botão {name}...", "A tradução aparecerá aqui"
    ),
    SupportedLanguage.SPANISH: LanguageInfo(
        "Español", "es-ES", "es", "Mantén pulsado el botón {name}...", "La traducción aparecerá aquí"
    ),
}


def _primary_subtag(code: str) -> str:
    return code.replace("_", "-").split("-", 1)[0].lower()


def find_language(code: str) -> SupportedLanguage | None:
    """Return the catalog entry matching ``code``, or ``None``."""
    normalized = code.strip().replace("_", "-").lower()
    if not normalized:
        return None

    for language in SupportedLanguage:
        info = language.info
        if normalized in {language.value, info.speech_tag.lower(), info.locale_id.lower()}:
            return language

    primary = _primary_subtag(normalized)
    for language in SupportedLanguage:
        if _primary_subtag(language.locale_id) == primary:
            return language
    return None


def speech_tag_for(locale: str) -> str:
    """Map a translation locale (``zh-Hans``) to its speech tag (``zh-CN``)."""
    language = find_language(locale)
    return language.speech_tag if language else locale


def recognition_placeholder(active: SupportedLanguage) -> str:
    """Prompt shown in the transcript box before anything was recognized."""
    localized = active.info.tap_and_hold_format.format(name=active.display_name)
    if active is SupportedLanguage.ENGLISH:
        return localized
    fallback = SupportedLanguage.ENGLISH.info.tap_and_hold_format.format(name=active.display_name)
    return f"{localized} ({fallback})"


def translation_placeholder(source: SupportedLanguage) -> str:
    """Prompt shown in the translation box before a translation arrives."""
    if source is SupportedLanguage.ENGLISH:
        return source.info.translation_placeholder
    english = SupportedLanguage.ENGLISH.info.translation_placeholder
    return f"{source.info.translation_placeholder} ({english})"


class Direction(str, Enum):
    """Which configured locale is spoken (input) and which is produced (output)."""

    SOURCE_TO_TARGET = "source_to_target"
    TARGET_TO_SOURCE = "target_to_source"

    @property
    def opposite(self) -> Direction:
        if self is Direction.SOURCE_TO_TARGET:
            return Direction.TARGET_TO_SOURCE
        return Direction.SOURCE_TO_TARGET


@dataclass(frozen=True, slots=True)
class LanguagePair:
    """Two locale identifiers a translation view is scoped to."""

    source_locale: str
    target_locale: str

    @classmethod
    def from_languages(cls, source: SupportedLanguage, target: SupportedLanguage) -> LanguagePair:
        return cls(source_locale=source.locale_id, target_locale=target.locale_id)

    @property
    def is_supported(self) -> bool:
        return self.source_locale.strip().lower() != self.target_locale.strip().lower()

    def validate(self) -> LanguagePair:
        """Return ``self`` or raise when both locales are the same."""
        if not self.is_supported:
            raise UnsupportedLanguagePairError(
                f"Source and target languages must differ (got {self.source_locale!r} twice)."
            )
        return self

    def locales_for(self, direction: Direction) -> tuple[str, str]:
        """Ordered ``(input_locale, output_locale)`` for ``direction``."""
        if direction is Direction.SOURCE_TO_TARGET:
            return self.source_locale, self.target_locale
        return self.target_locale, self.source_locale

    def label(self, direction: Direction) -> str:
        input_locale, output_locale = self.locales_for(direction)
        return f"{input_locale} → {output_locale}"


def default_pairs() -> list[LanguagePair]:
    """Chinese paired with every other catalog language, English first."""
    others = [language for language in SupportedLanguage if language is not SupportedLanguage.CHINESE]
    return [LanguagePair.from_languages(SupportedLanguage.CHINESE, language) for language in others]
