"""Offline translation backend powered by ``argostranslate``.

Argos packages are directional: an installed ``en -> zh`` model says nothing about
``zh -> en``. Each ordered pair is therefore provisioned on its own, and a pair
without a usable package is simply never reported as ready.
"""

from __future__ import annotations

import asyncio
import logging

from ce_translator.errors import TranslationFailedError, TranslationNotReadyError

from .interfaces import SessionReadyCallback, Translator, TranslatorSession


def _argos_code(locale: str) -> str:
    return locale.replace("_", "-").split("-", 1)[0].lower()


class ArgosTranslationSession(TranslatorSession):
    """Wraps one loaded Argos translation for an ordered locale pair."""

    def __init__(self, translation, source_locale: str, target_locale: str) -> None:
        self._translation = translation
        self.source_locale = source_locale
        self.target_locale = target_locale

    async def translate(self, text: str) -> str:
        try:
            return await asyncio.to_thread(self._translation.translate, text)
        except Exception as exc:  # noqa: BLE001 - surface every model failure uniformly.
            raise TranslationFailedError(str(exc) or type(exc).__name__) from exc


class ArgosTranslator(Translator):
    """Loads Argos translations in a worker thread and reports them when ready."""

    def __init__(self, *, auto_install: bool = False, logger: logging.Logger | None = None) -> None:
        try:
            import argostranslate.package
            import argostranslate.translate
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Translation backend unavailable. Install extras with: pip install 'ce-translator[translate]'"
            ) from exc
        self._package = argostranslate.package
        self._translate = argostranslate.translate
        self._auto_install = auto_install
        self._logger = logger or logging.getLogger("ce_translator.translation.argos")
        self._tasks: set[asyncio.Task[None]] = set()

    def request_session(self, source_locale: str, target_locale: str, on_ready: SessionReadyCallback) -> None:
        task = asyncio.get_running_loop().create_task(
            self._provision(source_locale, target_locale, on_ready),
            name=f"argos-provision-{source_locale}-{target_locale}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _provision(self, source_locale: str, target_locale: str, on_ready: SessionReadyCallback) -> None:
        pair = {"source_locale": source_locale, "target_locale": target_locale}
        try:
            translation = await asyncio.to_thread(self._load, source_locale, target_locale)
        except TranslationNotReadyError as exc:
            self._logger.warning("translation_session_unavailable", extra={**pair, "reason": str(exc)})
            return
        except Exception:  # noqa: BLE001 - package index or model loading failed.
            self._logger.exception("translation_session_provision_failed", extra=pair)
            return

        self._logger.info("translation_session_ready", extra=pair)
        on_ready(ArgosTranslationSession(translation, source_locale, target_locale))

    def _load(self, source_locale: str, target_locale: str):
        from_code, to_code = _argos_code(source_locale), _argos_code(target_locale)
        translation = self._find_installed(from_code, to_code)
        if translation is None and self._auto_install:
            self._install(from_code, to_code)
            translation = self._find_installed(from_code, to_code)
        if translation is None:
            raise TranslationNotReadyError(f"No Argos package installed for {from_code} -> {to_code}")
        return translation

    def _find_installed(self, from_code: str, to_code: str):
        languages = {language.code: language for language in self._translate.get_installed_languages()}
        source = languages.get(from_code)
        target = languages.get(to_code)
        if source is None or target is None:
            return None
        return source.get_translation(target)

    def _install(self, from_code: str, to_code: str) -> None:
        self._package.update_package_index()
        for package in self._package.get_available_packages():
            if (package.from_code, package.to_code) == (from_code, to_code):
                self._logger.info("argos_package_download", extra={"from_code": from_code, "to_code": to_code})
                self._package.install_from_path(package.download())
                return
