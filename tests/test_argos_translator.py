from __future__ import annotations

import asyncio
import sys
import types

import pytest

from ce_translator.errors import TranslationFailedError


class _FakeTranslation:
    def __init__(self, table: dict[str, str]) -> None:
        self.table = table

    def translate(self, text: str) -> str:
        if text not in self.table:
            raise KeyError(text)
        return self.table[text]


class _FakeLanguage:
    def __init__(self, code: str) -> None:
        self.code = code
        self.translations: dict[str, _FakeTranslation] = {}

    def get_translation(self, target: _FakeLanguage) -> _FakeTranslation | None:
        return self.translations.get(target.code)


class _FakePackage:
    def __init__(self, from_code: str, to_code: str) -> None:
        self.from_code = from_code
        self.to_code = to_code

    def download(self) -> str:
        return f"/tmp/{self.from_code}_{self.to_code}.argosmodel"


def _install_fake_argos(monkeypatch, available: list[tuple[str, str]] | None = None):
    english, chinese = _FakeLanguage("en"), _FakeLanguage("zh")
    english.translations["zh"] = _FakeTranslation({"Hello": "你好"})
    installed = [english, chinese]
    downloads: list[str] = []

    translate_module = types.ModuleType("argostranslate.translate")
    translate_module.get_installed_languages = lambda: list(installed)

    def _install_zh_en() -> None:
        chinese.translations["en"] = _FakeTranslation({"你好": "Hello"})

    package_module = types.ModuleType("argostranslate.package")
    package_module.update_package_index = lambda: None
    package_module.get_available_packages = lambda: [
        _FakePackage(from_code, to_code) for from_code, to_code in (available or [])
    ]

    def _install_from_path(path: str) -> None:
        downloads.append(path)
        _install_zh_en()

    package_module.install_from_path = _install_from_path

    root = types.ModuleType("argostranslate")
    root.translate = translate_module
    root.package = package_module
    monkeypatch.setitem(sys.modules, "argostranslate", root)
    monkeypatch.setitem(sys.modules, "argostranslate.translate", translate_module)
    monkeypatch.setitem(sys.modules, "argostranslate.package", package_module)
    return downloads


async def _provision(translator, source: str, target: str):
    ready: list = []
    translator.request_session(source, target, ready.append)
    while translator._tasks:
        await asyncio.sleep(0.01)
    return ready


def test_installed_pair_is_provisioned_and_translates(monkeypatch) -> None:
    _install_fake_argos(monkeypatch)
    from ce_translator.translation.argos import ArgosTranslator

    async def _run():
        translator = ArgosTranslator()
        ready = await _provision(translator, "en", "zh-Hans")
        return [await session.translate("Hello") for session in ready]

    assert asyncio.run(_run()) == ["你好"]


def test_reverse_pair_is_never_reported_without_its_own_package(monkeypatch) -> None:
    _install_fake_argos(monkeypatch)
    from ce_translator.translation.argos import ArgosTranslator

    async def _run():
        return await _provision(ArgosTranslator(), "zh-Hans", "en")

    assert asyncio.run(_run()) == []


def test_missing_pair_is_installed_when_allowed(monkeypatch) -> None:
    downloads = _install_fake_argos(monkeypatch, available=[("zh", "en")])
    from ce_translator.translation.argos import ArgosTranslator

    async def _run():
        ready = await _provision(ArgosTranslator(auto_install=True), "zh-Hans", "en")
        return [await session.translate("你好") for session in ready]

    assert asyncio.run(_run()) == ["Hello"]
    assert downloads == ["/tmp/zh_en.argosmodel"]


def test_model_failure_becomes_translation_failure(monkeypatch) -> None:
    _install_fake_argos(monkeypatch)
    from ce_translator.translation.argos import ArgosTranslator

    async def _run():
        ready = await _provision(ArgosTranslator(), "en", "zh")
        await ready[0].translate("Unknown phrase")

    with pytest.raises(TranslationFailedError):
        asyncio.run(_run())
