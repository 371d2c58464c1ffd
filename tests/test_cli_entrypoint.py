from __future__ import annotations

import importlib
import sys
import types

import pytest


def test_console_entrypoint_exposes_app() -> None:
    pytest.importorskip("typer")

    module = importlib.import_module("ce_translator.main")

    assert hasattr(module, "app")
    assert module.app is not None


def test_languages_command_lists_default_pairs() -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from ce_translator.main import app

    result = typer_testing.CliRunner().invoke(app, ["languages"])

    assert result.exit_code == 0
    assert "zh-Hans <-> en" in result.stdout
    assert "ja-JP" in result.stdout


def test_translate_text_rejects_identical_languages() -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from ce_translator.main import app

    result = typer_testing.CliRunner().invoke(app, ["translate-text", "hello", "--source", "en", "--target", "english"])

    assert result.exit_code != 0


def test_translate_text_reports_actionable_error_when_backend_missing(monkeypatch) -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from ce_translator.main import app

    fake_argos = types.ModuleType("ce_translator.translation.argos")

    class _MissingBackend:
        def __init__(self, *args, **kwargs) -> None:
            raise RuntimeError("Missing. Install with: pip install 'ce-translator[translate]'")

    fake_argos.ArgosTranslator = _MissingBackend
    monkeypatch.setitem(sys.modules, "ce_translator.translation.argos", fake_argos)

    result = typer_testing.CliRunner().invoke(
        app,
        ["translate-text", "hello", "--source", "en", "--target", "zh", "--muted"],
        catch_exceptions=False,
    )

    assert result.exit_code == 1
    assert "pip install 'ce-translator[translate]'" in result.stdout
