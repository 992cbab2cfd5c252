from __future__ import annotations

import importlib

import pytest


def test_console_entrypoint_exposes_app() -> None:
    pytest.importorskip("typer")

    module = importlib.import_module("aspire_voice.main")

    assert hasattr(module, "app")
    assert module.app is not None


def test_help_lists_companion_commands() -> None:
    testing = pytest.importorskip("typer.testing")
    module = importlib.import_module("aspire_voice.main")

    result = testing.CliRunner().invoke(module.app, ["--help"])

    assert result.exit_code == 0
    for command in ("chat", "say", "voice-chat", "avatar-create", "serve"):
        assert command in result.stdout
