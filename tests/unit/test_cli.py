"""
Tests for the roastlog command line.
"""

from __future__ import annotations

import builtins
import os
from unittest import mock

import pytest

from roastlog import config as config_module
from roastlog.cli import build_parser, main


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.setattr(config_module, "_DOTENV_LOADED", True)
    monkeypatch.chdir(tmp_path)
    with mock.patch.dict(os.environ, {}, clear=True):
        yield


def test_check_local_needs_no_key(capsys):
    assert main(["check", "--local"]) == 0

    out = capsys.readouterr().out
    assert "Effective configuration:" in out
    assert "Local mode" in out


def test_check_reports_missing_key(capsys):
    assert main(["check"]) == 1

    err = capsys.readouterr().err
    assert "ANTHROPIC_API_KEY is required" in err
    assert "Example .env" in err


def test_check_with_key_never_prints_it(capsys):
    with mock.patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-ant-supersecret"}):
        assert main(["check", "--level", "mild"]) == 0

    out = capsys.readouterr().out
    assert "supersecret" not in out
    assert '"humor_level": "mild"' in out
    assert "Environment OK" in out


def test_demo_prints_lines_with_annotations(capsys):
    original = builtins.print

    assert main(["demo", "--local", "--level", "savage", "--timeout", "10"]) == 0

    out = capsys.readouterr().out
    assert "Server started on port 8080" in out
    assert out.count("🔥") >= 5
    assert builtins.print is original


def test_unknown_level_is_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["demo", "--level", "brutal"])


def test_command_is_required():
    with pytest.raises(SystemExit):
        main([])
