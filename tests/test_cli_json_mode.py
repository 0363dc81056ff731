"""Tests for CLI --json flag."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import safexpr.cli


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


def _json_out(capsys: pytest.CaptureFixture[str]) -> dict:
    return json.loads(capsys.readouterr().out)


def test_parse_expr_json_flag() -> None:
    ns = safexpr.cli.parse_args(["expr", "1", "--json"])
    assert ns.json_output is True


def test_parse_expr_no_json_default() -> None:
    ns = safexpr.cli.parse_args(["expr", "1"])
    assert ns.json_output is False


def test_is_json_mode_helper() -> None:
    assert safexpr.cli._is_json_mode(safexpr.cli.parse_args(["check", "f", "--json"])) is True
    assert safexpr.cli._is_json_mode(safexpr.cli.parse_args(["check", "f"])) is False


def test_expr_success(capsys: pytest.CaptureFixture[str]) -> None:
    assert safexpr.cli.main(["expr", "a + b", "--var", "a=6", "--var", "b=11", "--json"]) == 0
    assert _json_out(capsys) == {"command": "expr", "ok": True, "result": "17", "value": 17.0}


def test_expr_infinity_is_strict_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert safexpr.cli.main(["expr", "1/0", "--json"]) == 0
    assert _json_out(capsys) == {"command": "expr", "ok": True, "result": "Infinity", "value": None}


def test_expr_failure(capsys: pytest.CaptureFixture[str]) -> None:
    assert safexpr.cli.main(["expr", "2 *", "--json"]) == 1
    payload = _json_out(capsys)
    assert payload["ok"] is False
    assert payload["error"] == {
        "kind": "MissingOperand",
        "message": "missing operand: *",
        "detail": "*",
        "offset": 2,
    }


def test_input_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert safexpr.cli.main(["eval", str(tmp_path / "nope.txt"), "--json"]) == 2
    payload = _json_out(capsys)
    assert payload["command"] == "eval"
    assert payload["ok"] is False
    assert "not found" in payload["error"]


def test_check(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "e.txt"
    path.write_text("1 2", encoding="utf-8")
    assert safexpr.cli.main(["check", str(path), "--json"]) == 1
    payload = _json_out(capsys)
    assert payload["command"] == "check"
    assert payload["error"]["kind"] == "TrailingInput"


def test_functions(capsys: pytest.CaptureFixture[str]) -> None:
    assert safexpr.cli.main(["functions", "--json"]) == 0
    payload = _json_out(capsys)
    assert "PI" in payload["constants"]
    assert {"name": "pow", "arity": 2} in payload["functions"]
    assert {"name": "min", "arity": None} in payload["functions"]
