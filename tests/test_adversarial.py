from __future__ import annotations

import builtins
import random

import pytest

from safexpr import Failure, FailureKind, Success, evaluate

HOSTILE = [
    "__import__('os').system('ls')",
    "().__class__.__bases__",
    "1; import os",
    "1 # comment",
    "1 // 2",
    "1 /* c */",
    "'a' + 1",
    '"a"',
    "`ls`",
    "$(whoami)",
    "1 && 2",
    "1 | 2",
    "x = 1",
    "lambda: 0",
    "Math.constructor.constructor('return 1')()",
    "1\x00",
    "1\x0b+2",
    "1\x0c",
    "1\u2028+2",
    "\u202e1",
    "x.y",
    "Math.PI.toString",
    "Math.max(1)(2)",
    "-" * 60000 + "1",
    "(" * 60000,
    "Math.abs(" * 1000 + "1" + ")" * 1000,
]


@pytest.fixture
def no_dynamic_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def _forbidden(*args, **kwargs):
        raise AssertionError("dynamic code execution attempted")

    for name in ("eval", "exec", "compile"):
        monkeypatch.setattr(builtins, name, _forbidden)


@pytest.mark.parametrize("source", HOSTILE)
def test_hostile_input_is_an_ordinary_failure(source: str, no_dynamic_code: None) -> None:
    outcome = evaluate(source, {"x": 1})
    assert isinstance(outcome, Failure)
    assert outcome.kind in (FailureKind.MALFORMED_INPUT, FailureKind.TRAILING_INPUT)
    assert "Traceback" not in outcome.message


def test_binding_objects_are_never_called(no_dynamic_code: None) -> None:
    calls: list[str] = []

    class Sneaky:
        def __float__(self) -> float:
            calls.append("float")
            return 1.0

        def __call__(self) -> float:
            calls.append("call")
            return 1.0

    outcome = evaluate("s + 1", {"s": Sneaky()})
    assert isinstance(outcome, Failure)
    assert outcome.kind is FailureKind.NOT_A_NUMBER
    assert calls == []


def test_seeded_fuzz_always_terminates(no_dynamic_code: None) -> None:
    rng = random.Random(20240611)
    alphabet = list("0123456789.eE+-*/%(),xyMathPI_ \t\n;'\"`$#\\\x00") + ["Math.", "sqrt(", ")"]
    for _ in range(2000):
        source = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 40)))
        outcome = evaluate(source, {"x": 3, "y": -2})
        assert isinstance(outcome, (Success, Failure))
        if isinstance(outcome, Failure):
            assert outcome.kind in FailureKind
            assert isinstance(outcome.message, str)
