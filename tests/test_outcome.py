from __future__ import annotations

from safexpr.outcome import (
    Failure,
    FailureKind,
    Success,
    malformed,
    missing_operand,
    not_a_number,
    not_callable,
    trailing_input,
    unbalanced_parens,
    undefined_math_member,
    undefined_variable,
)


def test_failure_kinds_are_closed_and_ordered() -> None:
    assert [k.value for k in FailureKind] == [
        "MalformedInput",
        "UnbalancedParens",
        "UndefinedVariable",
        "UndefinedMathMember",
        "NotCallable",
        "NotANumber",
        "MissingOperand",
        "TrailingInput",
    ]


def test_messages() -> None:
    assert malformed().message == "malformed"
    assert malformed("01", 0).message == "malformed 01"
    assert unbalanced_parens().message == "unbalanced parentheses"
    assert undefined_variable("y").message == "y is not defined"
    assert undefined_math_member("foo").message == "Math.foo not defined"
    assert not_callable("PI").message == "Math.PI not callable"
    assert not_callable("sqrt", called=False).message == "Math.sqrt must be called"
    assert not_a_number("a").message == "a is not a number"
    assert missing_operand("*").message == "missing operand: *"
    assert trailing_input(". y").message == "unparsed: . y"


def test_details_name_the_culprit() -> None:
    assert malformed().detail is None
    assert undefined_variable("y", 4).detail == "y"
    assert undefined_variable("y", 4).offset == 4
    assert missing_operand("*").detail == "*"
    assert trailing_input("2 3").detail == "2 3"


def test_success_and_failure_are_distinguishable() -> None:
    ok = Success(1.0)
    bad = malformed()
    assert ok.ok is True
    assert bad.ok is False
    assert isinstance(bad, Failure)
    assert ok == Success(1.0)
