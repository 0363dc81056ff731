from __future__ import annotations

import pytest

from safexpr.errors import EvaluationFailure
from safexpr.grammar import DEFAULT_MAX_DEPTH, is_math_access, unparsed_suffix, validate
from safexpr.outcome import Failure, FailureKind
from safexpr.tokens import tokenize


def _fail(text: str, **kwargs) -> Failure:
    with pytest.raises(EvaluationFailure) as info:
        validate(tokenize(text), **kwargs)
    return info.value.failure


@pytest.mark.parametrize(
    "text",
    [
        "1",
        "x",
        "-1",
        "+x",
        "1 + 2 * 3",
        "(1 + 2) * 3",
        "1 + +2",
        "2 * -3",
        "Math.PI",
        "Math.PI / 2",
        "Math.sqrt(2)",
        "Math.pow(2, n)",
        " Math . pow ( 2 , n ) ",
        "Math.max()",
        "Math.max(1, 2, Math.min(3, 4))",
        "Math",
        "-(5 + 2)",
    ],
)
def test_well_formed_expressions_validate(text: str) -> None:
    toks = validate(tokenize(text))
    assert isinstance(toks, tuple)
    assert toks == tuple(tokenize(text))


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_input_is_malformed(text: str) -> None:
    failure = _fail(text)
    assert failure.kind is FailureKind.MALFORMED_INPUT
    assert failure.detail is None


@pytest.mark.parametrize(
    "text, operator",
    [("2 *", "*"), ("1 +", "+"), ("-", "-"), ("3 %", "%"), ("1 + -", "-")],
)
def test_dangling_operator_is_missing_operand(text: str, operator: str) -> None:
    failure = _fail(text)
    assert failure.kind is FailureKind.MISSING_OPERAND
    assert failure.detail == operator


@pytest.mark.parametrize(
    "text, lexeme",
    [
        ("2**2", "*"),
        ("* 2", "*"),
        ("2//2", "/"),
        ("2/*2", "*"),
        ("2*/2", "/"),
        ("- -2", "-"),
        (".", "."),
        (".e123", "."),
        ("()", ")"),
        ("Math.", "."),
        ("Math.(1)", "("),
        ("Math.max(1,)", ")"),
        ("Math.pow( / 2", "/"),
    ],
)
def test_bad_atom_is_malformed(text: str, lexeme: str) -> None:
    failure = _fail(text)
    assert failure.kind is FailureKind.MALFORMED_INPUT
    assert failure.detail == lexeme


@pytest.mark.parametrize(
    "text",
    [
        "Math.pow(2,",
        "Math.pow(2",
        "Math.pow(2, n",
        "(1",
        "(2 *",
        "((1)",
        "1)",
        "1)(",
        "(1))",
        "(1 2)",
        "(1, 2)",
        "Math.sqrt(1 2)",
    ],
)
def test_unbalanced_parens(text: str) -> None:
    assert _fail(text).kind is FailureKind.UNBALANCED_PARENS


def test_closing_paren_reports_its_offset() -> None:
    assert _fail("1)").offset == 1


@pytest.mark.parametrize(
    "text, suffix",
    [
        ("1 2", "2"),
        ("1e", "e"),
        ("1x", "x"),
        ("x.y", ". y"),
        ("1,2", ", 2"),
        ("0..", "."),
        ("(1) 2 3", "2 3"),
        ("Math.sqrt(4).x", ". x"),
    ],
)
def test_trailing_tokens(text: str, suffix: str) -> None:
    failure = _fail(text)
    assert failure.kind is FailureKind.TRAILING_INPUT
    assert failure.detail == suffix


def test_long_suffix_is_truncated() -> None:
    failure = _fail("1 " + "2 " * 100)
    assert failure.kind is FailureKind.TRAILING_INPUT
    assert failure.detail is not None
    assert len(failure.detail) == 80
    assert failure.detail.endswith("...")


def test_nesting_up_to_the_bound_is_accepted() -> None:
    depth = DEFAULT_MAX_DEPTH
    validate(tokenize("(" * depth + "1" + ")" * depth))


def test_nesting_past_the_bound_is_malformed() -> None:
    depth = DEFAULT_MAX_DEPTH + 1
    failure = _fail("(" * depth + "1" + ")" * depth)
    assert failure.kind is FailureKind.MALFORMED_INPUT
    assert failure.detail == "("
    assert failure.offset == DEFAULT_MAX_DEPTH


def test_call_parens_count_toward_depth() -> None:
    validate(tokenize("Math.abs((1))"), max_depth=2)
    assert _fail("Math.abs(((1)))", max_depth=2).kind is FailureKind.MALFORMED_INPUT


def test_hostile_nesting_does_not_recurse() -> None:
    failure = _fail("(" * 100_000)
    assert failure.kind is FailureKind.MALFORMED_INPUT


def test_is_math_access() -> None:
    toks = tuple(tokenize("Math.PI + Math"))
    assert is_math_access(toks, 0) is True
    assert is_math_access(toks, 4) is False
    assert is_math_access(toks, 2) is False


def test_unparsed_suffix_joins_lexemes() -> None:
    toks = tuple(tokenize("1 ++ 2"))
    assert unparsed_suffix(toks, 1) == "+ + 2"
