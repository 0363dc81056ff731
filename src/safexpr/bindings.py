"""Reading expression sources and decoding variable bindings.

These helpers sit in front of `safexpr.evaluate`: they reject unreadable
files and JSON that is not an object, and leave per-variable value checks to
the evaluator, which reports them as NotANumber.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from safexpr.errors import SafexprInputError


def read_expression(path: Path, *, max_bytes: int) -> str:
    """Read UTF-8 expression text from `path`, refusing files over `max_bytes`."""

    try:
        size = path.stat().st_size
    except FileNotFoundError as e:
        raise SafexprInputError(f"Expression file not found: {path}") from e
    except OSError as e:
        raise SafexprInputError(f"Failed reading expression file: {path}") from e
    if size > max_bytes:
        raise SafexprInputError(
            f"Expression file is too large: {size} bytes (limit {max_bytes})."
        )

    try:
        raw = path.read_bytes()
    except OSError as e:
        raise SafexprInputError(f"Failed reading expression file: {path}") from e
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SafexprInputError(f"Expression file is not valid UTF-8: {path}") from e


def parse_bindings(text: str | None) -> dict[str, object]:
    """Decode a JSON object of variable bindings; empty input means no bindings."""

    if text is None or not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SafexprInputError(f"Cannot parse variables: {e.msg}") from e
    if not isinstance(data, dict):
        raise SafexprInputError("Variables must be a JSON object.")
    return data


def _parse_number(text: str) -> object:
    # Values that do not parse as JSON numbers are kept as text so the
    # evaluator reports the variable as NotANumber.
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return text
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else text


def parse_assignments(items: Iterable[str]) -> dict[str, object]:
    """Parse `NAME=VALUE` pairs as given on the command line."""

    out: dict[str, object] = {}
    for item in items:
        if "=" not in item:
            raise SafexprInputError(f"Expected NAME=VALUE, got: {item!r}")
        name, value = item.split("=", 1)
        name = name.strip()
        if not name:
            raise SafexprInputError(f"Missing variable name in: {item!r}")
        out[name] = _parse_number(value.strip())
    return out


def merge_bindings(*sources: dict[str, object]) -> dict[str, object]:
    """Merge binding dicts left to right; later sources win."""

    merged: dict[str, object] = {}
    for src in sources:
        merged.update(src)
    return merged
