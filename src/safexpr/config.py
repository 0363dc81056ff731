"""Project configuration loading for safexpr.

Reads an optional `safexpr.toml` and performs light validation. Every setting
has a default, so running without a config file is normal.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from safexpr.errors import SafexprConfigError
from safexpr.evaluator import DEFAULT_MAX_LENGTH
from safexpr.grammar import DEFAULT_MAX_DEPTH

CONFIG_FILENAME = "safexpr.toml"
DEFAULT_MAX_FILE_BYTES = 1024 * 1024


@dataclass(frozen=True)
class EvaluatorConfig:
    max_depth: int = DEFAULT_MAX_DEPTH
    max_length: int = DEFAULT_MAX_LENGTH


@dataclass(frozen=True)
class InputConfig:
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES


@dataclass(frozen=True)
class MCPConfig:
    enabled: bool = True


@dataclass(frozen=True)
class SafexprConfig:
    version: int = 1
    evaluator: EvaluatorConfig = field(default_factory=EvaluatorConfig)
    input: InputConfig = field(default_factory=InputConfig)
    mcp: MCPConfig = field(default_factory=MCPConfig)
    path: Path | None = None


def find_config_file(start: Path) -> Path | None:
    """Walk upward from `start` (file or directory) looking for `safexpr.toml`."""

    cur = start
    try:
        if cur.is_file():
            cur = cur.parent
    except OSError:
        cur = cur.parent

    cur = cur.resolve()
    while True:
        candidate = cur / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if cur.parent == cur:
            return None
        cur = cur.parent


def _as_table(value: Any, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SafexprConfigError(f"Expected [{name}] to be a table.")
    return value


def _as_bool(value: Any, *, name: str) -> bool:
    if not isinstance(value, bool):
        raise SafexprConfigError(f"Expected {name} to be a boolean.")
    return value


def _as_positive_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise SafexprConfigError(f"Expected {name} to be an integer.")
    if value < 1:
        raise SafexprConfigError(f"Invalid config: {name} must be >= 1.")
    return value


def load_config(*, root: Path | None = None, config_path: Path | None = None) -> SafexprConfig:
    """Load and validate `safexpr.toml`.

    An explicit `config_path` must exist. Otherwise the file is searched for
    upward from `root` (or the current working directory); when none is found
    the defaults apply.
    """

    if config_path is None:
        config_path = find_config_file(root if root is not None else Path.cwd())
        if config_path is None:
            return SafexprConfig()

    try:
        raw = config_path.read_bytes()
    except FileNotFoundError as e:
        raise SafexprConfigError(f"Missing {CONFIG_FILENAME} at: {config_path}") from e
    except OSError as e:
        raise SafexprConfigError(f"Failed reading config file: {config_path}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise SafexprConfigError(f"Config is not valid UTF-8: {config_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise SafexprConfigError(f"Invalid TOML in {config_path}: {e}") from e

    version = data.get("version", None)
    if version is None:
        raise SafexprConfigError(f"Missing required `version = 1` in {CONFIG_FILENAME}.")
    if not isinstance(version, int) or isinstance(version, bool) or version != 1:
        raise SafexprConfigError(f"Unsupported config version: {version!r} (expected 1).")

    evaluator_tbl = _as_table(data.get("evaluator"), name="evaluator")
    input_tbl = _as_table(data.get("input"), name="input")
    mcp_tbl = _as_table(data.get("mcp"), name="mcp")

    evaluator = EvaluatorConfig(
        max_depth=_as_positive_int(
            evaluator_tbl.get("max_depth", DEFAULT_MAX_DEPTH), name="evaluator.max_depth"
        ),
        max_length=_as_positive_int(
            evaluator_tbl.get("max_length", DEFAULT_MAX_LENGTH), name="evaluator.max_length"
        ),
    )
    input_cfg = InputConfig(
        max_file_bytes=_as_positive_int(
            input_tbl.get("max_file_bytes", DEFAULT_MAX_FILE_BYTES), name="input.max_file_bytes"
        ),
    )
    mcp = MCPConfig(enabled=_as_bool(mcp_tbl.get("enabled", True), name="mcp.enabled"))

    return SafexprConfig(
        version=version,
        evaluator=evaluator,
        input=input_cfg,
        mcp=mcp,
        path=config_path,
    )
