"""MCP server for safexpr: exposes evaluate/check/functions as MCP tools.

The server uses FastMCP for the transport layer. Core tool functions are plain
Python returning JSON strings and can be tested without a running server.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from safexpr.diagnostics import failure_to_dict, outcome_to_dict
from safexpr.errors import SafexprConfigError
from safexpr.evaluator import check, evaluate
from safexpr.namespace import MATH_NAMESPACE

# ---------------------------------------------------------------------------
# Core tool functions (no FastMCP dependency)
# ---------------------------------------------------------------------------


def _limits(root: str | None, config_path: str | None = None) -> dict[str, int]:
    from safexpr.config import load_config

    cfg = load_config(
        root=Path(root).resolve() if root else None,
        config_path=Path(config_path).resolve() if config_path else None,
    )
    return {"max_depth": cfg.evaluator.max_depth, "max_length": cfg.evaluator.max_length}


def tool_evaluate(
    expression: str,
    variables: dict[str, Any] | None = None,
    *,
    root: str | None = None,
    config_path: str | None = None,
) -> str:
    """Evaluate an expression and return a JSON envelope."""
    try:
        limits = _limits(root, config_path)
    except SafexprConfigError as e:
        return json.dumps({"command": "evaluate", "ok": False, "error": str(e)})
    if variables is not None and not isinstance(variables, dict):
        return json.dumps(
            {"command": "evaluate", "ok": False, "error": "Variables must be a JSON object."}
        )
    outcome = evaluate(expression, variables or {}, **limits)
    return json.dumps({"command": "evaluate", **outcome_to_dict(outcome)}, allow_nan=False)


def tool_check(
    expression: str, *, root: str | None = None, config_path: str | None = None
) -> str:
    """Validate an expression without evaluating it."""
    try:
        limits = _limits(root, config_path)
    except SafexprConfigError as e:
        return json.dumps({"command": "check", "ok": False, "error": str(e)})
    failure = check(expression, **limits)
    payload: dict[str, Any] = {"command": "check", "ok": failure is None}
    if failure is not None:
        payload["error"] = failure_to_dict(failure)
    return json.dumps(payload)


def tool_functions() -> str:
    """List the Math constants and functions."""
    members = list(MATH_NAMESPACE.values())
    return json.dumps(
        {
            "command": "functions",
            "ok": True,
            "constants": [m.name for m in members if not m.callable],
            "functions": [
                {"name": m.name, "arity": None if m.variadic else m.arity}
                for m in members
                if m.callable
            ],
        }
    )


# ---------------------------------------------------------------------------
# FastMCP server factory
# ---------------------------------------------------------------------------


def create_mcp_server(*, root: str | None = None, config_path: str | None = None):
    """Create and return a FastMCP server with safexpr tools registered."""
    from fastmcp import FastMCP

    mcp = FastMCP("safexpr", instructions="Sandboxed arithmetic expression evaluator")

    @mcp.tool()
    def safexpr_evaluate(expression: str, variables: dict[str, float] | None = None) -> str:
        """Evaluate an arithmetic expression.

        Supports + - * / %, unary signs, parentheses, numbers and Math.*
        members. `variables` maps names to numbers. Returns JSON with either
        the result or a typed error.
        """
        return tool_evaluate(expression, variables, root=root, config_path=config_path)

    @mcp.tool()
    def safexpr_check(expression: str) -> str:
        """Check that an expression is well formed without evaluating it.

        Returns JSON with ok=true, or the first syntax error found.
        """
        return tool_check(expression, root=root, config_path=config_path)

    @mcp.tool()
    def safexpr_functions() -> str:
        """List the Math constants and functions expressions may use."""
        return tool_functions()

    return mcp


def run_server(*, root: str | None = None, config_path: str | None = None) -> None:
    """Entry point: create and run the MCP server (stdio transport).

    If *root* is provided, changes the working directory to that path so
    `safexpr.toml` is found relative to it. An explicit *config_path* is
    resolved against the original working directory and used for every tool
    call.
    """
    import os

    if config_path:
        config_path = str(Path(config_path).resolve())
    if root:
        os.chdir(Path(root).resolve())
    mcp = create_mcp_server(config_path=config_path)
    mcp.run()
