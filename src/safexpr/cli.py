from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from safexpr import __version__
from safexpr.errors import SafexprConfigError, SafexprInputError

EXIT_OK = 0
EXIT_EVALUATION_FAILURE = 1
EXIT_CONFIG_OR_INPUT = 2


def _add_common_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--root",
        type=str,
        default=None,
        help="Directory to search upward from for safexpr.toml (defaults to cwd).",
    )
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to safexpr.toml (defaults to searching upward from --root).",
    )
    p.add_argument("--json", dest="json_output", action="store_true", help="Emit JSON on stdout.")
    p.add_argument("--verbose", action="store_true", help="Enable debug logging on stderr.")


def _add_binding_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--vars", type=str, default=None, help="Variable bindings as a JSON object.")
    p.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Bind one variable (repeatable; overrides --vars).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="safexpr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    eval_p = subparsers.add_parser("eval", help="Evaluate the expression stored in a file.")
    eval_p.add_argument("file", type=str, help="File containing the expression.")
    _add_common_flags(eval_p)
    _add_binding_flags(eval_p)

    expr_p = subparsers.add_parser("expr", help="Evaluate an expression given inline.")
    expr_p.add_argument("text", type=str, help="Expression text.")
    _add_common_flags(expr_p)
    _add_binding_flags(expr_p)

    check_p = subparsers.add_parser("check", help="Validate an expression file without evaluating.")
    check_p.add_argument("file", type=str, help="File containing the expression.")
    _add_common_flags(check_p)

    functions_p = subparsers.add_parser("functions", help="List the Math members.")
    functions_p.add_argument("--json", dest="json_output", action="store_true")

    mcp_p = subparsers.add_parser("mcp", help="MCP server commands.")
    mcp_sub = mcp_p.add_subparsers(dest="mcp_command", required=True)
    serve_p = mcp_sub.add_parser("serve", help="Run the MCP server over stdio.")
    serve_p.add_argument("--root", type=str, default=None, help="Working directory for the server.")
    serve_p.add_argument("--config", type=str, default=None, help="Path to safexpr.toml.")

    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _is_json_mode(args: argparse.Namespace) -> bool:
    return bool(getattr(args, "json_output", False))


def _configure_logging(verbose: bool) -> None:
    # Without --verbose an already configured root logger is left alone.
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=verbose,
    )


def _load_config(args: argparse.Namespace):
    from safexpr.config import load_config

    root = Path(args.root).resolve() if getattr(args, "root", None) else None
    config_path = Path(args.config).resolve() if getattr(args, "config", None) else None
    return load_config(root=root, config_path=config_path)


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


def _emit_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, allow_nan=False))


def _report_error(args: argparse.Namespace, e: BaseException) -> int:
    msg = (str(e) or repr(e)).strip()
    if _is_json_mode(args):
        _emit_json({"command": args.command, "ok": False, "error": msg})
    else:
        _eprint(f"error: {msg}")
    return EXIT_CONFIG_OR_INPUT


def _bindings_from_args(args: argparse.Namespace) -> dict[str, object]:
    from safexpr.bindings import merge_bindings, parse_assignments, parse_bindings

    return merge_bindings(parse_bindings(args.vars), parse_assignments(args.var))


def _report_outcome(args: argparse.Namespace, outcome) -> int:
    from safexpr.diagnostics import format_outcome, format_outcome_with_hint, outcome_to_dict
    from safexpr.outcome import Failure

    failed = isinstance(outcome, Failure)
    if _is_json_mode(args):
        _emit_json({"command": args.command, **outcome_to_dict(outcome)})
    elif failed:
        _eprint(format_outcome_with_hint(outcome))
    else:
        print(format_outcome(outcome))
    return EXIT_EVALUATION_FAILURE if failed else EXIT_OK


def cmd_eval(args: argparse.Namespace) -> int:
    from safexpr.bindings import read_expression
    from safexpr.evaluator import evaluate

    try:
        cfg = _load_config(args)
        if args.command == "eval":
            source = read_expression(Path(args.file), max_bytes=cfg.input.max_file_bytes)
        else:
            source = args.text
        bindings = _bindings_from_args(args)
    except (SafexprConfigError, SafexprInputError) as e:
        return _report_error(args, e)

    outcome = evaluate(
        source,
        bindings,
        max_depth=cfg.evaluator.max_depth,
        max_length=cfg.evaluator.max_length,
    )
    return _report_outcome(args, outcome)


def cmd_check(args: argparse.Namespace) -> int:
    from safexpr.bindings import read_expression
    from safexpr.diagnostics import failure_to_dict, format_outcome_with_hint
    from safexpr.evaluator import check

    try:
        cfg = _load_config(args)
        source = read_expression(Path(args.file), max_bytes=cfg.input.max_file_bytes)
    except (SafexprConfigError, SafexprInputError) as e:
        return _report_error(args, e)

    failure = check(source, max_depth=cfg.evaluator.max_depth, max_length=cfg.evaluator.max_length)
    if _is_json_mode(args):
        payload: dict[str, Any] = {"command": "check", "ok": failure is None}
        if failure is not None:
            payload["error"] = failure_to_dict(failure)
        _emit_json(payload)
    elif failure is not None:
        _eprint(format_outcome_with_hint(failure))
    else:
        print("ok")
    return EXIT_OK if failure is None else EXIT_EVALUATION_FAILURE


def cmd_functions(args: argparse.Namespace) -> int:
    from safexpr.namespace import MATH_NAMESPACE

    members = list(MATH_NAMESPACE.values())
    if _is_json_mode(args):
        _emit_json(
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
        return EXIT_OK
    for m in members:
        if not m.callable:
            print(f"Math.{m.name}")
        elif m.variadic:
            print(f"Math.{m.name}(...)")
        else:
            params = ", ".join("xyz"[i] for i in range(m.arity))
            print(f"Math.{m.name}({params})")
    return EXIT_OK


def cmd_mcp(args: argparse.Namespace) -> int:
    try:
        cfg = _load_config(args)
    except SafexprConfigError as e:
        _eprint(f"error: {e}")
        return EXIT_CONFIG_OR_INPUT
    if not cfg.mcp.enabled:
        _eprint("error: the MCP server is disabled in safexpr.toml ([mcp] enabled = false)")
        return EXIT_CONFIG_OR_INPUT
    try:
        from safexpr.mcp_server import run_server
    except ImportError as e:
        _eprint(f"error: {e}")
        return EXIT_CONFIG_OR_INPUT
    run_server(root=args.root, config_path=args.config)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(list(sys.argv[1:] if argv is None else argv))
    except SystemExit as e:
        # argparse uses SystemExit for --help/--version and parse errors.
        code = e.code
        return int(code) if isinstance(code, int) else EXIT_CONFIG_OR_INPUT

    _configure_logging(bool(getattr(args, "verbose", False)))

    if args.command in ("eval", "expr"):
        return cmd_eval(args)
    if args.command == "check":
        return cmd_check(args)
    if args.command == "functions":
        return cmd_functions(args)
    if args.command == "mcp":
        return cmd_mcp(args)

    return EXIT_CONFIG_OR_INPUT


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
