from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from stacked.api import compile_source, emit_source, parse_source, run_source
from stacked.backend import HandoffBackend
from stacked.builder import Program
from stacked.config import CompilerSettings, UnknownCharPolicy, load_settings
from stacked.errors import BuildError, CompileError
from stacked.lexer import tokenize
from stacked.resolve import ResolvedProgram

LOG_FORMAT = "[%(levelname)s] %(message)s"


def _existing_path(value: str) -> Path:
    p = Path(value)
    if not p.exists():
        raise argparse.ArgumentTypeError(f"path not found: {value}")
    return p


def _configure_logging(*, trace: bool) -> None:
    log = logging.getLogger("stacked")
    if not log.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(h)
    log.setLevel(logging.DEBUG if trace else logging.WARNING)


def _print_listing(program: Program) -> None:
    for index, op in enumerate(program):
        where = f"{op.span.line}:{op.span.col}" if op.span else "-"
        print(f"{index:4d}  {where:>8}  {op.describe()}")


def _print_calls(resolved: ResolvedProgram) -> None:
    for call in resolved.calls:
        print(f"{call.index:4d}  {call.intrinsic.value:<5} {call.argument!r}")
    if resolved.residual:
        print(f"# {resolved.residual} operand(s) left on the stack")


def _report(err: CompileError) -> None:
    if isinstance(err, BuildError):
        for e in err.errors:
            print(f"error: {e}", file=sys.stderr)
        return
    print(f"error: {err}", file=sys.stderr)


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("file", type=_existing_path)
    p.add_argument("--config", type=_existing_path, default=None, help="YAML settings file")
    p.add_argument("--stack-capacity", type=int, default=None)
    p.add_argument(
        "--unknown-chars",
        choices=[c.value for c in UnknownCharPolicy],
        default=None,
        help="what to do with characters outside the language",
    )
    p.add_argument(
        "--fail-fast",
        action="store_true",
        default=None,
        help="stop at the first error instead of reporting every broken statement",
    )
    p.add_argument("--trace", action="store_true", help="log every instruction as it is built")


def _settings(args: argparse.Namespace) -> CompilerSettings:
    return load_settings(
        config_path=args.config,
        overrides={
            "stack_capacity": args.stack_capacity,
            "unknown_chars": args.unknown_chars,
            "fail_fast": args.fail_fast,
        },
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="stacked")
    sub = parser.add_subparsers(dest="cmd", required=True)

    _add_common(sub.add_parser("tokens", help="list the tokens of a program"))
    _add_common(sub.add_parser("parse", help="print the instruction sequence"))
    resolve_p = sub.add_parser("resolve", help="print each intrinsic with its argument")
    _add_common(resolve_p)
    resolve_p.add_argument("--json", action="store_true", help="print the backend handoff document")
    _add_common(
        sub.add_parser(
            "run",
            help="simulate the program and exit with its exit code "
            "(compile errors also exit 1, the same status as a program that exits 1)",
        )
    )

    args = parser.parse_args(argv)
    _configure_logging(trace=args.trace)

    try:
        settings = _settings(args)
    except ValueError as e:
        print(f"error: invalid settings: {e}", file=sys.stderr)
        return 1

    try:
        src = args.file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"error: cannot read {args.file}: {e}", file=sys.stderr)
        return 1

    try:
        if args.cmd == "tokens":
            for tok in tokenize(src):
                print(f"{tok.line}:{tok.col}\t{tok.kind.value}\t{tok.text}")
            return 0

        if args.cmd == "parse":
            _print_listing(parse_source(src=src, settings=settings))
            return 0

        if args.cmd == "resolve":
            if args.json:
                doc = emit_source(src=src, backend=HandoffBackend(), settings=settings)
                print(doc.model_dump_json(indent=2))
            else:
                _print_calls(compile_source(src=src, settings=settings))
            return 0

        if args.cmd == "run":
            execution = run_source(src=src, settings=settings)
            sys.stdout.write(execution.stdout)
            sys.stdout.flush()
            return execution.exit_code
    except CompileError as e:
        _report(e)
        return 1

    raise AssertionError(f"unhandled cmd: {args.cmd}")
