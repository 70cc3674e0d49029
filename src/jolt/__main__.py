#!/usr/bin/env python3
"""
Command line for the Jolt interpreter.

Usage:
    python -m jolt                        # interactive REPL
    python -m jolt repl
    python -m jolt run FILE.jolt
    python -m jolt check FILE.jolt [--json]
    python -m jolt tokens FILE.jolt
    python -m jolt ast FILE.jolt

Settings come from jolt.yaml (see jolt.config) and may be overridden with
--echo/--no-echo, --timing/--no-timing and --check/--no-check.

REPL input:
    an empty line ends the session
    ~ clears every variable
    _ holds the result of the previous input
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Callable, Optional

from .config import ConfigError, JoltConfig, load_config
from .errors import JoltError
from .source import Source


def _load_source(path_str: str) -> Optional[Source]:
    """Read a source file, reporting a missing file on stderr."""
    source_path = Path(path_str)
    if not source_path.is_file():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return None
    return Source.from_path(source_path)


def _echo(config: JoltConfig):
    if not config.echo:
        return None
    return lambda value: print(value)


def _report(value, elapsed: float, config: JoltConfig, show_value: bool = True) -> None:
    if show_value:
        print(f"=> {value}")
    if config.show_timing:
        print(f"({elapsed * 1000:.3f} ms)")


def cmd_run(args, config: JoltConfig) -> int:
    """Run a Jolt file."""
    from .runtime.interpreter import execute

    source = _load_source(args.file)
    if source is None:
        return 1

    result = execute(source, echo=_echo(config), check=config.check)
    if not result.success:
        print(result.error_message, file=sys.stderr)
        return 1

    _report(result.value, result.elapsed, config)
    return 0


def cmd_check(args, config: JoltConfig) -> int:
    """Check a Jolt file without running it."""
    from . import parse, check

    source = _load_source(args.file)
    if source is None:
        return 1

    try:
        program = parse(source)
    except JoltError as e:
        if args.json:
            print(json.dumps({"diagnostics": [e.diagnostic.to_json()],
                              "error_count": 1, "warning_count": 0}, indent=2))
        else:
            print(e, file=sys.stderr)
        return 1

    result = check(program, max_errors=config.max_errors, source=source)

    if args.json:
        print(json.dumps(result.to_json(), indent=2))
        return 1 if result.has_errors else 0

    if result.has_errors:
        errors = [d for d in result.diagnostics if d.severity.value == "error"]
        print(f"Checking failed with {len(errors)} error(s):", file=sys.stderr)
        for diag in result.diagnostics:
            print(diag.format(), file=sys.stderr)
        return 1

    print(f"OK: {source.name} - {len(program)} statement(s), no errors")
    for diag in result.diagnostics:
        print(diag.format())
    return 0


def cmd_tokens(args, config: JoltConfig) -> int:
    """Print the token stream of a Jolt file."""
    from . import tokenize

    source = _load_source(args.file)
    if source is None:
        return 1

    try:
        tokens = tokenize(source)
    except JoltError as e:
        print(e, file=sys.stderr)
        return 1

    for token in tokens:
        print(f"{token.span.start}\t{token}\t{token.lexeme!r}")
    return 0


def cmd_ast(args, config: JoltConfig) -> int:
    """Print the syntax tree of a Jolt file."""
    from . import parse, print_ast

    source = _load_source(args.file)
    if source is None:
        return 1

    try:
        program = parse(source)
    except JoltError as e:
        print(e, file=sys.stderr)
        return 1

    print_ast(program)
    return 0


def cmd_repl(args, config: JoltConfig, read: Optional[Callable[[str], str]] = None) -> int:
    """Read-evaluate-print loop; variables persist between inputs."""
    from .runtime.interpreter import execute
    from .runtime.memory import Memory

    read = read or input
    memory = Memory()
    echo = _echo(config)

    while True:
        try:
            line = read(config.prompt)
        except EOFError:
            print()
            break

        if not line.strip():
            break

        if line.strip() == "~":
            memory.clear()
            print("Memory cleared.")
            continue

        result = execute(Source("<repl>", line), memory=memory, echo=echo, check=config.check)
        if not result.success:
            print(result.error_message, file=sys.stderr)
            continue

        memory.bind("_", result.value)
        # Echo already printed every expression value
        _report(result.value, result.elapsed, config, show_value=echo is None)

    return 0


COMMANDS = {
    "run": cmd_run,
    "check": cmd_check,
    "tokens": cmd_tokens,
    "ast": cmd_ast,
    "repl": cmd_repl,
}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--config', metavar='FILE',
                        help='Configuration file (default: $JOLT_CONFIG or ./jolt.yaml)')
    common.add_argument('--echo', action=argparse.BooleanOptionalAction, default=None,
                        help='Print the value of every expression statement')
    common.add_argument('--timing', action=argparse.BooleanOptionalAction, default=None,
                        help='Print elapsed time after each run')
    common.add_argument('--check', action=argparse.BooleanOptionalAction, default=None,
                        help='Run the static checker before executing')

    parser = argparse.ArgumentParser(
        prog='jolt',
        description='Jolt scripting language interpreter',
    )

    subparsers = parser.add_subparsers(dest='action')

    run_parser = subparsers.add_parser('run', parents=[common], help='Run a Jolt file')
    run_parser.add_argument('file', help='Jolt source file')

    check_parser = subparsers.add_parser('check', parents=[common],
                                         help='Check a Jolt file for errors')
    check_parser.add_argument('file', help='Jolt source file')
    check_parser.add_argument('--json', action='store_true',
                              help='Print diagnostics as JSON')

    tokens_parser = subparsers.add_parser('tokens', help='Print the tokens of a Jolt file')
    tokens_parser.add_argument('file', help='Jolt source file')

    ast_parser = subparsers.add_parser('ast', help='Print the syntax tree of a Jolt file')
    ast_parser.add_argument('file', help='Jolt source file')

    subparsers.add_parser('repl', parents=[common], help='Start the interactive prompt')

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    action = args.action or "repl"

    try:
        config = load_config(getattr(args, "config", None))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = config.with_overrides(
        echo=getattr(args, "echo", None),
        show_timing=getattr(args, "timing", None),
        check=getattr(args, "check", None),
    )

    return COMMANDS[action](args, config)


if __name__ == '__main__':
    sys.exit(main())
