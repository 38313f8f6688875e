from __future__ import annotations

import sys
import traceback
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .evaluator import eval_value, interpret
from .lexer_rd import Lexer
from .parser_rd import LoxSyntaxError, parse_source
from .tree import Expression, Stmt, to_lark
from .types import Environment, LoxRuntimeError, LoxStackOverflowError, LoxValue
from .utils import debug_py_trace_enabled, format_error

RECURSION_LIMIT = 10_000

EXIT_SYNTAX = 65
EXIT_RUNTIME = 70

@contextmanager
def recursion_limit(limit: int) -> Iterator[None]:
    """Raise the host recursion limit for the duration of a run."""
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(max(previous, limit))
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)

def run(src: str, env: Optional[Environment]=None) -> Environment:
    """tokenize -> parse -> interpret; returns the global environment."""
    with recursion_limit(RECURSION_LIMIT):
        program = parse_source(src)
        return interpret(program, env)

def repl_eval(src: str, env: Environment) -> Tuple[Optional[LoxValue], List[Stmt]]:
    """Run REPL input in `env`; a lone expression statement also yields its value."""
    with recursion_limit(RECURSION_LIMIT):
        program = parse_source(src)
        if len(program) == 1 and isinstance(program[0], Expression):
            try:
                return eval_value(program[0].expr, env), program
            except RecursionError:
                raise LoxStackOverflowError() from None
        interpret(program, env)

    return None, program

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing file => read its contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    try:
        is_file = candidate.is_file()
    except (OSError, ValueError):
        # too long or otherwise not a usable path: it is source text
        is_file = False

    if is_file:
        return candidate.read_text(encoding="utf-8")

    return arg

def dump_tokens(src: str) -> None:
    lexer = Lexer(src)

    for tok in lexer.tokenize():
        print(f"{tok.line:>4}  {tok.type.name:<8} {tok.lexeme!r}")

    for err in lexer.errors:
        print(format_error(err), file=sys.stderr)

def dump_ast(src: str) -> None:
    with recursion_limit(RECURSION_LIMIT):
        print(to_lark(parse_source(src)).pretty(), end="")

def report_syntax_error(exc: LoxSyntaxError) -> None:
    for err in exc.errors:
        print(format_error(err), file=sys.stderr)

def report_runtime_error(exc: LoxRuntimeError) -> None:
    print(format_error(exc), file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def main(argv: Optional[List[str]]=None) -> None:
    mode = "run"
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token == "--tokens":
            mode = "tokens"
            continue

        if token == "--ast":
            mode = "ast"
            continue

        if token == "--repl":
            mode = "repl"
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    if mode == "repl":
        from .repl import repl
        repl()
        return

    source = _load_source(arg or "-")

    try:
        if mode == "tokens":
            dump_tokens(source)
        elif mode == "ast":
            dump_ast(source)
        else:
            run(source)
    except LoxSyntaxError as exc:
        report_syntax_error(exc)
        raise SystemExit(EXIT_SYNTAX) from None
    except LoxRuntimeError as exc:
        report_runtime_error(exc)
        raise SystemExit(EXIT_RUNTIME) from None

if __name__ == "__main__":
    main()
