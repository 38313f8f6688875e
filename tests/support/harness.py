from __future__ import annotations

import io
import sys
from contextlib import redirect_stdout
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from lox_ref.lexer_rd import LexError, Lexer
from lox_ref.parser_rd import LoxSyntaxError, ParseError, Parser, parse_source
from lox_ref.runner import run
from lox_ref.types import (
    ArityError,
    Environment,
    EvalTypeError,
    LoxBool,
    LoxNil,
    LoxNumber,
    LoxRuntimeError,
    LoxStackOverflowError,
    LoxString,
    UndefinedVariableError,
    UnsupportedOperationError,
)

KEYWORDS = Lexer.KEYWORDS


def run_program(source: str, env: Optional[Environment] = None) -> List[str]:
    """Run a program and return what it printed, one entry per line."""
    buf = io.StringIO()
    with redirect_stdout(buf):
        run(source, env)
    return buf.getvalue().splitlines()


def parse_with_errors(source: str):
    """Parse without raising; returns (program, lexer errors + parser errors)."""
    lexer = Lexer(source)
    parser = Parser(lexer.tokenize())
    program = parser.parse()
    return program, [*lexer.errors, *parser.errors]


def run_output_case(
    source: str,
    expected_lines: Optional[Sequence[str]],
    expected_exc: Optional[type],
) -> None:
    """Execute one scenario: compare printed lines, or expect an exception."""
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            run_program(source)
        return

    lines = run_program(source)
    if expected_lines is not None:
        assert lines == list(expected_lines), f"expected {list(expected_lines)!r}, got {lines!r}"


__all__ = [
    "ArityError",
    "Environment",
    "EvalTypeError",
    "KEYWORDS",
    "LexError",
    "LoxBool",
    "LoxNil",
    "LoxNumber",
    "LoxRuntimeError",
    "LoxStackOverflowError",
    "LoxString",
    "LoxSyntaxError",
    "ParseError",
    "UndefinedVariableError",
    "UnsupportedOperationError",
    "parse_source",
    "parse_with_errors",
    "run_output_case",
    "run_program",
]
