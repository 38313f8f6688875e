from __future__ import annotations

import os
from typing import Union

from .lexer_rd import LexError
from .parser_rd import ParseError
from .token_types import TT
from .types import LoxRuntimeError

DEBUG_PY_TRACE_ENV = "LOX_DEBUG_PY_TRACE"

def debug_py_trace_enabled() -> bool:
    """True when Python tracebacks should accompany Lox runtime errors."""
    return os.environ.get(DEBUG_PY_TRACE_ENV, "").strip().lower() in ("1", "true", "yes", "on")

def format_error(exc: Union[LexError, ParseError, LoxRuntimeError]) -> str:
    """Render one diagnostic as `[line N] Error: message`."""
    line = getattr(exc, "line", None)
    prefix = "Error" if line is None else f"[line {line}] Error"

    if isinstance(exc, ParseError) and exc.token is not None:
        where = "end" if exc.token.type == TT.EOF else f"'{exc.token.lexeme}'"
        return f"{prefix} at {where}: {exc.message}"

    return f"{prefix}: {exc.message}"
