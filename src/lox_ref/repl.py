"""Interactive REPL for Lox, powered by prompt_toolkit."""

from __future__ import annotations

import os
import sys
from typing import List

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .eval.helpers import stringify
from .lexer_rd import Lexer
from .parser_rd import LoxSyntaxError, parse_source
from .repl_highlight import LoxHighlighter
from .runner import repl_eval, report_runtime_error, report_syntax_error
from .token_types import TT
from .tree import to_lark
from .types import Environment, LoxNil, LoxRuntimeError
from .utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/ast": ("Show the parsed tree for a snippet", "<source>"),
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}


def brace_depth(text: str) -> int:
    """Net count of open `{` / `(` in *text*; positive means input is unfinished."""
    depth = 0

    for tok in Lexer(text).tokenize():
        if tok.type in (TT.LBRACE, TT.LPAR):
            depth += 1
        elif tok.type in (TT.RBRACE, TT.RPAR):
            depth -= 1

    return depth


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _handle_slash(line: str, env_box: List[Environment]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/ast":
        try:
            print(to_lark(parse_source(arg)).pretty(), end="")
        except LoxSyntaxError as exc:
            report_syntax_error(exc)
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            os.environ[DEBUG_PY_TRACE_ENV] = "1"
        elif arg.lower() in ("off", "0", "false", "no"):
            os.environ.pop(DEBUG_PY_TRACE_ENV, None)
        elif arg == "":
            if debug_py_trace_enabled():
                os.environ.pop(DEBUG_PY_TRACE_ENV, None)
            else:
                os.environ[DEBUG_PY_TRACE_ENV] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        env_box[0] = Environment()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    # Use a mutable box so /reset can swap the environment.
    env_box: List[Environment] = [Environment()]

    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        # Unbalanced braces or parens => keep reading lines.
        if not text.startswith("/") and brace_depth(text) > 0:
            buf.insert_text("\n" + "    " * brace_depth(text))
            return

        buf.validate_and_handle()

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=LoxHighlighter(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("lox repl (Ctrl-D to exit, / for commands)")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        if not text.strip():
            continue

        if _handle_slash(text, env_box):
            continue

        try:
            value, _ = repl_eval(text, env_box[0])
        except LoxSyntaxError as exc:
            report_syntax_error(exc)
            continue
        except LoxRuntimeError as exc:
            report_runtime_error(exc)
            continue

        if value is not None and not isinstance(value, LoxNil):
            print(stringify(value))


def main() -> None:
    repl()


if __name__ == "__main__":
    main()
