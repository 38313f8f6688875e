from __future__ import annotations

from typing import List

import pytest
from prompt_toolkit.document import Document

from tests.support.harness import Environment, LoxNumber
from lox_ref.repl import _handle_slash, brace_depth
from lox_ref.repl_highlight import GROUP_STYLE, LoxHighlighter, token_group
from lox_ref.token_types import TT, Tok
from lox_ref.utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled


@pytest.mark.parametrize(
    "text, depth",
    [
        pytest.param("print 1;", 0, id="balanced"),
        pytest.param("fun f() {", 1, id="open-brace"),
        pytest.param("f(1,", 1, id="open-paren"),
        pytest.param("{ { }", 1, id="nested"),
        pytest.param('print "{";', 0, id="brace-in-string"),
        pytest.param("// {", 0, id="brace-in-comment"),
    ],
)
def test_brace_depth(text: str, depth: int) -> None:
    assert brace_depth(text) == depth


def test_slash_ignores_plain_input() -> None:
    assert _handle_slash("print 1;", [Environment()]) is False


def test_slash_reset(capsys: pytest.CaptureFixture[str]) -> None:
    env = Environment()
    env.define("a", LoxNumber(1))
    env_box: List[Environment] = [env]

    assert _handle_slash("/reset", env_box) is True
    assert env_box[0] is not env
    assert "a" not in env_box[0]
    assert capsys.readouterr().out == "Environment reset.\n"


def test_slash_ast(capsys: pytest.CaptureFixture[str]) -> None:
    assert _handle_slash("/ast var a = 1;", [Environment()]) is True
    assert capsys.readouterr().out == "program\n  var_decl\n    a\n    literal\t1\n"


def test_slash_ast_syntax_error(capsys: pytest.CaptureFixture[str]) -> None:
    _handle_slash("/ast print ;", [Environment()])
    assert capsys.readouterr().err == "[line 0] Error at ';': Expected expression\n"


def test_slash_py_traceback_toggle(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv(DEBUG_PY_TRACE_ENV, "0")

    _handle_slash("/py-traceback on", [Environment()])
    assert debug_py_trace_enabled()

    _handle_slash("/py-traceback", [Environment()])
    assert not debug_py_trace_enabled()

    assert capsys.readouterr().out == "Python traceback: on\nPython traceback: off\n"


def test_slash_unknown(capsys: pytest.CaptureFixture[str]) -> None:
    assert _handle_slash("/nope", [Environment()]) is True
    assert capsys.readouterr().err == "Unknown command: /nope\n"


@pytest.mark.parametrize(
    "tok, group",
    [
        pytest.param(Tok(TT.VAR, "var"), "keyword", id="keyword"),
        pytest.param(Tok(TT.TRUE, "true"), "boolean", id="boolean"),
        pytest.param(Tok(TT.NIL, "nil"), "constant", id="nil"),
        pytest.param(Tok(TT.NUMBER, "1"), "number", id="number"),
        pytest.param(Tok(TT.STRING, "s"), "string", id="string"),
        pytest.param(Tok(TT.IDENT, "x"), "identifier", id="ident"),
        pytest.param(Tok(TT.MOD, "%"), "operator", id="operator"),
        pytest.param(Tok(TT.SEMI, ";"), "punctuation", id="punctuation"),
    ],
)
def test_token_group(tok: Tok, group: str) -> None:
    assert token_group(tok) == group


def test_highlighter_styles_line() -> None:
    get_line = LoxHighlighter().lex_document(Document('var s = "hi"; // note'))
    fragments = get_line(0)

    assert "".join(text for _, text in fragments) == 'var s = "hi"; // note'
    assert (GROUP_STYLE["keyword"], "var") in fragments
    assert (GROUP_STYLE["string"], '"hi"') in fragments
    assert fragments[-1] == (GROUP_STYLE["comment"], "// note")


def test_highlighter_second_line() -> None:
    get_line = LoxHighlighter().lex_document(Document("{\n  print 1;\n}"))
    fragments = get_line(1)

    assert (GROUP_STYLE["keyword"], "print") in fragments
    assert (GROUP_STYLE["number"], "1") in fragments
