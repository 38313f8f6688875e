from __future__ import annotations

import io
import sys

import pytest

from tests.support.harness import Environment, LoxNumber, LoxSyntaxError, run_program
from lox_ref.runner import (
    EXIT_RUNTIME,
    EXIT_SYNTAX,
    main,
    recursion_limit,
    repl_eval,
)


def test_main_runs_file(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    script = tmp_path / "hello.lox"
    script.write_text('var who = "world";\nprint "hello " + who;\n', encoding="utf-8")

    main([str(script)])

    assert capsys.readouterr().out == "hello world\n"


def test_main_runs_literal_source(capsys: pytest.CaptureFixture[str]) -> None:
    main(["print 1 + 1;"])
    assert capsys.readouterr().out == "2\n"


def test_main_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO("print 3;"))
    main(["-"])
    assert capsys.readouterr().out == "3\n"


def test_main_empty_stdin(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))

    with pytest.raises(SystemExit) as exc_info:
        main([])

    assert exc_info.value.code == "No input provided on stdin"


def test_main_syntax_error_exit(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["print ;\nvar = 1;"])

    assert exc_info.value.code == EXIT_SYNTAX
    err = capsys.readouterr().err.splitlines()
    assert err == [
        "[line 0] Error at ';': Expected expression",
        "[line 1] Error at '=': Expected variable name",
    ]


def test_main_runtime_error_exit(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["print 1;\nprint x;"])

    assert exc_info.value.code == EXIT_RUNTIME
    captured = capsys.readouterr()
    assert captured.out == "1\n"
    assert captured.err == "[line 1] Error: Undefined variable 'x'\n"


def test_main_runtime_error_with_py_trace(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("LOX_DEBUG_PY_TRACE", "1")

    with pytest.raises(SystemExit):
        main(["print 1 / 0;"])

    err = capsys.readouterr().err
    assert err.startswith("[line 0] Error: Division by zero\n")
    assert "Python traceback:" in err


def test_main_rejects_extra_arguments() -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["print 1;", "print 2;"])

    assert "Unexpected argument" in str(exc_info.value.code)


def test_main_tokens(capsys: pytest.CaptureFixture[str]) -> None:
    main(["--tokens", "var x;\nprint x;"])

    rows = [line.split() for line in capsys.readouterr().out.splitlines()]
    assert rows[0] == ["0", "VAR", "'var'"]
    assert rows[3] == ["1", "PRINT", "'print'"]
    assert rows[-1] == ["1", "EOF", "''"]


def test_main_tokens_reports_lex_errors(capsys: pytest.CaptureFixture[str]) -> None:
    main(["--tokens", "x @"])

    captured = capsys.readouterr()
    assert "IDENT" in captured.out
    assert captured.err == "[line 0] Error: Unexpected character '@'\n"


def test_main_ast(capsys: pytest.CaptureFixture[str]) -> None:
    main(["--ast", "print 1;"])

    assert capsys.readouterr().out == "program\n  print\n    literal\t1\n"


def test_repl_eval_yields_expression_value() -> None:
    env = Environment()

    value, program = repl_eval("1 + 2;", env)
    assert value == LoxNumber(3)
    assert len(program) == 1

    value, _ = repl_eval("var a = 4;", env)
    assert value is None

    value, _ = repl_eval("a;", env)
    assert value == LoxNumber(4)


def test_recursion_limit_restores() -> None:
    before = sys.getrecursionlimit()

    with recursion_limit(before + 500):
        assert sys.getrecursionlimit() == before + 500

    assert sys.getrecursionlimit() == before


def test_deep_but_finite_recursion() -> None:
    source = "fun down(n) { if (n == 0) return 0; return down(n - 1); }\nprint down(300);"
    assert run_program(source) == ["0"]


def test_main_long_literal_source(capsys: pytest.CaptureFixture[str]) -> None:
    main(["print 1;" + " " * 300])
    assert capsys.readouterr().out == "1\n"


def test_main_deep_nesting_exits_with_syntax_error(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    script = tmp_path / "deep.lox"
    script.write_text("print " + "(" * 3000 + "1" + ")" * 3000 + ";\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main([str(script)])

    assert exc_info.value.code == EXIT_SYNTAX
    assert "Expression nested too deeply" in capsys.readouterr().err


def test_run_deep_nesting_raises_syntax_error() -> None:
    with pytest.raises(LoxSyntaxError):
        run_program("print " + "(" * 3000 + "1" + ")" * 3000 + ";")
