from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    ArityError,
    EvalTypeError,
    LoxRuntimeError,
    UndefinedVariableError,
    run_output_case,
)

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            class Counter {
              init(start) { this.count = start; }
              inc() { this.count = this.count + 1; return this; }
            }
            var c = Counter(10);
            c.inc().inc();
            print c.count;
            print c;
            print Counter;
        """
        ),
        ["12", "Counter instance", "Counter"],
        None,
        id="counter-class",
    ),
    pytest.param(
        dedent(
            """\
            class Box {}
            var b = Box();
            b.v = 3;
            b.v = b.v + 1;
            print b.v;
        """
        ),
        ["4"],
        None,
        id="fields-set-from-outside",
    ),
    pytest.param(
        dedent(
            """\
            class P { init(n) { this.n = n; } }
            var a = P(1);
            var b = P(2);
            print a.n;
            print b.n;
        """
        ),
        ["1", "2"],
        None,
        id="instances-have-own-fields",
    ),
    pytest.param(
        dedent(
            """\
            class Counter {
              init() { this.count = 0; }
              inc() { this.count = this.count + 1; }
            }
            var c = Counter();
            var bump = c.inc;
            bump();
            bump();
            print c.count;
            print bump;
        """
        ),
        ["2", "<fn inc>"],
        None,
        id="bound-method-keeps-receiver",
    ),
    pytest.param(
        dedent(
            """\
            class A { m() { return 1; } }
            var a = A();
            a.m = fun () { return 2; };
            print a.m();
            print A().m();
        """
        ),
        ["2", "1"],
        None,
        id="field-shadows-method",
    ),
    pytest.param(
        dedent(
            """\
            class A {
              a() { return this.b() + "!"; }
              b() { return "b"; }
            }
            print A().a();
        """
        ),
        ["b!"],
        None,
        id="method-calls-method",
    ),
    pytest.param(
        dedent(
            """\
            fun makeGreeter(greeting) {
              class Greeter { greet(name) { print greeting + ", " + name; } }
              return Greeter();
            }
            makeGreeter("hi").greet("bob");
        """
        ),
        ["hi, bob"],
        None,
        id="class-in-function-captures-local",
    ),
    pytest.param(
        dedent(
            """\
            class Button {
              init(label) { this.label = label; }
              handler() { return fun () { print this.label; }; }
            }
            var h = Button("ok").handler();
            h();
        """
        ),
        ["ok"],
        None,
        id="lambda-captures-this",
    ),
    pytest.param(
        dedent(
            """\
            class Node { make() { return Node(); } }
            print Node().make();
        """
        ),
        ["Node instance"],
        None,
        id="method-references-own-class",
    ),
    pytest.param(
        dedent(
            """\
            class A { init() { this.x = 1; return; } }
            var a = A();
            print a;
            print a.init();
            print a.x;
        """
        ),
        ["A instance", "A instance", "1"],
        None,
        id="initializer-returns-instance",
    ),
    pytest.param(
        dedent(
            """\
            var shared = 1;
            class A {}
            print A().shared;
        """
        ),
        None,
        UndefinedVariableError,
        id="property-read-ignores-scope",
    ),
    pytest.param("class A {} print A().missing;", None, UndefinedVariableError, id="missing-property"),
    pytest.param("var x = 1; print x.y;", None, EvalTypeError, id="get-on-number"),
    pytest.param('"s".y = 1;', None, EvalTypeError, id="set-on-string"),
    pytest.param("class A {} A(1);", None, ArityError, id="no-init-takes-no-args"),
    pytest.param("class A { init(x) {} } A();", None, ArityError, id="init-arity"),
    pytest.param("class A { m(x) {} } A().m();", None, ArityError, id="method-arity"),
    pytest.param("print this;", None, LoxRuntimeError, id="this-outside-method"),
    pytest.param("fun f() { return this; } f();", None, LoxRuntimeError, id="this-in-plain-function"),
]


@pytest.mark.parametrize("source, expected_lines, expected_exc", SCENARIOS)
def test_eval_objects(source: str, expected_lines, expected_exc) -> None:
    run_output_case(source, expected_lines, expected_exc)
