from __future__ import annotations

from typing import List, Optional

from .tree import (
    Assign, Binary, Block, Call, Class, Expression, Expr, Function, Get, Grouping, If,
    Lambda, Literal, Logical, Node, Print, Return, Set, Stmt, This, Unary, Var,
    Variable, While,
)
from .types import (
    Environment,
    IdentRef,
    LoxRuntimeError,
    LoxStackOverflowError,
    LoxValue,
    Returning,
)

from .eval.helpers import from_literal, resolve
from .eval.expr import eval_binary, eval_logical, eval_unary
from .eval.bind import eval_assign, exec_var_decl
from .eval.blocks import exec_block, exec_scoped_block
from .eval.loops import exec_if, exec_while
from .eval.control import exec_print, exec_return
from .eval.fn import eval_lambda, exec_class_decl, exec_function_decl
from .eval.chains import eval_call, eval_get, eval_set, eval_this


def _maybe_attach_location(exc: LoxRuntimeError, node: Node) -> None:
    # innermost node wins
    if exc.line is None:
        exc.line = node.line

# ---------------- Public API ----------------

def interpret(program: List[Stmt], env: Optional[Environment]=None) -> Environment:
    """Execute a program statement by statement; the first runtime error stops the run."""
    if env is None:
        env = Environment()

    try:
        result = exec_block(program, env, exec_stmt)
    except RecursionError:
        raise LoxStackOverflowError() from None

    if result is not None:
        raise LoxRuntimeError("Can't return from top-level code")

    return env

# ---------------- Core evaluator ----------------

def eval_node(n: Expr, env: Environment) -> LoxValue:
    """Evaluate an expression. A bare Variable yields an IdentRef for the consumer to resolve."""
    try:
        return _eval_node_inner(n, env)
    except LoxRuntimeError as e:
        _maybe_attach_location(e, n)
        raise

def eval_value(n: Expr, env: Environment) -> LoxValue:
    """Evaluate an expression all the way to a concrete value."""
    return resolve(eval_node(n, env), env)

def _eval_node_inner(n: Expr, env: Environment) -> LoxValue:
    match n:
        case Literal(value=value):
            return from_literal(value)
        case Variable(name=name):
            return IdentRef(name)
        case Grouping(inner=inner):
            return eval_node(inner, env)
        case Unary():
            return eval_unary(n, env, eval_node)
        case Binary():
            return eval_binary(n, env, eval_node)
        case Logical():
            return eval_logical(n, env, eval_node)
        case Assign():
            return eval_assign(n, env, eval_node)
        case Call():
            return eval_call(n, env, eval_node)
        case Get():
            return eval_get(n, env, eval_node)
        case Set():
            return eval_set(n, env, eval_node)
        case This():
            return eval_this(env)
        case Lambda():
            return eval_lambda(n, env)
        case _:
            raise LoxRuntimeError(f"Unknown expression node {type(n).__name__}")

def exec_stmt(s: Stmt, env: Environment) -> Optional[Returning]:
    """Execute a statement: None means fall through, Returning unwinds to the caller."""
    try:
        return _exec_stmt_inner(s, env)
    except LoxRuntimeError as e:
        _maybe_attach_location(e, s)
        raise

def _exec_stmt_inner(s: Stmt, env: Environment) -> Optional[Returning]:
    match s:
        case Expression(expr=expr):
            # resolving here makes `undefined;` an error instead of a no-op
            eval_value(expr, env)
            return None
        case Print():
            exec_print(s, env, eval_node)
            return None
        case Var():
            exec_var_decl(s, env, eval_node)
            return None
        case Block(statements=statements):
            return exec_scoped_block(statements, env, exec_stmt)
        case If():
            return exec_if(s, env, eval_node, exec_stmt)
        case While():
            return exec_while(s, env, eval_node, exec_stmt)
        case Function():
            exec_function_decl(s, env)
            return None
        case Return():
            return exec_return(s, env, eval_node)
        case Class():
            exec_class_decl(s, env)
            return None
        case _:
            raise LoxRuntimeError(f"Unknown statement node {type(s).__name__}")
