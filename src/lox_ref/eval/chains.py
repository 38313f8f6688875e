from __future__ import annotations

from typing import Callable, List

from ..runtime import call_value
from ..tree import Call, Expr, Get, Set
from ..types import (
    BoundMethod,
    Environment,
    EvalTypeError,
    LoxInstance,
    LoxRuntimeError,
    LoxValue,
    UndefinedVariableError,
)
from .helpers import resolve, type_name

EvalFunc = Callable[[Expr, Environment], LoxValue]

def eval_args(arguments: List[Expr], env: Environment, eval_func: EvalFunc) -> List[LoxValue]:
    # left to right, references resolved to values before binding
    return [resolve(eval_func(arg, env), env) for arg in arguments]

def eval_call(node: Call, env: Environment, eval_func: EvalFunc) -> LoxValue:
    callee = resolve(eval_func(node.callee, env), env)
    args = eval_args(node.arguments, env, eval_func)

    return call_value(callee, args)

def _expect_instance(value: LoxValue, name: str) -> LoxInstance:
    if not isinstance(value, LoxInstance):
        raise EvalTypeError(f"Only instances have properties; cannot access '{name}' on {type_name(value)}")

    return value

def eval_get(node: Get, env: Environment, eval_func: EvalFunc) -> LoxValue:
    instance = _expect_instance(resolve(eval_func(node.object, env), env), node.name)

    cell = instance.fields.get_own(node.name)
    if cell is not None:
        return cell.value

    method = instance.klass.find_method(node.name)
    if method is not None:
        return BoundMethod(fn=method, receiver=instance)

    raise UndefinedVariableError(node.name, what="property")

def eval_set(node: Set, env: Environment, eval_func: EvalFunc) -> LoxValue:
    instance = _expect_instance(resolve(eval_func(node.object, env), env), node.name)
    value = resolve(eval_func(node.value, env), env)

    cell = instance.fields.get_own(node.name)
    if cell is not None:
        cell.value = value
    else:
        instance.fields.define(node.name, value)

    return value

def eval_this(env: Environment) -> LoxValue:
    cell = env.find_cell("this")

    if cell is None:
        raise LoxRuntimeError("Can't use 'this' outside of a method")

    return cell.value
