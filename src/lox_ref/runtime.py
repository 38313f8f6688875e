from __future__ import annotations

from typing import List

from .types import (
    ArityError,
    BoundMethod,
    Environment,
    EvalTypeError,
    LoxClass,
    LoxFn,
    LoxInstance,
    LoxNil,
    LoxValue,
)
from .eval.helpers import type_name

def call_value(callee: LoxValue, args: List[LoxValue]) -> LoxValue:
    match callee:
        case LoxFn():
            return call_function(callee, args, callee.captured)
        case BoundMethod(fn=fn, receiver=receiver):
            return call_function(fn, args, bind_this(fn, receiver))
        case LoxClass():
            return instantiate(callee, args)
        case _:
            raise EvalTypeError(f"Can only call functions and classes, not {type_name(callee)}")

def bind_this(fn: LoxFn, receiver: LoxInstance) -> Environment:
    """Scope layer holding `this`, between the method's captured scope and its call scope."""
    scope = Environment(parent=fn.captured)
    scope.define("this", receiver)
    return scope

def call_function(fn: LoxFn, args: List[LoxValue], scope: Environment) -> LoxValue:
    """
    Call semantics:
    - arity must match len(fn.params) exactly
    - a fresh layer under `scope` holds the parameters and the body's locals
    - a `Returning` result becomes the call's value; falling off the end yields nil
    - initializers always yield their instance
    """
    from .evaluator import exec_stmt  # local import to avoid cycle
    from .eval.blocks import exec_block

    if len(args) != len(fn.params):
        raise ArityError(f"Function '{fn.name}'", len(fn.params), len(args))

    callee_env = Environment(parent=scope)

    for name, val in zip(fn.params, args):
        callee_env.define(name, val)

    result = exec_block(fn.body.statements, callee_env, exec_stmt)

    if fn.is_initializer:
        return callee_env.lookup("this")

    if result is None:
        return LoxNil()

    return result.value

def instantiate(klass: LoxClass, args: List[LoxValue]) -> LoxInstance:
    instance = LoxInstance(klass=klass, fields=Environment(parent=klass.closure))
    init = klass.find_method("init")

    if init is not None:
        call_function(init, args, bind_this(init, instance))
    elif args:
        raise ArityError(f"Class '{klass.name}'", 0, len(args))

    return instance
