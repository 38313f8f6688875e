from __future__ import annotations

from typing import Callable

from ..tree import Expr, Print, Return
from ..types import Environment, LoxNil, LoxValue, Returning
from .helpers import resolve, stringify

EvalFunc = Callable[[Expr, Environment], LoxValue]

def exec_return(node: Return, env: Environment, eval_func: EvalFunc) -> Returning:
    if node.value is None:
        return Returning(LoxNil())

    return Returning(resolve(eval_func(node.value, env), env))

def exec_print(node: Print, env: Environment, eval_func: EvalFunc) -> None:
    value = resolve(eval_func(node.expr, env), env)
    print(stringify(value))
