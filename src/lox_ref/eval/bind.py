from __future__ import annotations

from typing import Callable

from ..tree import Assign, Expr, Var
from ..types import Environment, IdentRef, LoxNil, LoxValue

EvalFunc = Callable[[Expr, Environment], LoxValue]

def exec_var_decl(node: Var, env: Environment, eval_func: EvalFunc) -> None:
    """`var name = init;` in the current layer.

    A bare name as initializer aliases the referenced variable's cell;
    anything else binds an independent value.
    """
    value = eval_func(node.initializer, env)

    if isinstance(value, IdentRef):
        env.define_cell(node.name, env.get(value.name))
        return

    env.define(node.name, value)

def eval_assign(node: Assign, env: Environment, eval_func: EvalFunc) -> LoxValue:
    """`name = value` on the nearest existing binding; never declares."""
    value = eval_func(node.value, env)

    if isinstance(value, IdentRef):
        value = env.lookup(value.name)

    if isinstance(value, LoxNil):
        env.remove(node.target)
    else:
        env.assign_existing(node.target, value)

    return value
