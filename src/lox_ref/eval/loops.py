from __future__ import annotations

from typing import Callable, Optional

from ..tree import Expr, If, Stmt, While
from ..types import Environment, LoxValue, Returning
from .helpers import require_bool, resolve

EvalFunc = Callable[[Expr, Environment], LoxValue]
ExecFunc = Callable[[Stmt, Environment], Optional[Returning]]

def _condition(cond: Expr, env: Environment, eval_func: EvalFunc, what: str) -> bool:
    return require_bool(resolve(eval_func(cond, env), env), what)

def exec_if(node: If, env: Environment, eval_func: EvalFunc, exec_func: ExecFunc) -> Optional[Returning]:
    if _condition(node.condition, env, eval_func, "If condition"):
        return exec_func(node.then_branch, env)

    if node.else_branch is not None:
        return exec_func(node.else_branch, env)

    return None

def exec_while(node: While, env: Environment, eval_func: EvalFunc, exec_func: ExecFunc) -> Optional[Returning]:
    while _condition(node.condition, env, eval_func, "Loop condition"):
        result = exec_func(node.body, env)
        if result is not None:
            return result

    return None
