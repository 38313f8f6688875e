from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..tree import Stmt
from ..types import Environment, Returning

ExecFunc = Callable[[Stmt, Environment], Optional[Returning]]

def exec_block(statements: Sequence[Stmt], env: Environment, exec_func: ExecFunc) -> Optional[Returning]:
    """Run statements in `env`, stopping at the first `Returning` result."""
    for stmt in statements:
        result = exec_func(stmt, env)
        if result is not None:
            return result

    return None

def exec_scoped_block(statements: Sequence[Stmt], env: Environment, exec_func: ExecFunc) -> Optional[Returning]:
    # the child layer is dropped with this frame on every exit path
    return exec_block(statements, env.push_child(), exec_func)
