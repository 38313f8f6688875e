"""Static capture pass run when a function value is created.

The resolver walks a function body and collects the names it uses that are
not bound inside the function. Each such name that is visible from the
defining scope is captured by *cell*, so the closure and the outer scope see
each other's writes. Names a block declares (`var`, `fun`, `class`) are
known for the whole block before it is walked; parameters and the body's
top-level declarations share the function's outermost scope.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Set

from ..tree import (
    Assign, Binary, Block, Call, Class, Expr, Expression, Function, Get, Grouping, If,
    Lambda, Literal, Logical, Print, Return, Set as SetProp, Stmt, This, Unary, Var,
    Variable, While,
)
from ..types import Cell, Environment

def declared_names(statements: Iterable[Stmt]) -> Set[str]:
    names: Set[str] = set()

    for stmt in statements:
        match stmt:
            case Var(name=name) | Function(name=name) | Class(name=name):
                names.add(name)

    return names

class CaptureResolver:
    def __init__(self, defining_env: Environment):
        self.defining_env = defining_env
        self.scopes: List[Set[str]] = []
        self.captured: Dict[str, Cell] = {}

    def resolve_function(self, params: Iterable[str], body: Block) -> Dict[str, Cell]:
        self._walk_function(set(params), body.statements)
        return self.captured

    def _walk_function(self, params: Set[str], statements: List[Stmt]) -> None:
        self.scopes.append(params | declared_names(statements))
        try:
            for stmt in statements:
                self._walk_stmt(stmt)
        finally:
            self.scopes.pop()

    def _reference(self, name: str) -> None:
        if name in self.captured:
            return

        for scope in self.scopes:
            if name in scope:
                return

        cell = self.defining_env.find_cell(name)
        if cell is not None:
            self.captured[name] = cell

    def _walk_stmt(self, stmt: Stmt) -> None:
        match stmt:
            case Expression(expr=expr) | Print(expr=expr):
                self._walk_expr(expr)
            case Var(initializer=init):
                self._walk_expr(init)
            case Block(statements=statements):
                self.scopes.append(declared_names(statements))
                try:
                    for child in statements:
                        self._walk_stmt(child)
                finally:
                    self.scopes.pop()
            case If(condition=cond, then_branch=then_branch, else_branch=else_branch):
                self._walk_expr(cond)
                self._walk_stmt(then_branch)
                if else_branch is not None:
                    self._walk_stmt(else_branch)
            case While(condition=cond, body=body):
                self._walk_expr(cond)
                self._walk_stmt(body)
            case Function(params=params, body=body):
                self._walk_function(set(params), body.statements)
            case Return(value=value):
                if value is not None:
                    self._walk_expr(value)
            case Class(methods=methods):
                for method in methods:
                    self._walk_function(set(method.params) | {"this"}, method.body.statements)
            case _:
                raise TypeError(f"Unknown statement node {type(stmt).__name__}")

    def _walk_expr(self, expr: Expr) -> None:
        match expr:
            case Literal():
                pass
            case Variable(name=name):
                self._reference(name)
            case This():
                self._reference("this")
            case Assign(target=target, value=value):
                self._walk_expr(value)
                self._reference(target)
            case Unary(operand=operand) | Grouping(inner=operand):
                self._walk_expr(operand)
            case Binary(left=left, right=right) | Logical(left=left, right=right):
                self._walk_expr(left)
                self._walk_expr(right)
            case Call(callee=callee, arguments=arguments):
                self._walk_expr(callee)
                for arg in arguments:
                    self._walk_expr(arg)
            case Get(object=obj):
                self._walk_expr(obj)
            case SetProp(object=obj, value=value):
                self._walk_expr(obj)
                self._walk_expr(value)
            case Lambda(params=params, body=body):
                self._walk_function(set(params), body.statements)
            case _:
                raise TypeError(f"Unknown expression node {type(expr).__name__}")

def resolve(body: Block, parameters: Iterable[str], defining_env: Environment) -> Dict[str, Cell]:
    """Map each free name of `body` visible from `defining_env` to its live cell."""
    return CaptureResolver(defining_env).resolve_function(parameters, body)

def capture_environment(body: Block, parameters: Iterable[str], defining_env: Environment) -> Environment:
    """Build a function's captured scope: the captured cells over the global scope."""
    captured = Environment(parent=defining_env.root())

    for name, cell in resolve(body, parameters, defining_env).items():
        captured.define_cell(name, cell)

    return captured
