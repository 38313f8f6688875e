"""AST node classes for Lox programs.

Expressions and statements are closed sum types: every syntactic form is one
dataclass, and the evaluator dispatches on them with exhaustive `match`
statements. Each node owns its children; nodes are never shared between
parents. `line` records where the node started and is ignored by equality so
trees built by hand in tests compare equal to parsed ones.

`to_lark` turns a node (or a whole program) into a `lark.Tree`, which gives a
readable `pretty()` dump for debugging.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, List, Optional, Sequence, Union

from lark import Token, Tree
from typing_extensions import TypeAlias

from .token_types import TT

# ---------- Expressions ----------

@dataclass
class Literal:
    value: Union[int, str, bool, None]
    line: int = field(default=0, compare=False)

@dataclass
class Variable:
    name: str
    line: int = field(default=0, compare=False)

@dataclass
class Unary:
    op: TT
    operand: 'Expr'
    line: int = field(default=0, compare=False)

@dataclass
class Binary:
    op: TT
    left: 'Expr'
    right: 'Expr'
    line: int = field(default=0, compare=False)

@dataclass
class Logical:
    op: TT  # TT.AND or TT.OR
    left: 'Expr'
    right: 'Expr'
    line: int = field(default=0, compare=False)

@dataclass
class Grouping:
    inner: 'Expr'
    line: int = field(default=0, compare=False)

@dataclass
class Assign:
    target: str
    value: 'Expr'
    line: int = field(default=0, compare=False)

@dataclass
class Call:
    callee: 'Expr'
    arguments: List['Expr']
    line: int = field(default=0, compare=False)

@dataclass
class Get:
    object: 'Expr'
    name: str
    line: int = field(default=0, compare=False)

@dataclass
class Set:
    object: 'Expr'
    name: str
    value: 'Expr'
    line: int = field(default=0, compare=False)

@dataclass
class This:
    line: int = field(default=0, compare=False)

@dataclass
class Lambda:
    params: List[str]
    body: 'Block'
    line: int = field(default=0, compare=False)

Expr: TypeAlias = Union[
    Literal, Variable, Unary, Binary, Logical, Grouping,
    Assign, Call, Get, Set, This, Lambda,
]

# ---------- Statements ----------

@dataclass
class Expression:
    expr: Expr
    line: int = field(default=0, compare=False)

@dataclass
class Print:
    expr: Expr
    line: int = field(default=0, compare=False)

@dataclass
class Var:
    name: str
    initializer: Expr  # Literal(None) when the source omits `= ...`
    line: int = field(default=0, compare=False)

@dataclass
class Block:
    statements: List['Stmt']
    line: int = field(default=0, compare=False)

@dataclass
class If:
    condition: Expr
    then_branch: 'Stmt'
    else_branch: Optional['Stmt'] = None
    line: int = field(default=0, compare=False)

@dataclass
class While:
    condition: Expr
    body: 'Stmt'
    line: int = field(default=0, compare=False)

@dataclass
class Function:
    name: str
    params: List[str]
    body: Block
    line: int = field(default=0, compare=False)

@dataclass
class Return:
    value: Optional[Expr] = None
    line: int = field(default=0, compare=False)

@dataclass
class Class:
    name: str
    methods: List[Function]
    line: int = field(default=0, compare=False)

Stmt: TypeAlias = Union[Expression, Print, Var, Block, If, While, Function, Return, Class]

Node: TypeAlias = Union[Expr, Stmt]

_NODE_TYPES = (
    Literal, Variable, Unary, Binary, Logical, Grouping, Assign, Call, Get, Set, This, Lambda,
    Expression, Print, Var, Block, If, While, Function, Return, Class,
)

def is_node(value: Any) -> bool:
    return isinstance(value, _NODE_TYPES)

# ---------- Debug dumps ----------

def _label(node: Node) -> str:
    name = type(node).__name__
    return {'Expression': 'expr_stmt', 'Var': 'var_decl', 'Function': 'fun_decl', 'Class': 'class_decl'}.get(name, name.lower())

def _literal_text(value: Union[int, str, bool, None]) -> str:
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, str):
        return repr(value)
    return str(value)

def _leaf(kind: str, value: Any) -> Token:
    if isinstance(value, TT):
        return Token(kind, value.name)
    if kind == 'VALUE':
        return Token(kind, _literal_text(value))
    return Token(kind, str(value))

def to_lark(node: Union[Node, Sequence[Stmt]]) -> Tree:
    """Convert a node, or a program (statement list), to a lark Tree."""
    if not is_node(node):
        return Tree('program', [to_lark(stmt) for stmt in node])

    children: List[Union[Tree, Token]] = []

    for f in fields(node):
        if f.name == 'line':
            continue
        value = getattr(node, f.name)

        if is_node(value):
            children.append(to_lark(value))
        elif isinstance(value, list):
            items = [to_lark(v) if is_node(v) else Token('NAME', v) for v in value]
            children.append(Tree(f.name, items))
        elif value is None and not isinstance(node, Literal):
            continue
        else:
            children.append(_leaf(f.name.upper(), value))

    return Tree(_label(node), children)
