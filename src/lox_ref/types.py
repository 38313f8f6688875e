from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from typing_extensions import TypeAlias, TypeGuard

from .tree import Block

# ---------- Value Model ----------

@dataclass
class LoxNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass
class LoxNumber:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass
class LoxString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class LoxBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class IdentRef:
    """A name not yet resolved against the active environment chain.

    Produced by evaluating a Variable; the consumer decides whether it is an
    rvalue (resolve to the value), an alias (share the cell) or a callee.
    """
    name: str
    def __repr__(self) -> str:
        return f"<ref {self.name}>"

@dataclass(eq=False)
class LoxFn:
    name: str
    params: Tuple[str, ...]
    body: Block
    captured: 'Environment'      # closure scope built by the capture resolver
    is_initializer: bool = False
    def __repr__(self) -> str:
        return f"<fn {self.name}>"

@dataclass(eq=False)
class LoxClass:
    name: str
    methods: Dict[str, LoxFn]
    closure: 'Environment'
    def find_method(self, name: str) -> Optional[LoxFn]:
        return self.methods.get(name)
    def __repr__(self) -> str:
        return self.name

@dataclass(eq=False)
class LoxInstance:
    klass: LoxClass
    fields: 'Environment'
    def __repr__(self) -> str:
        return f"{self.klass.name} instance"

@dataclass(eq=False)
class BoundMethod:
    fn: LoxFn
    receiver: LoxInstance
    def __repr__(self) -> str:
        return f"<fn {self.fn.name}>"

LoxCallable: TypeAlias = LoxFn | LoxClass | BoundMethod

LoxValue: TypeAlias = (
    LoxNil
    | LoxNumber
    | LoxString
    | LoxBool
    | IdentRef
    | LoxFn
    | LoxClass
    | LoxInstance
    | BoundMethod
)

_CALLABLE_TYPES: Tuple[type, ...] = (LoxFn, LoxClass, BoundMethod)

def is_callable(value: LoxValue) -> TypeGuard[LoxCallable]:
    return isinstance(value, _CALLABLE_TYPES)

# ---------- Statement results ----------

@dataclass
class Returning:
    """Statement result that unwinds to the nearest function-call boundary."""
    value: LoxValue

# ---------- Scopes ----------

@dataclass(eq=False)
class Cell:
    """Shared mutable storage a name is bound to."""
    value: LoxValue

class Environment:
    """One scope layer: name -> Cell, plus a link to the enclosing layer."""

    def __init__(self, parent: Optional['Environment']=None):
        self.parent = parent
        self.values: Dict[str, Cell] = {}

    def define(self, name: str, value: LoxValue) -> Cell:
        """Bind `name` in this layer to a fresh cell, replacing any previous binding."""
        cell = Cell(value)
        self.values[name] = cell
        return cell

    def define_cell(self, name: str, cell: Cell) -> None:
        """Bind `name` in this layer to an existing cell (aliasing)."""
        self.values[name] = cell

    def find_cell(self, name: str) -> Optional[Cell]:
        env: Optional[Environment] = self

        while env is not None:
            cell = env.values.get(name)
            if cell is not None:
                return cell
            env = env.parent

        return None

    def get(self, name: str) -> Cell:
        cell = self.find_cell(name)

        if cell is None:
            raise UndefinedVariableError(name)

        return cell

    def get_own(self, name: str) -> Optional[Cell]:
        return self.values.get(name)

    def lookup(self, name: str) -> LoxValue:
        return self.get(name).value

    def assign_existing(self, name: str, value: LoxValue) -> None:
        # mutate in place; never creates a binding
        self.get(name).value = value

    def remove(self, name: str) -> None:
        # keep the cell so closures holding it observe nil
        self.get(name).value = LoxNil()

    def push_child(self) -> 'Environment':
        return Environment(parent=self)

    def root(self) -> 'Environment':
        env = self
        while env.parent is not None:
            env = env.parent
        return env

    def __contains__(self, name: str) -> bool:
        return self.find_cell(name) is not None

    def __repr__(self) -> str:
        names = ", ".join(sorted(self.values))
        return f"<env [{names}]{' ^' if self.parent is not None else ''}>"

# ---------- Exceptions ----------

class LoxRuntimeError(Exception):
    line: Optional[int]

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.line = None

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        return f"{self.message} (line {self.line})"

class EvalTypeError(LoxRuntimeError):
    pass

class UndefinedVariableError(LoxRuntimeError):
    def __init__(self, name: str, what: str = "variable"):
        super().__init__(f"Undefined {what} '{name}'")
        self.name = name

class ArityError(LoxRuntimeError):
    def __init__(self, callee: str, expected: int, got: int):
        super().__init__(f"{callee} expects {expected} argument(s); got {got}")
        self.expected = expected
        self.got = got

class UnsupportedOperationError(LoxRuntimeError):
    pass

class LoxStackOverflowError(LoxRuntimeError):
    def __init__(self, message: str = "Stack overflow: maximum recursion depth exceeded"):
        super().__init__(message)

