from __future__ import annotations

from typing import Union

from ..types import (
    BoundMethod,
    Environment,
    EvalTypeError,
    IdentRef,
    LoxBool,
    LoxClass,
    LoxFn,
    LoxInstance,
    LoxNil,
    LoxNumber,
    LoxString,
    LoxValue,
)

def resolve(value: LoxValue, env: Environment) -> LoxValue:
    """Turn an identifier reference into the value its cell currently holds."""
    if isinstance(value, IdentRef):
        return env.lookup(value.name)

    return value

def from_literal(raw: Union[int, str, bool, None]) -> LoxValue:
    if raw is None:
        return LoxNil()
    if isinstance(raw, bool):
        return LoxBool(raw)
    if isinstance(raw, int):
        return LoxNumber(raw)

    return LoxString(raw)

def require_bool(value: LoxValue, what: str) -> bool:
    if not isinstance(value, LoxBool):
        raise EvalTypeError(f"{what} must be a boolean, got {type_name(value)}")

    return value.value

def type_name(value: LoxValue) -> str:
    match value:
        case LoxNil():
            return "nil"
        case LoxNumber():
            return "number"
        case LoxString():
            return "string"
        case LoxBool():
            return "boolean"
        case LoxFn() | BoundMethod():
            return "function"
        case LoxClass():
            return "class"
        case LoxInstance():
            return "instance"
        case _:
            return type(value).__name__

def stringify(value: LoxValue) -> str:
    match value:
        case LoxString(value=s):
            return s
        case LoxNumber(value=n):
            return str(n)
        case LoxBool(value=b):
            return "true" if b else "false"
        case LoxNil():
            return "nil"
        case _:
            return repr(value)
