from __future__ import annotations

from typing import Callable

from ..token_types import TT
from ..tree import Binary, Expr, Logical, Unary
from ..types import (
    Environment,
    EvalTypeError,
    LoxBool,
    LoxNil,
    LoxNumber,
    LoxString,
    LoxValue,
    UnsupportedOperationError,
)
from .helpers import resolve, type_name

EvalFunc = Callable[[Expr, Environment], LoxValue]

OP_SYMBOLS = {
    TT.PLUS: '+', TT.MINUS: '-', TT.STAR: '*', TT.SLASH: '/', TT.MOD: '%',
    TT.EQ: '==', TT.NEQ: '!=', TT.LT: '<', TT.LTE: '<=', TT.GT: '>', TT.GTE: '>=',
    TT.NEG: '!', TT.AND: 'and', TT.OR: 'or',
}

_SCALARS = (LoxNumber, LoxString, LoxBool, LoxNil)

def eval_unary(node: Unary, env: Environment, eval_func: EvalFunc) -> LoxValue:
    operand = resolve(eval_func(node.operand, env), env)

    match node.op, operand:
        case TT.MINUS, LoxNumber(value=n):
            return LoxNumber(-n)
        case TT.NEG, LoxBool(value=b):
            return LoxBool(not b)
        case TT.MINUS, _:
            raise EvalTypeError(f"Operand of unary '-' must be a number, got {type_name(operand)}")
        case TT.NEG, _:
            raise EvalTypeError(f"Operand of '!' must be a boolean, got {type_name(operand)}")
        case _:
            raise UnsupportedOperationError(f"Unsupported unary operator {node.op.name}")

def eval_binary(node: Binary, env: Environment, eval_func: EvalFunc) -> LoxValue:
    lhs = resolve(eval_func(node.left, env), env)
    rhs = resolve(eval_func(node.right, env), env)

    return apply_binary_operator(node.op, lhs, rhs)

def eval_logical(node: Logical, env: Environment, eval_func: EvalFunc) -> LoxValue:
    """Short-circuit `and` / `or`; both operands must be booleans."""
    op = OP_SYMBOLS[node.op]
    lhs = _logical_operand(op, resolve(eval_func(node.left, env), env))

    if node.op == TT.OR and lhs:
        return LoxBool(True)
    if node.op == TT.AND and not lhs:
        return LoxBool(False)

    rhs = _logical_operand(op, resolve(eval_func(node.right, env), env))
    return LoxBool(rhs)

def _logical_operand(op: str, value: LoxValue) -> bool:
    if not isinstance(value, LoxBool):
        raise UnsupportedOperationError(f"Operands of '{op}' must be booleans, got {type_name(value)}")

    return value.value

def apply_binary_operator(op: TT, lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    if op in (TT.EQ, TT.NEQ):
        equal = values_equal(op, lhs, rhs)
        return LoxBool(equal if op == TT.EQ else not equal)

    match lhs, rhs:
        case LoxNumber(value=a), LoxNumber(value=b):
            return _number_op(op, a, b)
        case LoxString(value=a), LoxString(value=b) if op == TT.PLUS:
            return LoxString(a + b)
        case _:
            raise EvalTypeError(
                f"Unsupported operand types for '{OP_SYMBOLS.get(op, op.name)}': "
                f"{type_name(lhs)} and {type_name(rhs)}"
            )

def values_equal(op: TT, lhs: LoxValue, rhs: LoxValue) -> bool:
    if type(lhs) is not type(rhs):
        raise EvalTypeError(
            f"Cannot compare {type_name(lhs)} and {type_name(rhs)} with '{OP_SYMBOLS[op]}'"
        )

    if isinstance(lhs, _SCALARS):
        return lhs == rhs

    # functions, classes and instances compare by identity
    return lhs is rhs

def _number_op(op: TT, a: int, b: int) -> LoxValue:
    match op:
        case TT.PLUS:
            return LoxNumber(a + b)
        case TT.MINUS:
            return LoxNumber(a - b)
        case TT.STAR:
            return LoxNumber(a * b)
        case TT.SLASH:
            _check_divisor(b)
            quotient = abs(a) // abs(b)
            return LoxNumber(quotient if (a < 0) == (b < 0) else -quotient)
        case TT.MOD:
            _check_divisor(b)
            return LoxNumber(a % abs(b))
        case TT.LT:
            return LoxBool(a < b)
        case TT.LTE:
            return LoxBool(a <= b)
        case TT.GT:
            return LoxBool(a > b)
        case TT.GTE:
            return LoxBool(a >= b)
        case _:
            raise UnsupportedOperationError(f"Unsupported numeric operator {op.name}")

def _check_divisor(b: int) -> None:
    if b == 0:
        raise EvalTypeError("Division by zero")
