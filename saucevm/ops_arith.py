"""Opcodes for integer and float arithmetic, comparisons and stack shuffling.

Handlers take the machine as their only argument and use its ``stack``
(a :class:`~saucevm.stack.Stack`) and ``rng`` (anything with
``randint(a, b)``) attributes.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any

from .types import Var, VarType, VMError, var_type_name

Handler = Callable[[Any], None]

INT32_MIN = -0x80000000


def _check_number(var: Var) -> Var:
    if var.type > VarType.INT32:
        raise VMError(
            f"Can't perform computations on {var_type_name(var.type)} variables"
        )
    return var


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _push_float(m: Any, value: float) -> None:
    try:
        m.stack.push_float(value)
    except OverflowError:
        m.stack.push_float(math.copysign(math.inf, value))


def _pop_pair(m: Any) -> tuple[Var, Var]:
    b = m.stack.pop_var()
    a = m.stack.pop_var()
    return a, b


def _int_binary(func: Callable[[int, int], int]) -> Handler:
    def handler(m: Any) -> None:
        a, b = _pop_pair(m)
        m.stack.push(func(a.value, b.value), VarType.INT32)

    return handler


def _typed_binary(func: Callable[[int, int], int]) -> Handler:
    def handler(m: Any) -> None:
        b = _check_number(m.stack.pop_var())
        a = _check_number(m.stack.pop_var())
        m.stack.push(func(a.value, b.value), a.type)

    return handler


def _float_binary(func: Callable[[float, float], float]) -> Handler:
    def handler(m: Any) -> None:
        f2 = m.stack.pop_float()
        f1 = m.stack.pop_float()
        _push_float(m, func(f1, f2))

    return handler


def _op_div_int(m: Any) -> None:
    b = m.stack.pop_var()
    divisor = b.value or 1
    a = m.stack.pop_var()
    m.stack.push(_trunc_div(a.value, divisor), VarType.INT32)


def _op_mod(m: Any) -> None:
    b = m.stack.pop_var()
    divisor = b.value or 1
    a = m.stack.pop_var()
    m.stack.push(a.value - divisor * _trunc_div(a.value, divisor), VarType.INT32)


def _op_neg_int(m: Any) -> None:
    var = _check_number(m.stack.pop_var())
    m.stack.push(-var.value, var.type)


def _op_not_int(m: Any) -> None:
    var = m.stack.pop_var()
    m.stack.push(int(var.value == 0), VarType.INT32)


def _op_rand_int(m: Any) -> None:
    v0 = m.stack.pop_var()
    v1 = m.stack.pop_var()
    _check_number(v0)
    _check_number(v1)
    low, high = sorted((v0.value, v1.value))
    m.stack.push(m.rng.randint(low, high), v1.type)


def _op_pop(m: Any) -> None:
    m.stack.pop_var()


def _op_dup(m: Any) -> None:
    var = m.stack.top()
    m.stack.push(var.value, var.type)


def _op_swap(m: Any) -> None:
    a = m.stack.pop_var()
    b = m.stack.pop_var()
    m.stack.push(a.value, a.type)
    m.stack.push(b.value, b.type)


def _op_assert(m: Any) -> None:
    m.stack.pop_var()
    m.stack.pop_var()


def _op_itof(m: Any) -> None:
    var = m.stack.pop_var()
    _push_float(m, float(var.value))


def _op_ftoi(m: Any) -> None:
    value = m.stack.pop_float()
    if not math.isfinite(value):
        result = INT32_MIN
    else:
        result = math.trunc(value)
        if not INT32_MIN <= result <= 0x7FFFFFFF:
            result = INT32_MIN
    m.stack.push(result, VarType.INT32)


def _op_div_float(m: Any) -> None:
    f2 = m.stack.pop_float() or 1.0
    f1 = m.stack.pop_float()
    _push_float(m, f1 / f2)


_HANDLERS: dict[int, Handler] = {
    0x0D: _op_pop,
    0x18: _int_binary(lambda a, b: a + b),
    0x19: _int_binary(lambda a, b: a - b),
    0x1A: _int_binary(lambda a, b: a * b),
    0x1B: _op_div_int,
    0x1C: _op_neg_int,
    0x2A: _int_binary(lambda a, b: int(a != 0 and b != 0)),
    0x2B: _int_binary(lambda a, b: int(a != 0 or b != 0)),
    0x2C: _int_binary(lambda a, b: int(a == b)),
    0x2D: _int_binary(lambda a, b: int(a != b)),
    0x2E: _int_binary(lambda a, b: int(a <= b)),
    0x2F: _int_binary(lambda a, b: int(a >= b)),
    0x30: _int_binary(lambda a, b: int(a < b)),
    0x31: _int_binary(lambda a, b: int(a > b)),
    0x45: _op_mod,
    0x46: _op_rand_int,
    0x48: _op_not_int,
    0x4C: _op_swap,
    0x62: _typed_binary(lambda a, b: a & b),
    0x63: _typed_binary(lambda a, b: a | b),
    0x68: _typed_binary(min),
    0x69: _typed_binary(max),
    0x6C: _op_dup,
    0x77: _op_itof,
    0x78: _op_ftoi,
    0x7D: _float_binary(lambda a, b: a + b),
    0x7E: _float_binary(lambda a, b: a - b),
    0x7F: _float_binary(lambda a, b: a * b),
    0x80: _op_div_float,
    0x86: _float_binary(lambda a, b: 1.0 if a == b else 0.0),
    0x87: _float_binary(lambda a, b: 1.0 if a != b else 0.0),
    0xAF: _op_assert,
}


def register(table: Any) -> None:
    """Install this module's opcode handlers into ``table`` (indexed by opcode)."""
    for opcode, handler in _HANDLERS.items():
        table[opcode] = handler