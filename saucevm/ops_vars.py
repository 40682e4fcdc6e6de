"""Opcodes that move values between the stack and variables.

Handlers take the machine as their only argument. Besides ``stack`` they use
``script`` (with ``code_data``, ``code_offset``, ``obj``, ``class_data`` and
``local_vars``), ``objects``, ``classes`` and the machine's ``local_var``,
``member_var`` and ``static_var`` lookups.

A variable reference in the code stream may carry a count in bits 16..23;
the opcode then works on that many consecutive variables.
"""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from .objects import VMObject
from .types import (
    BASE_HANDLE_CLASS,
    Var,
    VarType,
    VMError,
    check_var_type,
    convert_var,
    read_u32,
    to_int32,
)

Handler = Callable[[Any], None]


def _fetch_u8(m: Any) -> int:
    script = m.script
    if script.code_offset >= len(script.code_data):
        raise VMError(f"Code offset {script.code_offset} out of range")
    value = script.code_data[script.code_offset]
    script.code_offset += 1
    return value


def _fetch_u32(m: Any) -> int:
    script = m.script
    try:
        value = read_u32(script.code_data, script.code_offset)
    except struct.error:
        raise VMError(f"Code offset {script.code_offset} out of range") from None
    script.code_offset += 4
    return value


def _split_ref(num: int) -> tuple[int, int]:
    """Split a variable reference into its index and its count."""
    if num & 0xFFFF0000:
        if num & 0xFF000000:
            raise VMError(f"Variable reference 0x{num:08x} has an illegal count")
        return num & 0xFFFF, (num >> 16) & 0xFF
    return num, 1


def _run(first: Var, pools: Iterable[list[Var]], count: int) -> list[Var]:
    """Return ``count`` consecutive variables starting at ``first``."""
    if count == 1:
        return [first]
    for pool in pools:
        for pos, var in enumerate(pool):
            if var is first:
                run = pool[pos : pos + count]
                if len(run) < count:
                    raise VMError(f"Variable run of {count} out of range")
                return run
    raise VMError("Variable run not found")


def _static_pools(m: Any) -> Iterator[list[Var]]:
    yield m.script.class_data.static_vars
    for handle in range(BASE_HANDLE_CLASS + 1, BASE_HANDLE_CLASS + len(m.classes) + 1):
        yield m.classes.get(handle).static_vars


def _static_run(m: Any, first: Var, count: int) -> list[Var]:
    return _run(first, _static_pools(m), count)


def _pop_object(m: Any) -> VMObject:
    handle = m.stack.pop(VarType.OBJECT)
    if handle == 0:
        raise VMError("Accessing member variable from a NULL object")
    return m.objects.get(handle)


def _current_object(m: Any, opname: str) -> VMObject:
    obj = m.script.obj
    if obj is None:
        raise VMError(f"{opname} called from static method")
    return obj


def _push_run(m: Any, run: list[Var]) -> None:
    for var in run:
        m.stack.push(var.value, var.type)


def _pop_run(m: Any, run: list[Var]) -> None:
    for var in reversed(run):
        value = m.stack.pop_var()
        check_var_type(value.type)
        check_var_type(var.type)
        var.value = convert_var(var.type, value)


def _local_run(m: Any) -> list[Var]:
    index, count = _split_ref(_fetch_u32(m))
    return _run(m.local_var(index), [m.script.local_vars], count)


def _member_run(m: Any, obj: VMObject) -> list[Var]:
    index, count = _split_ref(_fetch_u32(m))
    return _run(m.member_var(obj, index), [obj.members], count)


def _static_var_run(m: Any) -> list[Var]:
    index, count = _split_ref(_fetch_u32(m))
    return _static_run(m, m.static_var(m.script.class_data, index), count)


def _op_push_int8(m: Any) -> None:
    m.stack.push(_fetch_u8(m), VarType.INT32)


def _op_push_int32(m: Any) -> None:
    m.stack.push(to_int32(_fetch_u32(m)), VarType.INT32)


def _op_push_float(m: Any) -> None:
    m.stack.push(to_int32(_fetch_u32(m)), VarType.FLOAT)


def _op_push_local(m: Any) -> None:
    _push_run(m, _local_run(m))


def _op_push_me(m: Any) -> None:
    obj = _current_object(m, "push_me")
    _push_run(m, _member_run(m, obj))


def _op_push_member(m: Any) -> None:
    obj = _pop_object(m)
    _push_run(m, _member_run(m, obj))


def _op_push_static(m: Any) -> None:
    _push_run(m, _static_var_run(m))


def _op_pop_local(m: Any) -> None:
    _pop_run(m, _local_run(m))


def _op_pop_me(m: Any) -> None:
    obj = _current_object(m, "pop_me")
    _pop_run(m, _member_run(m, obj))


def _op_pop_member(m: Any) -> None:
    obj = _pop_object(m)
    _pop_run(m, _member_run(m, obj))


def _op_pop_static(m: Any) -> None:
    _pop_run(m, _static_var_run(m))


_HANDLERS: dict[int, Handler] = {
    0x06: _op_push_int8,
    0x07: _op_push_int32,
    0x08: _op_push_local,
    0x09: _op_push_me,
    0x0A: _op_push_member,
    0x0B: _op_push_static,
    0x0C: _op_push_static,
    0x0E: _op_pop_local,
    0x0F: _op_pop_me,
    0x10: _op_pop_member,
    0x11: _op_pop_static,
    0x12: _op_pop_static,
    0x8C: _op_push_float,
}


def register(table: Any) -> None:
    """Install this module's opcode handlers into ``table`` (indexed by opcode)."""
    for opcode, handler in _HANDLERS.items():
        table[opcode] = handler