"""Core value types, type codes and helpers shared by the virtual machine."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum


class VMError(Exception):
    """Raised when a script or the machine reaches an illegal state."""


class VarType(IntEnum):
    """Base variable type codes (the low byte of a type word)."""

    NONE = 0
    INT1 = 1
    INT2 = 2
    INT4 = 3
    BYTE = 4
    CHAR = 5
    INT16 = 6
    INT32 = 7
    FLOAT = 8
    OBJECT = 9
    STRUCT = 10
    ANY = 12


class ScriptState(IntEnum):
    """Execution state of a script or thread."""

    RUNNING = 1
    SUSPEND = 2
    DEAD = 3
    ENDED = 4
    YIELD = 5


ARRAY_FLAG = 0x10000
ARRAY2_FLAG = 0x100
STRING_TYPE = ARRAY_FLAG | VarType.CHAR

BASE_HANDLE_CLASS = 2000000
BASE_HANDLE_OBJECT = 3000000
BASE_HANDLE_ARRAY = 4000000
BASE_HANDLE_THREAD = 5000000
BASE_HANDLE_FILE = 7000000

COLORS = {
    "red": 0x0000C0,
    "green": 0x00C000,
    "blue": 0xC00000,
    "bright red": 0x0000FF,
    "bright green": 0x00FF00,
    "bright blue": 0xFF0000,
    "yellow": 0x00FFFF,
    "cyan": 0xFFFF00,
    "violet": 0xFF00FF,
    "black": 0x000000,
    "light grey": 0xC0C0C0,
    "dark grey": 0x646464,
    "brown": 0x004080,
}

_BASE_NAMES = {
    0: "NONE",
    1: "INT1",
    2: "INT2",
    3: "INT4",
    4: "BYTE",
    5: "CHAR",
    6: "INT16",
    7: "INT32",
    8: "FLOAT",
    9: "OBJECT",
    10: "STRUCT",
}

_U32 = struct.Struct("<I")


@dataclass
class Var:
    """A typed 32-bit value: a stack slot, local, member or static variable."""

    type: int = 0
    value: int = 0


def var_type_name(type_: int) -> str:
    """Return the readable name of a type word, e.g. ``CHAR[]``."""
    base = _BASE_NAMES.get(type_ & 0xFF, "UNKNOWN")
    if type_ & ARRAY_FLAG:
        suffix = "[][]" if type_ & ARRAY2_FLAG else "[]"
    else:
        suffix = "[]" if type_ & ARRAY2_FLAG else ""
    return base + suffix


def convert_var(type_: int, var: Var) -> int:
    """Return the value of ``var`` converted to ``type_``, or raise VMError."""
    if (
        type_ != var.type
        and var.value != 0
        and (type_ & 0xFF) != VarType.ANY
        and (var.type & 0xFF) != VarType.ANY
    ):
        if var.type == VarType.OBJECT and type_ <= VarType.INT32:
            return var.value
        if var.type <= VarType.INT32 and type_ == VarType.OBJECT:
            return var.value
        if var.type <= VarType.INT32 and type_ <= VarType.INT32:
            return var.value
        if var.type == VarType.STRUCT or type_ == VarType.STRUCT:
            return var.value
        raise VMError(
            f"Can't convert from {var_type_name(var.type)} to {var_type_name(type_)}"
        )
    return var.value


def check_var_type(type_: int) -> None:
    """Raise VMError unless the low byte of ``type_`` is a legal variable type."""
    base = type_ & 0xFF
    if base != VarType.ANY and (base <= 0 or base >= 11):
        raise VMError(f"Illegal variable type:{base}")


def element_type(type_: int) -> int:
    """Return the type of the values read out of an array variable of ``type_``."""
    result = type_ & 0xFFFF
    if result & ARRAY2_FLAG:
        result = (result & ~ARRAY2_FLAG) | ARRAY_FLAG
    return result


def to_int32(value: int) -> int:
    """Wrap an integer to a signed 32-bit value."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def float_to_bits(value: float) -> int:
    """Return the single-precision bit pattern of ``value`` as a signed int."""
    return struct.unpack("<i", struct.pack("<f", value))[0]


def bits_to_float(bits: int) -> float:
    """Interpret the low 32 bits of ``bits`` as a single-precision float."""
    return struct.unpack("<f", _U32.pack(bits & 0xFFFFFFFF))[0]


def read_u32(data: bytes | bytearray | memoryview, offset: int) -> int:
    """Read an unsigned little-endian 32-bit integer."""
    return _U32.unpack_from(data, offset)[0]


def write_u32(data: bytearray | memoryview, offset: int, value: int) -> None:
    """Write the low 32 bits of ``value`` little-endian into ``data``."""
    _U32.pack_into(data, offset, value & 0xFFFFFFFF)