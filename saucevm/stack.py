"""The operand stack of the virtual machine."""

from __future__ import annotations

from .types import Var, VarType, VMError, bits_to_float, float_to_bits, to_int32, var_type_name

DEFAULT_STACK_SIZE = 1024


class Stack:
    """A bounded stack of typed values."""

    def __init__(self, size: int = DEFAULT_STACK_SIZE) -> None:
        self.size = size
        self._items: list[Var] = []

    def push(self, value: int, type_: int) -> None:
        """Push a value of the given type."""
        if len(self._items) + 1 >= self.size:
            raise VMError("Stack overflow")
        self._items.append(Var(type_, to_int32(value)))

    def pop(self, expected_type: int) -> int:
        """Pop a value, checking its type unless the value is zero."""
        var = self.pop_var()
        if var.value != 0:
            _compare_types(var.type, expected_type)
        return var.value

    def pop_var(self) -> Var:
        """Pop and return the top slot without any type check."""
        if not self._items:
            raise VMError("Stack underflow")
        return self._items.pop()

    def top(self) -> Var:
        """Return a copy of the top slot, leaving it on the stack."""
        if not self._items:
            raise VMError("Stack underflow")
        var = self._items[-1]
        return Var(var.type, var.value)

    def push_float(self, value: float) -> None:
        """Push a float stored as its single-precision bit pattern."""
        self.push(float_to_bits(value), VarType.FLOAT)

    def pop_float(self) -> float:
        """Pop a float value."""
        return bits_to_float(self.pop(VarType.FLOAT))

    def clear(self) -> None:
        """Drop every value."""
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


def _compare_types(actual: int, expected: int) -> None:
    if actual == expected or actual == VarType.ANY or expected == VarType.ANY:
        return
    raise VMError(
        f"Popped wrong type {var_type_name(actual)}, expected {var_type_name(expected)}"
    )