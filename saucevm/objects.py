"""Script objects and the fixed-size pool they live in."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .types import BASE_HANDLE_OBJECT, Var, VMError, check_var_type

DEFAULT_OBJECT_COUNT = 1024


@dataclass
class VMObject:
    """An instance of a script class; members are numbered from 1."""

    handle: int
    class_handle: int
    members: list[Var] = field(default_factory=lambda: [Var()])

    @property
    def members_count(self) -> int:
        return len(self.members) - 1

    def member(self, index: int) -> Var:
        """Return the member variable at ``index``."""
        if index < 0 or index > self.members_count:
            raise VMError(
                f"Member index {index} out of range (1..{self.members_count})"
            )
        return self.members[index]


class ObjectPool:
    """Allocates objects in numbered slots; slot 0 is never used."""

    def __init__(self, size: int = DEFAULT_OBJECT_COUNT) -> None:
        self.size = size
        self._slots: list[VMObject | None] = [None] * size
        self._free = list(range(size - 1, 0, -1))

    def new(self, class_handle: int, default_members: Iterable[Var] = ()) -> VMObject:
        """Create an object of a class, copying the class's default members."""
        members = [Var()]
        for var in default_members:
            check_var_type(var.type)
            members.append(Var(var.type, var.value))
        if not self._free:
            raise VMError("No free object slots")
        index = self._free.pop()
        obj = VMObject(BASE_HANDLE_OBJECT + index, class_handle, members)
        self._slots[index] = obj
        return obj

    def get(self, handle: int) -> VMObject:
        """Return the live object with ``handle``."""
        index = handle - BASE_HANDLE_OBJECT
        if index < 0 or index >= self.size:
            raise VMError(
                f"Object handle {handle} out of range "
                f"({BASE_HANDLE_OBJECT}..{BASE_HANDLE_OBJECT + self.size})"
            )
        obj = self._slots[index]
        if obj is None or obj.handle != handle:
            raise VMError(f"Object handle {handle} was deleted")
        return obj

    def release(self, handle: int) -> None:
        """Free the slot of the object with ``handle``; handle 0 is ignored."""
        if handle == 0:
            return
        obj = self.get(handle)
        index = obj.handle - BASE_HANDLE_OBJECT
        self._slots[index] = None
        self._free.append(index)