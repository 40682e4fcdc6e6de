"""Loaded class data: strings, references, code entries and the class table."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TypeVar

from .types import BASE_HANDLE_CLASS, Var, VMError

DEFAULT_CLASS_COUNT = 1024

METHOD_FLAG_STATIC = 0x2
METHOD_FLAG_SCRIPT = 0x8

_T = TypeVar("_T")


class RefType(IntEnum):
    """Kinds of entries in a class's reference table."""

    CLASS = 1
    METHOD = 2
    MEMBER = 3
    STATIC = 4


@dataclass
class RefEntry:
    """A reference to a class, method, member or static variable.

    ``class_index`` is the index of the class reference the entry belongs to;
    1 means the class that holds the table. The remaining fields are filled in
    lazily as references are resolved.
    """

    type: RefType
    name_index: int = 0
    class_index: int = 1
    data_index: int = 0
    member_index: int = 0
    flags: int = 0
    class_handle: int = 0


@dataclass
class CodeEntry:
    """The code and local-variable layout of one method.

    ``locals`` holds the types of local variables 1..n; the first
    ``args_count`` of them receive the call's arguments. A virtual entry has
    no code of its own and takes it from the parent class when fixed up.
    """

    locals: list[int] = field(default_factory=list)
    args_count: int = 0
    code_offset: int = 0
    code: bytearray | None = None
    class_handle: int = -1
    virtual: bool = False


@dataclass(eq=False)
class ClassData:
    """Everything loaded for one class. All tables are indexed from 1."""

    strings: list[str] = field(default_factory=list)
    refs: list[RefEntry] = field(default_factory=list)
    codes: list[CodeEntry] = field(default_factory=list)
    static_vars: list[Var] = field(default_factory=list)
    default_members: list[Var] = field(default_factory=list)
    code_data: bytearray = field(default_factory=bytearray)
    frameworks: list[int] = field(default_factory=list)
    autoloads: list[int] = field(default_factory=list)
    class_handle: int = 0
    parent_handle: int = 0
    class_name: str = ""
    fixed_up: bool = False

    def string(self, index: int) -> str:
        """Return string ``index``; index 0 is the empty string."""
        if index == 0:
            return ""
        return _lookup(self.strings, index, "String")

    def ref(self, index: int) -> RefEntry:
        """Return reference entry ``index``."""
        return _lookup(self.refs, index, "Reference")

    def code(self, index: int) -> CodeEntry:
        """Return code entry ``index``."""
        return _lookup(self.codes, index, "Code entry")

    def static_var(self, index: int) -> Var:
        """Return static variable ``index``."""
        return _lookup(self.static_vars, index, "Static variable")

    def _find(self, kind: RefType, name: str) -> int:
        wanted = name.lower()
        for index, ref in enumerate(self.refs, start=1):
            if (
                ref.type == kind
                and ref.class_index == 1
                and self.string(ref.name_index).lower() == wanted
            ):
                return index
        return 0

    def find_method(self, name: str) -> int:
        """Return the reference index of this class's method ``name``, or 0."""
        return self._find(RefType.METHOD, name)

    def find_member(self, name: str) -> int:
        """Return the reference index of this class's member ``name``, or 0."""
        return self._find(RefType.MEMBER, name)

    def find_static(self, name: str) -> int:
        """Return the reference index of this class's static ``name``, or 0."""
        return self._find(RefType.STATIC, name)


def _lookup(table: Sequence[_T], index: int, what: str) -> _T:
    if index < 1 or index > len(table):
        raise VMError(f"{what} {index} out of range (1..{len(table)})")
    return table[index - 1]


class ClassTable:
    """Loaded classes, addressed by handles starting after a null class."""

    def __init__(self, size: int = DEFAULT_CLASS_COUNT) -> None:
        self.size = size
        self._classes: list[ClassData] = []

    def add(self, data: ClassData) -> int:
        """Register ``data`` and return its new class handle."""
        if len(self._classes) + 1 >= self.size:
            raise VMError(f"Too many classes (limit {self.size})")
        self._classes.append(data)
        handle = BASE_HANDLE_CLASS + len(self._classes)
        data.class_handle = handle
        return handle

    def get(self, handle: int) -> ClassData:
        """Return the class with ``handle``."""
        index = handle - BASE_HANDLE_CLASS
        count = len(self._classes) + 1
        if index < 0 or index >= count:
            raise VMError(
                f"Class handle {handle} out of range "
                f"({BASE_HANDLE_CLASS}..{BASE_HANDLE_CLASS + count})"
            )
        if index == 0:
            raise VMError(f"Class handle {handle} is the null class")
        return self._classes[index - 1]

    def name(self, handle: int) -> str:
        """Return the name of the class with ``handle``."""
        return self.get(handle).class_name

    def find(self, name: str) -> int:
        """Return the handle of the class called ``name`` (any case), or 0."""
        wanted = name.lower()
        for data in self._classes:
            if data.class_name and data.class_name.lower() == wanted:
                return data.class_handle
        return 0

    def __len__(self) -> int:
        return len(self._classes)