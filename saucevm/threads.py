"""Script threads and the ordered list the scheduler walks."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .types import BASE_HANDLE_THREAD, ScriptState, VMError

DEFAULT_THREAD_COUNT = 128
LABEL_COUNT = 8
MAX_THREAD_HANDLE = BASE_HANDLE_THREAD + 1999999


def _check_label(label: int) -> None:
    if label < 0 or label >= LABEL_COUNT:
        raise VMError(
            f"define goto {label} out of range (1...{LABEL_COUNT - 1})"
        )


@dataclass(eq=False)
class VMThread:
    """A cooperative script thread."""

    handle: int
    slot: int = 0
    id: int = 0
    order: int = 0
    script_thread_handle: int = 0
    break_counter: int = 0
    break_time: int = 0
    state: int = 0
    fresh: bool = False
    script: Any = None
    labels: list[int] = field(default_factory=lambda: [0] * LABEL_COUNT)

    def start(self) -> None:
        """Mark the thread as running under its own handle."""
        self.id = self.handle
        self.state = ScriptState.RUNNING

    def define(self, label: int, offset: int) -> None:
        """Record the code offset for a goto label."""
        _check_label(label)
        self.labels[label] = offset


class ThreadList:
    """Allocates threads and keeps the running ones, newest first."""

    def __init__(self, size: int = DEFAULT_THREAD_COUNT) -> None:
        self.size = size
        self._free = list(range(size - 1, 0, -1))
        self._threads: list[VMThread] = []
        self.handle_counter = BASE_HANDLE_THREAD

    def new(self) -> VMThread:
        """Allocate a thread with a fresh handle, not yet in the list."""
        if not self._free:
            raise VMError("No free thread slots")
        if self.handle_counter + 1 > MAX_THREAD_HANDLE:
            raise VMError(f"Thread handle {self.handle_counter + 1} overflow")
        self.handle_counter += 1
        slot = self._free.pop()
        return VMThread(handle=self.handle_counter, slot=slot, id=self.handle_counter)

    def add(self, thread: VMThread) -> None:
        """Put ``thread`` at the head of the list."""
        self._threads.insert(0, thread)

    def remove(self, thread: VMThread) -> None:
        """Take ``thread`` out of the list."""
        try:
            self._threads.remove(thread)
        except ValueError:
            raise VMError(f"Thread {thread.handle} is not in the list") from None

    def release(self, thread: VMThread) -> None:
        """Return the slot of ``thread`` to the free pool."""
        self._free.append(thread.slot)

    def __iter__(self) -> Iterator[VMThread]:
        return iter(list(self._threads))

    def __len__(self) -> int:
        return len(self._threads)

    def go_to(self, handle: int, label: int) -> None:
        """Send matching threads (all when ``handle`` is 0) to a defined label."""
        _check_label(label)
        for thread in self:
            if (handle == 0 or thread.id == handle) and thread.labels[label] != 0:
                thread.script.code_offset = thread.labels[label]
                thread.break_counter = 0
                thread.break_time = 0

    def find_id(self, handle: int) -> int:
        """Return the id of the thread with ``handle``, or 0."""
        return next((t.id for t in self._threads if t.handle == handle), 0)

    def count(self, thread_id: int) -> int:
        """Return how many threads carry ``thread_id``."""
        return sum(1 for t in self._threads if t.id == thread_id)

    def is_alive(self, handle: int) -> bool:
        """Return whether a thread with ``handle`` is in the list."""
        return any(t.handle == handle for t in self._threads)