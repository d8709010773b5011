from __future__ import annotations

from threading import RLock
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
Slot = Callable[[T], None]


class Signal(Generic[T]):
    """
    Synchronous in-process signal carrying a single payload (usually an id).

    Services emit only after their transaction commits, so slots always
    observe persisted state. Slots run in connection order on the emitting
    thread. A slot that raises ``ReferenceError`` (a ``weakref.proxy`` whose
    owner was collected) is dropped; any other exception reaches the emitter.
    """

    def __init__(self) -> None:
        self._slots: list[Slot] = []
        self._lock = RLock()

    def connect(self, slot: Slot) -> Slot:
        with self._lock:
            if slot not in self._slots:
                self._slots.append(slot)
        return slot

    def disconnect(self, slot: Slot) -> None:
        with self._lock:
            if slot in self._slots:
                self._slots.remove(slot)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._slots)

    def emit(self, payload: T) -> None:
        with self._lock:
            snapshot = tuple(self._slots)
        dead: list[Slot] = []
        for slot in snapshot:
            try:
                slot(payload)
            except ReferenceError:
                dead.append(slot)
        for slot in dead:
            self.disconnect(slot)
