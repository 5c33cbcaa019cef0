"""
Id allocation.

Entities get their ids from a single allocator so the generation strategy
can be swapped without touching services:

    from siteledger.utils.ids import next_id
    rfi_id = next_id("rfi")          # "rfi-3f9c1a2b7d4e"

Production uses ``UuidIdAllocator``; tests install a ``CounterIdAllocator``
to get predictable, monotonic ids ("rfi-1", "rfi-2", ...).
"""

import itertools
import threading
import uuid
from abc import ABC, abstractmethod


class IdAllocator(ABC):
    """Abstract id source."""

    @abstractmethod
    def allocate(self, prefix: str) -> str:
        ...


class UuidIdAllocator(IdAllocator):
    """Random 12-hex-digit suffix from uuid4."""

    def allocate(self, prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex[:12]}"


class CounterIdAllocator(IdAllocator):
    """Monotonic process-wide counter. Never repeats within a process."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def allocate(self, prefix: str) -> str:
        with self._lock:
            value = next(self._counter)
        return f"{prefix}-{value}"


_allocator: IdAllocator = UuidIdAllocator()


def set_allocator(allocator: IdAllocator) -> None:
    global _allocator
    _allocator = allocator


def get_allocator() -> IdAllocator:
    return _allocator


def next_id(prefix: str) -> str:
    return _allocator.allocate(prefix)
