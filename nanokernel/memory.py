"""Selection of the kernel heap backend and the memory-status report."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Protocol

from nanokernel.buddy import BuddyAllocator
from nanokernel.simplealloc import SimpleAllocator

SYS_MEM_STATUS = 40
MAX_PID = 32768
_UINT32_MASK = 0xFFFFFFFF


class Allocator(Protocol):
    def alloc(self, size: int) -> int | None: ...

    def free(self, address: int | None) -> None: ...

    def total(self) -> int: ...

    def used(self) -> int: ...


class Backend(str, enum.Enum):
    BUDDY = "buddy"
    SIMPLE = "simple"


@dataclass(frozen=True)
class MemStatus:
    total: int
    used: int
    free: int


def make_allocator(backend: Backend | str = Backend.BUDDY) -> Allocator:
    """Build the heap for a backend; buddy is the default."""
    backend = Backend(backend)
    if backend is Backend.SIMPLE:
        return SimpleAllocator()
    return BuddyAllocator()


def mem_status(allocator: Allocator) -> MemStatus:
    """Total, used and free bytes of the heap, as 32-bit counts."""
    total = allocator.total() & _UINT32_MASK
    used = allocator.used() & _UINT32_MASK
    return MemStatus(total=total, used=used, free=(total - used) & _UINT32_MASK)