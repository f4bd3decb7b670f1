"""A first-fit allocator over a simulated 1 MiB heap of headed blocks."""

from __future__ import annotations

from dataclasses import dataclass

HEAP_START = 0x1000000
HEAP_SIZE = 0x00100000
ALIGN = 64
HEADER_SIZE = 24


def _align_up(size: int) -> int:
    return (size + ALIGN - 1) & ~(ALIGN - 1)


@dataclass
class _Block:
    address: int
    size: int
    free: bool

    @property
    def payload(self) -> int:
        return self.address + HEADER_SIZE


class SimpleAllocator:
    """Blocks carry a header; allocation splits, freeing merges forward only."""

    def __init__(self, start: int = HEAP_START) -> None:
        self._blocks = [_Block(start, HEAP_SIZE - HEADER_SIZE, True)]
        self._used = 0

    def alloc(self, size: int) -> int | None:
        """Return the address of at least size bytes, or None if nothing fits."""
        if size < 0:
            raise ValueError("size must not be negative")
        size = _align_up(size)
        for index, block in enumerate(self._blocks):
            if not (block.free and block.size >= size):
                continue
            if block.size >= size + HEADER_SIZE + ALIGN:
                rest = _Block(
                    block.address + HEADER_SIZE + size,
                    block.size - size - HEADER_SIZE,
                    True,
                )
                self._blocks.insert(index + 1, rest)
                block.size = size
            block.free = False
            self._used += block.size
            return block.payload
        return None

    def free(self, address: int | None) -> None:
        """Release the block at address and merge it with a free successor."""
        if address is None:
            return
        index, block = next(
            ((i, b) for i, b in enumerate(self._blocks) if b.payload == address),
            (None, None),
        )
        if block is None or block.free:
            raise ValueError(f"0x{address:X} is not an allocated block")
        block.free = True
        self._used -= block.size
        if index + 1 < len(self._blocks) and self._blocks[index + 1].free:
            following = self._blocks.pop(index + 1)
            block.size += HEADER_SIZE + following.size

    def total(self) -> int:
        return HEAP_SIZE

    def used(self) -> int:
        return self._used