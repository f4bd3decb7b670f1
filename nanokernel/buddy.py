"""A binary buddy allocator over a simulated 1 MiB heap."""

from __future__ import annotations

HEAP_START = 0x1000000
HEAP_ORDER = 20
HEAP_SIZE = 1 << HEAP_ORDER
MIN_ORDER = 6
LEVELS = HEAP_ORDER - MIN_ORDER + 1
HEADER_SIZE = 4


def _align_up(size: int) -> int:
    mask = (1 << MIN_ORDER) - 1
    return (size + mask) & ~mask


def _order_for_size(size: int) -> int:
    block = 1 << MIN_ORDER
    order = 0
    while block < size:
        block <<= 1
        order += 1
    return order


def _block_size(order: int) -> int:
    return 1 << (order + MIN_ORDER)


class BuddyAllocator:
    """Splits and merges power-of-two blocks from 64 B up to 1 MiB.

    Each allocated block keeps a 4-byte header holding its order; the
    address handed out lies just after that header.
    """

    def __init__(self, start: int = HEAP_START) -> None:
        self._start = start
        self._free_lists: list[list[int]] = [[] for _ in range(LEVELS)]
        self._free_lists[LEVELS - 1].append(start)
        self._allocated: dict[int, int] = {}
        self._used = 0

    def alloc(self, size: int) -> int | None:
        """Return the address of a block of at least size bytes, or None."""
        if size <= 0:
            return None
        want = _order_for_size(_align_up(size))
        level = next(
            (i for i in range(want, LEVELS) if self._free_lists[i]),
            None,
        )
        if level is None:
            return None
        block = self._free_lists[level].pop(0)
        while level > want:
            level -= 1
            self._free_lists[level].insert(0, block + _block_size(level))
        self._allocated[block] = want
        self._used += _block_size(want)
        return block + HEADER_SIZE

    def free(self, address: int | None) -> None:
        """Release the block at address, merging it with free buddies."""
        if address is None:
            return
        block = address - HEADER_SIZE
        try:
            order = self._allocated.pop(block)
        except KeyError:
            raise ValueError(f"0x{address:X} was not allocated by this allocator") from None
        self._used -= _block_size(order)
        while order < LEVELS - 1:
            offset = block - self._start
            buddy = self._start + (offset ^ _block_size(order))
            free_list = self._free_lists[order]
            if buddy not in free_list:
                break
            free_list.remove(buddy)
            block = min(block, buddy)
            order += 1
        self._free_lists[order].insert(0, block)

    def total(self) -> int:
        return HEAP_SIZE

    def used(self) -> int:
        return self._used

    def free_counts(self) -> list[int]:
        """Number of free blocks at each order, smallest first."""
        return [len(blocks) for blocks in self._free_lists]

    def stats(self) -> str:
        """A report of totals and of every free list."""
        total = self.total()
        lines = [
            f"Buddy allocator \u2013 {total} B total, {self._used} B used "
            f"({total - self._used} B free)\n"
        ]
        lines.extend(
            f"  {level:2d} | size {_block_size(level):6d} B | blocks {count:<3d}\n"
            for level, count in enumerate(self.free_counts())
        )
        return "".join(lines)