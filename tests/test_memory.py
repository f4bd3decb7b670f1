import pytest

from nanokernel.buddy import HEAP_SIZE, MIN_ORDER
from nanokernel.memory import Backend, MemStatus, make_allocator, mem_status
from nanokernel.simplealloc import ALIGN


def _used_after(allocator, size):
    allocator.alloc(size)
    return mem_status(allocator).used


def test_default_backend_is_buddy():
    # The buddy backend rounds 129 bytes (aligned to 192) up to a 256-byte block.
    assert _used_after(make_allocator(), 129) == 256


def test_simple_backend_by_name():
    # The simple backend only aligns 129 bytes up to 192.
    assert _used_after(make_allocator("simple"), 129) == 192
    assert _used_after(make_allocator(Backend.BUDDY), 129) == 256


def test_unknown_backend_raises():
    with pytest.raises(ValueError):
        make_allocator("slab")


def test_status_of_fresh_heap():
    assert mem_status(make_allocator()) == MemStatus(HEAP_SIZE, 0, HEAP_SIZE)


@pytest.mark.parametrize(
    "backend,unit", [(Backend.BUDDY, 1 << MIN_ORDER), (Backend.SIMPLE, ALIGN)]
)
def test_status_tracks_allocations(backend, unit):
    allocator = make_allocator(backend)
    address = allocator.alloc(1)
    status = mem_status(allocator)
    assert status.used == unit
    assert status.free == status.total - status.used
    allocator.free(address)
    assert mem_status(allocator).used == 0