"""Split a packed payload into the modules it carries."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Sequence

_UINT32 = struct.Struct("<I")


@dataclass(frozen=True)
class LoadedModule:
    """One module: where it sat in the payload, where it goes, its bytes."""

    offset: int
    target_address: int
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def __str__(self) -> str:
        return (
            f"Will copy module at 0x{self.offset:X} to 0x{self.target_address:X} "
            f"({self.size} bytes)"
        )


def _read_uint32(payload: bytes, offset: int) -> tuple[int, int]:
    if offset + _UINT32.size > len(payload):
        raise ValueError(f"payload truncated at offset {offset}")
    (value,) = _UINT32.unpack_from(payload, offset)
    return value, offset + _UINT32.size


def load_modules(payload: bytes, target_addresses: Sequence[int]) -> list[LoadedModule]:
    """Read the module count, then each size-prefixed module, in order."""
    payload = bytes(payload)
    targets = list(target_addresses)
    count, offset = _read_uint32(payload, 0)
    if count > len(targets):
        raise ValueError(f"payload holds {count} modules but only {len(targets)} targets were given")
    modules = []
    for target in targets[:count]:
        size, offset = _read_uint32(payload, offset)
        end = offset + size
        if end > len(payload):
            raise ValueError(f"module at offset {offset} runs past the end of the payload")
        modules.append(LoadedModule(offset, target, payload[offset:end]))
        offset = end
    return modules