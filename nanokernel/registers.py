"""Register backups and CPU exception reporting."""

from __future__ import annotations

import enum
from itertools import islice
from typing import Iterable, Sequence

from nanokernel.console import uint_to_base

REGISTER_COUNT = 18
REGISTER_NAMES = (
    "RAX: ", "RBX: ", "RCX: ", "RDX: ", "RSI: ", "RDI: ",
    "RBP: ", "R8: ", "R9: ", "R10: ", "R11: ", "R12: ",
    "R13: ", "R14: ", "R15: ", "RSP: ", "RIP: ", "RFLAGS: ",
)
_UINT64_MASK = (1 << 64) - 1


class RegisterBackup:
    """The last saved snapshot of the general registers."""

    def __init__(self) -> None:
        self._values: tuple[int, ...] | None = None

    def make_backup(self, regs: Iterable[int]) -> None:
        """Save the first REGISTER_COUNT values of regs."""
        values = tuple(int(v) & _UINT64_MASK for v in islice(regs, REGISTER_COUNT))
        if len(values) < REGISTER_COUNT:
            raise ValueError(f"expected {REGISTER_COUNT} register values, got {len(values)}")
        self._values = values

    def is_backup_done(self) -> bool:
        return self._values is not None

    def regs(self) -> list[int] | None:
        """A copy of the saved registers, or None if nothing was saved."""
        return None if self._values is None else list(self._values)


class CpuException(enum.IntEnum):
    ZERO_DIVISION = 0
    INVALID_OPCODE = 6


_MESSAGES = {
    CpuException.ZERO_DIVISION: "Cannot Divide By Zero",
    CpuException.INVALID_OPCODE: "Invalid Operation Code",
}


def exception_message(exception_id: int) -> str | None:
    """The message for a handled exception, or None for any other id."""
    try:
        return _MESSAGES[CpuException(exception_id)]
    except ValueError:
        return None


def format_register_dump(regs: Sequence[int]) -> str:
    """The register status report, one register per line, values in hex."""
    if regs is None or len(regs) != REGISTER_COUNT:
        raise ValueError(f"expected {REGISTER_COUNT} register values")
    lines = ["Register Status: \n"]
    lines.extend(f"{name} {uint_to_base(value, 16)}\n" for name, value in zip(REGISTER_NAMES, regs))
    return "".join(lines)