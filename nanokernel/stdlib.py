"""User-space helpers: formatted output, line input, string utilities and a heap check."""

from __future__ import annotations

import enum
from typing import Iterable

from nanokernel.memory import Allocator

MAX_CHARS = 1000
TEST_BLOCK_SIZE = 1048576 // 4
TEST_MAX_MEMORY = 1048576
TEST_MAX_BLOCKS = 3
TEST_ROUNDS = 4
TEST_MAX_FAILURES = 5

_UINT32_MASK = 0xFFFFFFFF
_CONVERSIONS = "sduc"
_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


class FileDescriptor(enum.IntEnum):
    STDOUT = 1
    STDERR = 2
    STDMARK = 3


def _int32(value: int) -> int:
    value &= _UINT32_MASK
    return value - (1 << 32) if value & 0x80000000 else value


def _char(value: int | str) -> str:
    if isinstance(value, str):
        if len(value) != 1:
            raise TypeError("%c expects a single character")
        return value
    return chr(value & 0xFF)


def _convert(conversion: str, argument: object) -> str | None:
    if conversion == "s":
        return str(argument).split("\0", 1)[0]
    if conversion == "d":
        return str(_int32(int(argument)))
    if conversion == "u":
        return str(int(argument) & _UINT32_MASK)
    if conversion == "c":
        return _char(argument)
    if conversion == "x":
        return format(int(argument) & _UINT32_MASK, "X")
    return None


def format_message(fmt: str, *args: object) -> str:
    """Expand %s %d %u %c %x and the escapes \\n and \\t; output stops at MAX_CHARS."""
    pending = iter(args)
    out: list[str] = []
    length = 0
    i = 0
    while i < len(fmt) and length < MAX_CHARS:
        current = fmt[i]
        following = fmt[i + 1] if i + 1 < len(fmt) else None
        if following is None:
            piece = current
        elif current == "%":
            if following in _CONVERSIONS or following == "x":
                try:
                    argument = next(pending)
                except StopIteration:
                    raise TypeError(f"not enough arguments for format {fmt!r}") from None
                piece = _convert(following, argument)
                i += 1
            else:
                piece = "%"
        elif current == "\\":
            piece = {"n": "\n", "t": "\t"}.get(following, "\\")
            i += 1
        else:
            piece = current
        piece = piece[: MAX_CHARS - length]
        out.append(piece)
        length += len(piece)
        i += 1
    return "".join(out)


def _read_number(line: str, j: int) -> tuple[int, int]:
    number = 0
    while j < len(line) and line[j] not in " \t":
        number = (number * 10 + (ord(line[j]) - ord("0"))) & _UINT32_MASK
        j += 1
    return number, j


def _has_conversion(fmt: str) -> bool:
    return any(fmt[k] == "%" and fmt[k + 1] in _CONVERSIONS for k in range(len(fmt) - 1))


def scan(fmt: str, line: str) -> list[object]:
    """Read the values that fmt's %s %d %u %c ask for out of line, in order.

    Spaces in the input are skipped between fields; literal characters of fmt
    consume no input. Raises ValueError if the line runs out before a field.
    """
    values: list[object] = []
    i = j = 0
    while i < len(fmt):
        if j >= len(line):
            if _has_conversion(fmt[i:]):
                raise ValueError(f"input {line!r} ended before format {fmt!r} was filled")
            break
        if line[j] == " ":
            j += 1
            continue
        if fmt[i] == "%" and i + 1 < len(fmt):
            conversion = fmt[i + 1]
            if conversion == "s":
                start = j
                while j < len(line) and line[j] not in " \t":
                    j += 1
                values.append(line[start:j])
                i += 1
            elif conversion == "d":
                sign = 1
                if line[j] == "-":
                    sign = -1
                    j += 1
                number, j = _read_number(line, j)
                values.append(_int32(sign * number))
                i += 1
            elif conversion == "u":
                number, j = _read_number(line, j)
                values.append(number)
                i += 1
            elif conversion == "c":
                values.append(line[j])
                j += 1
                i += 1
        i += 1
    return values


def read_line(keys: Iterable[str], count: int) -> str:
    """Collect typed keys up to a newline, honouring backspace; keep at most count characters.

    Control characters other than tab and backspace are ignored.
    Raises EOFError if the keys end before a newline.
    """
    typed: list[str] = []
    for key in keys:
        if key == "\n":
            return "".join(typed[: max(count, 0)])
        if key == "\b":
            if typed:
                typed.pop()
        elif key == "\t" or ord(key) > 31:
            typed.append(key)
    raise EOFError("input ended before a newline")


def compare(s1: str, s2: str) -> int:
    """Compare two strings the shell's way.

    Zero when equal. For strings of equal length, the difference of the first
    differing characters; otherwise the code of the first extra character of
    the longer string.
    """
    result = 0
    for a, b in zip(s1, s2):
        if a != b:
            result = ord(a) - ord(b)
            break
    common = min(len(s1), len(s2))
    if len(s1) > common:
        return ord(s1[common])
    if len(s2) > common:
        return ord(s2[common])
    return result


def to_lower(text: str) -> str:
    """Lower-case the ASCII letters A-Z only."""
    return text.translate(_LOWER)


def test_malloc(allocator: Allocator) -> int:
    """Exercise an allocator in four rounds of three quarter-heap blocks.

    Returns 0 on success; 1 after five failed requests in a round; 4 if a
    value written to a block does not read back.
    """
    memory: dict[int, int] = {}
    for _ in range(TEST_ROUNDS):
        addresses: list[int] = []
        failures = 0
        total = 0
        while len(addresses) < TEST_MAX_BLOCKS and total <= TEST_MAX_MEMORY:
            address = allocator.alloc(TEST_BLOCK_SIZE)
            if address is not None:
                total += TEST_BLOCK_SIZE
                addresses.append(address)
            else:
                failures += 1
            if failures >= TEST_MAX_FAILURES:
                return 1
        for value, address in enumerate(addresses):
            memory[address] = value
        if any(memory.get(address) != value for value, address in enumerate(addresses)):
            return 4
        for address in addresses:
            allocator.free(address)
    return 0