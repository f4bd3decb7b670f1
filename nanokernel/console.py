"""A text-mode console over an 80x25 character/attribute video buffer."""

from __future__ import annotations

WIDTH = 80
HEIGHT = 25
DEFAULT_STYLE = 0x07

_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_UINT64_MASK = (1 << 64) - 1


def uint_to_base(value: int, base: int) -> str:
    """Render value as an unsigned 64-bit number in the given base."""
    if not 2 <= base <= len(_DIGITS):
        raise ValueError(f"base must be between 2 and {len(_DIGITS)}, got {base}")
    value &= _UINT64_MASK
    digits = []
    while True:
        value, remainder = divmod(value, base)
        digits.append(_DIGITS[remainder])
        if not value:
            break
    return "".join(reversed(digits))


def _code(character: str) -> int:
    return ord(character) & 0xFF


class TextConsole:
    """Video memory of (character, style) byte pairs and a write cursor."""

    def __init__(self, width: int = WIDTH, height: int = HEIGHT, style: int = DEFAULT_STYLE):
        self._width = width
        self._height = height
        self._memory = bytearray(bytes((ord(" "), style & 0xFF)) * (width * height))
        self._cursor = 0

    @property
    def position(self) -> int:
        """Index of the cell the next character goes to."""
        return self._cursor // 2

    @property
    def memory(self) -> bytes:
        """A copy of the raw video memory."""
        return bytes(self._memory)

    def _put(self, offset: int, byte: int) -> None:
        if not 0 <= offset < len(self._memory):
            raise IndexError("write outside video memory")
        self._memory[offset] = byte

    def print(self, text: str) -> None:
        for character in text:
            if character == "\0":
                break
            self.print_char(character)

    def print_char(self, character: str) -> None:
        self._put(self._cursor, _code(character))
        self._cursor += 2

    def print_styled(self, text: str, style: int, limit: int) -> int:
        """Print at most limit characters with style; return how many were printed."""
        printed = 0
        for character in text[: max(limit, 0)]:
            if character == "\0":
                break
            self.print_char_styled(character, style)
            printed += 1
        return printed

    def print_char_styled(self, character: str, style: int) -> None:
        self._put(self._cursor, _code(character))
        self._put(self._cursor + 1, style & 0xFF)
        self._cursor += 2

    def newline(self) -> None:
        """Pad with spaces up to the start of the next row."""
        row_bytes = self._width * 2
        while True:
            self.print_char(" ")
            if self._cursor % row_bytes == 0:
                break

    def print_dec(self, value: int) -> None:
        self.print_base(value, 10)

    def print_hex(self, value: int) -> None:
        self.print_base(value, 16)

    def print_bin(self, value: int) -> None:
        self.print_base(value, 2)

    def print_base(self, value: int, base: int) -> None:
        self.print(uint_to_base(value, base))

    def clear(self) -> None:
        self._memory[0::2] = b" " * (self._width * self._height)
        self._cursor = 0

    def delete(self) -> None:
        """Blank the previous cell and move the cursor back onto it."""
        if self._cursor < 2:
            raise IndexError("nothing to delete")
        self._cursor -= 2
        self.print_char(" ")
        self._cursor -= 2

    def text(self) -> str:
        """The screen's characters, one line per row."""
        chars = bytes(self._memory[0::2]).decode("latin-1")
        rows = (chars[start:start + self._width] for start in range(0, len(chars), self._width))
        return "\n".join(rows)