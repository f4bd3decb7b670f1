"""NanoShell: the interactive command shell of the sample user module."""

from __future__ import annotations

import argparse
import enum
import sys
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, Optional, Protocol, Sequence, TextIO

from nanokernel.eliminator import BEEP_HZ, BEEP_TICKS, EliminatorGame, Score, speed_from_key
from nanokernel.memory import Allocator, make_allocator, mem_status
from nanokernel.registers import (
    REGISTER_NAMES,
    CpuException,
    RegisterBackup,
    exception_message,
    format_register_dump,
)
from nanokernel.rtc import TimeStamp, timestamp_from_rtc
from nanokernel.stdlib import FileDescriptor, compare, format_message, read_line, test_malloc, to_lower

CMD_MAX_CHARS = 1000
PROMPT = "NanoShell $> "


class Instruction(enum.IntEnum):
    # commands
    HELP = 0
    REGISTERS = 1
    TIME = 2
    ELIMINATOR = 3
    ECHO = 4
    CLEAR = 5
    CHANGE_FONT = 6
    NANO_SONG = 7
    TEST_ZERO_DIVISION = 8
    TEST_INVALID_OPCODE = 9
    TEST_MALLOC = 10
    MAN = 11
    TODO = 12
    FUNCTIONS = 13
    MINI_PROCESS = 14
    # useful
    MALLOC = 15
    REALLOC = 16
    CALLOC = 17
    FREE = 18
    CREATE_PROCESS = 19
    MEM = 20


INSTRUCTION_COUNT = len(Instruction) + 0

_COMMAND_NAMES = (
    "help", "registers", "time", "eliminator", "echo", "clear", "change_font", "nano_song",
    "test_zero_division", "test_invalid_opcode", "test_malloc", "man", "todo", "functions",
    "mini_process", "malloc", "realloc", "calloc", "free", "createProcess", "mem",
)

HELP_TEXT = """Here's a list of all available commands:
- help --> Help display with all commands
- registers --> Displays the lastest backup of registers
- time --> Displays time and date
- eliminator --> Starts the eliminator game
- echo [string] --> Prints the [string] argument in the display
- clear --> clears the display
- change_font --> Changes the current font
- nano_song --> Use command for a surprise
- test_zero_division --> Test for the Zero Division exception
- test_invalid_opcode --> Test for the Invalid Opcode exception
- test_malloc --> starts the malloc test
- man [command] --> displays the manual for the given command
- todo --> displays a random thing that has to be done
- functions --> displays every page inside the manual
- mini_process --> creates a new process according to simpleProcess.c
"""

MAN_PAGES = (
    "help: Displays a basic help with all commands. Use to get a list of them but use man to get a more "
    "detailed description\nof each command\n",
    "registers: Displays the latest backup of registers. Press the esc key at ant time to back them up\n"
    "then write this command to see them\n",
    "time: Displays time and date on GTM -3\n",
    "eliminator: starts the eliminator game. Play alone or with a friend to get the highest\nscore possible\n",
    "echo [string]: prints the [string] argument in the display\non later iterations of the OS\n",
    "clear: clears the display\n",
    "change_font: Changes the current format from small to big or from big to small\n",
    "nano_song: autism goes BRRRRRR\n",
    "test_zero_divition: Tests the Zero division exception\n",
    "test_invalid_opcode: Test the Invalid Opcode exception\n",
    "test_malloc: starts the malloc test\n"
    "return value: returns 0 if the test was passed, any other number is an error.\n"
    "look at the code to see where it broke\n",
    "man [command]: displays the manual for [command]. Has useful info about how and why to use it\n"
    "Also, some things may not be implemented yet and may cause unexpected behavior. If that happens, "
    "the entry\ninside man will have \"TODO: Not implemented\"",
    "todo: don't know what to do? run this command and you'll be given a random task in the TODO list\n",
    "functions: Displays every page inside the manual. Useful for testing and to play around\n",
    "mini_process: Creates a new process according to simpleProcess.c\n",
    "malloc:\n"
    "use: void* malloc(uint64_t size)\n"
    "description: the malloc function allocates [size] bytes and returns a pointer to the allocated memory.\n"
    "return value: returns a pointer to the allocated memory or NULL in case of error or no space available\n",
    "realloc:\n"
    "use: void* realloc(void* pnt, uint64_t size)\n"
    "description: the realloc function allocates [size] bytes and returns a pointer to the allocated memory. "
    "The memory is the same from the start until the end of pnt\n"
    "return value: returns a pointer to the allocated memory or NULL in case of error or no space available\n",
    "calloc:\n"
    "use: void* calloc(uint64_t size)\n"
    "description: the malloc function allocates [size] bytes and returns a pointer to the allocated memory. "
    "It sets every value inside of it to 0\n"
    "return value: returns a pointer to the allocated memory or NULL in case of error or no space available\n",
    "free:\n"
    "use: void free(void* pnt)\n"
    "description: free frees the memory that was previously allocated by pnt via malloc() or calloc(). "
    "Nothing happens if pnt is NULL\n"
    "return value: free doesnt return anything",
    "createProcess:\n",
    "mem: Displays the total, used and free memory of the kernel heap\n",
)

TODO_ITEMS = (
    "Check that they are on date",
    "",
    "",
    "",
    "Make it be able to print other things (echo test_malloc for example)",
    "",
    "make it able to take arguments for the font size",
    "",
    "",
    "",
    "",
    "write a manual for each argument",
    "write a lot of TODOs\nmake it return a random todo",
    "Not implemented",
    "Make easier to understand",
    "",
    "Not implemented",
    "Not implemented",
    "",
    "Not implemented",
    "",
)

FUNCTIONS_TEXT = (
    "Commands: help, registers, time, eliminator, echo, clear, change_font, nano_song, test_zero_division\n"
    "test_invalid_opcode, test_malloc, man, todo, functions, mini_process\n\n\n"
    "Useful: malloc, realloc, calloc, free\n"
)

_NO_NEWLINE = {Instruction.CHANGE_FONT, Instruction.ELIMINATOR, Instruction.CLEAR, Instruction.NANO_SONG}

# Note frequencies (Hz) and lengths (ticks) of the anthem.
_C4, _D4, _E4, _F4, _G4, _A4 = 261, 294, 329, 349, 392, 440
_C5, _D5, _F5 = 523, 587, 698
_REST = 1
_HALF, _QUARTER, _THREE_QUARTERS, _EIGHTH, _SIXTEENTH = 144, 72, 54, 36, 18

_S, _E, _Q, _T, _H = _SIXTEENTH, _EIGHTH, _QUARTER, _THREE_QUARTERS, _HALF
_ANTHEM = (
    (_S, _C4), (_S, _F4), (_E, _E4), (_E, _F4), (_E, _E4), (_E, _F4), (_T, _C4),
    (_S, _C4), (_S, _F4), (_E, _F4), (_E, _F4), (_E, _D4), (_T, _C4),
    (_S, _C4), (_E, _G4), (_E, _F4), (_E, _G4), (_S, _F4), (_E, _A4), (_E, _A4), (_Q, _A4),
    (_E, _F4), (_E, _F4), (_E, _F4), (_S, _D4), (_Q, _F4),
    (_S, _D4), (_E, _E4), (_E, _D4), (_E, _E4), (_S, _D4),
    *((_E, _E4),) * 4, (_E, _F4), (_E, _D4), (_E, _D4), (_S, _C4), (_E, _D4), (_T, _C4),
    (_S, _D4), *((_E, _E4),) * 8, *((_E, _A4),) * 8,
    (_Q, _A4), (_Q + _E, _REST), (_E, _A4), (_E, _A4), (_E, _A4), (_H, _G4),
    (_S, _C4), (_E, _A4), (_E, _G4), (_S, _G4), (_E, _F4), (_E, _F4), (_S, _D4), (_Q, _C4),
    (_S, _REST), (_S, _C4), (_S, _A4), *((_E, _A4),) * 5, (_E, _C5), (_E, _D5), (_E, _A4), (_Q, _A4),
    (_E, _REST), (_E, _A4), (_E, _C5), (_E, _D5), (_E, _G4), (_E, _G4), (_E, _G4), (_S, _F4),
    (_E, _G4), (_E, _A4), (_E, _G4), (_E, _F4), (_E, _G4), (_E, _F4), (_E, _F4), (_S, _D4),
    (_E, _F4), (_E, _F5), (_E, _F5), (_S, _D5), (_E, _F5), (_S, _D5), (_Q, _C5),
)

_END = object()


class Terminal(Protocol):
    def write(self, text: str, fd: FileDescriptor = FileDescriptor.STDOUT) -> None: ...

    def clear(self) -> None: ...

    def change_font(self) -> None: ...

    def beep(self, hz: int, ticks: int) -> None: ...

    def draw_rectangle(self, color: int, x0: int, y0: int, x1: int, y1: int) -> None: ...


class _StreamTerminal:
    """A text stream standing in for the screen and speaker."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self.large_font = False

    def write(self, text: str, fd: FileDescriptor = FileDescriptor.STDOUT) -> None:
        self._stream.write(text)
        self._stream.flush()

    def clear(self) -> None:
        self.write("\x1b[2J\x1b[H")

    def change_font(self) -> None:
        self.large_font = not self.large_font

    def beep(self, hz: int, ticks: int) -> None:
        self.write("\a")

    def draw_rectangle(self, color: int, x0: int, y0: int, x1: int, y1: int) -> None:
        """Text streams have no pixels, so rectangles are not shown."""


def interpret(command: str) -> Optional[Instruction]:
    """The instruction named by the first word of command, case-insensitively, or None."""
    command = command.split("\0", 1)[0]
    word = []
    for character in command[:CMD_MAX_CHARS]:
        if character in " \t":
            break
        word.append(character)
    if len(word) == CMD_MAX_CHARS and len(command) > CMD_MAX_CHARS:
        return None
    name = to_lower("".join(word))
    for index, candidate in enumerate(_COMMAND_NAMES):
        if compare(name, candidate) == 0:
            return Instruction(index)
    return None


def argument_of(line: str) -> str:
    """Everything after the first space of line, or an empty string."""
    _, separator, rest = line.partition(" ")
    return rest if separator else ""


def format_time(timestamp: TimeStamp) -> str:
    return format_message(
        "Current date: %d-%d-%d\nCurrent time: %d:%d:%d hs",
        timestamp.day, timestamp.month, timestamp.year,
        timestamp.hours, timestamp.minutes, timestamp.seconds,
    )


def format_registers(regs: Optional[Sequence[int]]) -> str:
    """The register report; values are shown as 32-bit hex."""
    text = "Register Status: "
    if regs is None:
        return text + "Register backup not done. Press ESC to save register status."
    return text + "".join(format_message("\n%s %x", name, value) for name, value in zip(REGISTER_NAMES, regs))


def anthem_notes() -> tuple[tuple[int, int], ...]:
    """The anthem as (ticks, hz) pairs; an hz of 1 is a rest."""
    return _ANTHEM


def _to_bcd(value: int) -> int:
    return ((value // 10) << 4) | (value % 10)


def _clock_now() -> TimeStamp:
    now = datetime.now(timezone.utc)
    return timestamp_from_rtc(
        _to_bcd(now.second), _to_bcd(now.minute), _to_bcd(now.hour),
        _to_bcd(now.day), _to_bcd(now.month), _to_bcd(now.year % 100),
    )


class NanoShell:
    """Reads command lines and runs them against the simulated machine."""

    def __init__(
        self,
        *,
        allocator: Optional[Allocator] = None,
        registers: Optional[RegisterBackup] = None,
        now: Optional[Callable[[], TimeStamp]] = None,
        keys: Iterable[Optional[str]] = (),
        terminal: Optional[Terminal] = None,
    ) -> None:
        self._allocator = allocator if allocator is not None else make_allocator()
        self._registers = registers if registers is not None else RegisterBackup()
        self._now = now if now is not None else _clock_now
        self._keys: Iterator[Optional[str]] = iter(keys)
        self._terminal = terminal if terminal is not None else _StreamTerminal(sys.stdout)
        self._score = Score()
        self._two_players = True
        self._speed = 1
        self._next_pid = 1
        self._handlers: dict[Instruction, Callable[[str, list[str]], None]] = {
            Instruction.HELP: self._help,
            Instruction.REGISTERS: self._show_registers,
            Instruction.TIME: self._time,
            Instruction.ELIMINATOR: self._eliminator,
            Instruction.ECHO: self._echo,
            Instruction.CLEAR: self._clear,
            Instruction.CHANGE_FONT: self._change_font,
            Instruction.NANO_SONG: self._nano_song,
            Instruction.TEST_ZERO_DIVISION: self._zero_division,
            Instruction.TEST_INVALID_OPCODE: self._invalid_opcode,
            Instruction.TEST_MALLOC: self._test_malloc,
            Instruction.MAN: self._man,
            Instruction.TODO: self._todo,
            Instruction.FUNCTIONS: self._functions,
            Instruction.MINI_PROCESS: self._mini_process,
            Instruction.MEM: self._mem,
        }

    def execute(self, line: str) -> str:
        """Run one command line and return the text it prints."""
        line = line.split("\0", 1)[0][:CMD_MAX_CHARS]
        instruction = interpret(line)
        out: list[str] = []
        if instruction is None:
            out.append(format_message("Command not found: '%s'", line))
        else:
            handler = self._handlers.get(instruction)
            if handler is not None:
                handler(line, out)
        if instruction not in _NO_NEWLINE:
            out.append("\n")
        return "".join(out)

    def run(self, lines: Iterable[str]) -> None:
        """Prompt, read a line, run it; repeat until the lines run out."""
        pending = iter(lines)
        while True:
            self._terminal.write(PROMPT, FileDescriptor.STDMARK)
            try:
                line = next(pending)
            except StopIteration:
                return
            self._terminal.write(self.execute(line))

    def _read_key(self) -> object:
        return next(self._keys, _END)

    def _wait_for(self, accepted: str) -> Optional[str]:
        while True:
            key = self._read_key()
            if key is _END:
                return None
            if isinstance(key, str) and key and key in accepted:
                return key

    def _help(self, line: str, out: list[str]) -> None:
        out.append(format_message(HELP_TEXT))

    def _show_registers(self, line: str, out: list[str]) -> None:
        out.append(format_registers(self._registers.regs()))

    def _time(self, line: str, out: list[str]) -> None:
        out.append(format_time(self._now()))

    def _echo(self, line: str, out: list[str]) -> None:
        argument = argument_of(line)
        try:
            out.append(format_message(argument))
        except TypeError:
            out.append(argument)

    def _clear(self, line: str, out: list[str]) -> None:
        self._terminal.clear()

    def _change_font(self, line: str, out: list[str]) -> None:
        self._terminal.clear()
        self._terminal.change_font()

    def _nano_song(self, line: str, out: list[str]) -> None:
        for ticks, hz in anthem_notes():
            self._terminal.beep(hz, ticks)
        self._terminal.clear()

    def _exception(self, exception: CpuException, out: list[str]) -> None:
        out.append(f"Exception: {exception_message(exception)}\n")
        regs = self._registers.regs()
        if regs is not None:
            out.append(format_register_dump(regs))
        out.append("Press ENTER to go back: ")
        self._wait_for("\n")
        self._terminal.clear()

    def _zero_division(self, line: str, out: list[str]) -> None:
        self._exception(CpuException.ZERO_DIVISION, out)

    def _invalid_opcode(self, line: str, out: list[str]) -> None:
        self._exception(CpuException.INVALID_OPCODE, out)

    def _test_malloc(self, line: str, out: list[str]) -> None:
        out.append(format_message("%d", test_malloc(self._allocator)))

    def _man(self, line: str, out: list[str]) -> None:
        instruction = interpret(argument_of(line))
        if instruction is None:
            out.append("man expects a command passed as argument")
            return
        out.append(format_message("%s\nTODO: %s", MAN_PAGES[instruction], TODO_ITEMS[instruction]))

    def _todo(self, line: str, out: list[str]) -> None:
        seconds = self._now().seconds & 0xFF
        while not TODO_ITEMS[seconds % INSTRUCTION_COUNT]:
            seconds = (seconds + 1) & 0xFF
        out.append(format_message("%d\n", seconds))
        out.append(format_message("%s\n", TODO_ITEMS[seconds % INSTRUCTION_COUNT]))

    def _functions(self, line: str, out: list[str]) -> None:
        out.append(format_message("%s\n", FUNCTIONS_TEXT))

    def _mini_process(self, line: str, out: list[str]) -> None:
        out.append("string = startProcess\n")
        pid = self._next_pid
        self._next_pid += 1
        out.append("Simple process running")
        out.append(format_message("after createProcess: %d\n", pid))

    def _mem(self, line: str, out: list[str]) -> None:
        status = mem_status(self._allocator)
        out.append("Memory status\n")
        out.append(format_message("  Total: %u KiB\n", status.total // 1024))
        out.append(format_message("  Used : %u KiB\n", status.used // 1024))
        out.append(format_message("  Free : %u KiB\n", status.free // 1024))

    def _eliminator(self, line: str, out: list[str]) -> None:
        while True:
            played = self._score.p1_wins + self._score.p2_wins
            out.append(format_message(
                "Press space to %s, s for settings or q to quit the game.\n",
                "keep playing" if played else "play",
            ))
            choice = self._wait_for(" sq")
            if choice is None:
                self._terminal.clear()
                return
            if choice == "q":
                self._terminal.clear()
                self._score = Score()
                return
            if choice == "s" and not self._settings(out):
                self._terminal.clear()
                return
            self._terminal.clear()
            self._round(out)

    def _settings(self, out: list[str]) -> bool:
        out.append("Do you want to play in two player mode? (y/n)\n")
        answer = self._wait_for("yn")
        if answer is None:
            return False
        self._two_players = answer == "y"
        out.append("Select your speed from 1 to 4\n")
        speed = self._wait_for("1234")
        if speed is None:
            return False
        self._speed = speed_from_key(speed)
        return True

    def _round(self, out: list[str]) -> None:
        game = EliminatorGame(
            score=self._score,
            two_players=self._two_players,
            speed=self._speed,
            draw=self._terminal.draw_rectangle,
        )
        while not game.is_over():
            key = self._read_key()
            if isinstance(key, str):
                game.handle_key(key)
            game.step()
        out.append(game.finish())
        self._terminal.beep(BEEP_HZ, BEEP_TICKS)


def _stdin_keys(stream: TextIO) -> Iterator[str]:
    while character := stream.read(1):
        yield character


def _lines_from(keys: Iterator[str]) -> Iterator[str]:
    while True:
        try:
            yield read_line(keys, CMD_MAX_CHARS)
        except EOFError:
            return


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the shell on standard input and output."""
    parser = argparse.ArgumentParser(prog="nanoshell", description="Interactive NanoShell")
    parser.parse_args(argv)
    keys = _stdin_keys(sys.stdin)
    shell = NanoShell(keys=keys, terminal=_StreamTerminal(sys.stdout))
    shell.run(_lines_from(keys))
    return 0


if __name__ == "__main__":
    sys.exit(main())