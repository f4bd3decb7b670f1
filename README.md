# nanokernel

The working parts of a small teaching kernel as plain Python you can run
and inspect.

## What is in it

- `nanokernel.modpacker`: appends a kernel binary and any number of extra
  modules into one packed image. After the kernel comes a 32-bit count of
  extra modules, then each module preceded by its size as a little-endian
  32-bit integer. Functions: `check_files`, `write_size`, `write_file`,
  `build_image`, `main`. Errors are raised as `PackError`.
- `nanokernel.moduleloader`: `load_modules(payload, target_addresses)`
  reads the module count and the size-prefixed modules that follow it
  (the payload starts at the count) and returns a list of `LoadedModule`
  records (`offset`, `target_address`, `data`, `size`). A truncated
  payload, or more modules than target addresses, raises `ValueError`.
- `nanokernel.console`: `TextConsole` models an 80×25 text screen of
  character/style byte pairs with `print`, `print_char`, `print_styled`,
  `print_char_styled`, `newline`, `print_dec`, `print_hex`, `print_bin`,
  `print_base`, `clear`, `delete` and `text`. `uint_to_base(value, base)`
  renders an unsigned 64-bit number in bases 2 to 36.
- `nanokernel.registers`: `RegisterBackup` keeps the last snapshot of 18
  registers; `CpuException` (zero division, invalid opcode),
  `exception_message` and `format_register_dump`.
- `nanokernel.rtc`: `bcd_to_decimal`, `is_leap`, `timestamp_from_rtc`
  (raw BCD clock registers to a `TimeStamp` at GMT-3), `pit_divisor` and
  `TickClock`, whose `set_tick_frequency` returns the port writes that
  would program the timer.
- `nanokernel.buddy`: `BuddyAllocator`, a buddy allocator over a simulated
  1 MiB heap with 64-byte minimum blocks (`alloc`, `free`, `total`,
  `used`, `free_counts`, `stats`).
- `nanokernel.simplealloc`: `SimpleAllocator`, a first-fit allocator over
  the same simulated heap that merges a freed block with its free
  successor.
- `nanokernel.memory`: `Backend` (`buddy` or `simple`),
  `make_allocator(backend)` and `mem_status(allocator)`, which returns a
  `MemStatus` of total, used and free bytes.
- `nanokernel.stdlib`: `format_message` (the `%s %d %u %c %x` formatter
  with `\n` and `\t` escapes, output capped at 1000 characters), `scan`,
  `read_line`, `compare`, `to_lower`, `FileDescriptor` and
  `test_malloc(allocator)`, which returns 0 when the allocator passes.
- `nanokernel.eliminator`: the light-cycle game logic — `Direction`,
  `Player`, `Playground`, `Score`, `EliminatorGame` and `speed_from_key`.
  Player 1 steers with `w a s d`, player 2 with `i j k l`.
- `nanokernel.shell`: `NanoShell` with `execute(line)` and `run(lines)`,
  plus `interpret`, `argument_of`, `format_time`, `format_registers`,
  `anthem_notes` and the `Instruction` enum.

## Installation

```
pip install .
```

Python 3.10 or later; no third-party dependencies.

## Commands

Pack a kernel with its modules:

```
nanokernel-modpacker kernel.bin 0000-sampleCodeModule.bin 0001-sampleDataModule.bin -o packedKernel.bin
```

Without `-o` the output goes to `packedKernel.bin`. At most 128 files can
be packed. Every input must be readable; otherwise the command prints the
first one it cannot open and exits with status 1.

Start the shell, reading keys from standard input:

```
nanoshell
```

Shell commands: `help`, `registers`, `time`, `eliminator`, `echo`,
`clear`, `change_font`, `nano_song`, `test_zero_division`,
`test_invalid_opcode`, `test_malloc`, `man <command>`, `todo`,
`functions`, `mini_process` and `mem`. Command names are matched without
regard to case.

## Library use

```python
from nanokernel.memory import Backend, make_allocator, mem_status

heap = make_allocator(Backend.BUDDY)
block = heap.alloc(100)
print(mem_status(heap))
heap.free(block)
```

```python
from nanokernel.stdlib import format_message

format_message("%d apples and %x bytes", 3, 255)   # '3 apples and FF bytes'
```

```python
from nanokernel.shell import NanoShell

shell = NanoShell()
print(shell.execute("echo hello"))   # prints 'hello'
```

## What it does not do

- Nothing here boots or runs on hardware: memory, video, the clock and the
  timer are simulated, and there is no interrupt handling, scheduler or
  process management.
- `mini_process` prints a message and a counter-based process id; no
  process is started.
- `test_zero_division` and `test_invalid_opcode` print the exception
  report and wait for Enter; no CPU exception is raised.
- `registers` reports "backup not done" unless a filled `RegisterBackup`
  is handed to `NanoShell`.
- On the `nanoshell` command the screen is a text stream: rectangles drawn
  by the eliminator game are not shown, `change_font` only toggles a flag,
  and `nano_song` sounds as terminal bells.
- The `malloc`, `realloc`, `calloc`, `free` and `createProcess` names are
  recognised (and have `man` pages) but do nothing as shell commands.

## Tests

```
pip install .[test]
pytest
```