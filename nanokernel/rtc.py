"""Timer ticks, PIT programming and real-time-clock date conversion."""

from __future__ import annotations

from dataclasses import dataclass

GMT_OFFSET = -3
PIT_FREQ = 1193182
PIT_COMMAND_PORT = 0x43
PIT_CHANNEL0_PORT = 0x40
PIT_SQUARE_WAVE_COMMAND = 0xB6
DEFAULT_FREQUENCY = 18
DAYS_PER_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


@dataclass
class TimeStamp:
    seconds: int
    minutes: int
    hours: int
    year: int
    month: int
    day: int


def bcd_to_decimal(value: int) -> int:
    """Decode a packed BCD byte."""
    return ((value & 0xF0) >> 4) * 10 + (value & 0x0F)


def is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def timestamp_from_rtc(seconds: int, minutes: int, hours: int, day: int, month: int, year: int) -> TimeStamp:
    """Convert raw BCD clock registers to local time (GMT-3)."""
    local_hours = bcd_to_decimal(hours) + GMT_OFFSET
    if local_hours < 0:
        local_hours += 24
    local_day = bcd_to_decimal((day - (1 if local_hours > 21 else 0)) & 0xFF)
    local_month = bcd_to_decimal(month)
    local_year = bcd_to_decimal(year)
    if local_day == 0:
        if local_month == 1:
            local_month = 12
            local_year = (local_year - 1) & 0xFFFF
        else:
            local_month -= 1
        if not 1 <= local_month <= 12:
            raise ValueError(f"invalid month register 0x{month:02X}")
        local_day = DAYS_PER_MONTH[local_month - 1] + int(local_month == 2 and is_leap(local_year))
    return TimeStamp(
        seconds=bcd_to_decimal(seconds),
        minutes=bcd_to_decimal(minutes),
        hours=local_hours,
        year=local_year,
        month=local_month,
        day=local_day,
    )


def pit_divisor(frequency: int) -> int:
    """The 16-bit divisor programmed into the PIT for a tick frequency."""
    if not 1 <= frequency <= 0xFFFF:
        raise ValueError(f"frequency must be between 1 and 65535, got {frequency}")
    return (PIT_FREQ // frequency) & 0xFFFF


class TickClock:
    """Counts timer interrupts and converts them to seconds."""

    def __init__(self) -> None:
        self._ticks = 0
        self._frequency = DEFAULT_FREQUENCY

    @property
    def frequency(self) -> int:
        return self._frequency

    def timer_handler(self) -> None:
        self._ticks += 1

    def ticks_elapsed(self) -> int:
        return self._ticks

    def seconds_elapsed(self) -> int:
        return self._ticks // self._frequency

    def set_tick_frequency(self, frequency: int) -> tuple[tuple[int, int], ...]:
        """Change the tick rate; return the (port, byte) writes that program the PIT."""
        divisor = pit_divisor(frequency)
        self._frequency = frequency
        return (
            (PIT_COMMAND_PORT, PIT_SQUARE_WAVE_COMMAND),
            (PIT_CHANNEL0_PORT, divisor & 0xFF),
            (PIT_CHANNEL0_PORT, (divisor >> 8) & 0xFF),
        )