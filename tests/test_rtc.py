import pytest

from nanokernel.rtc import (
    DEFAULT_FREQUENCY,
    TickClock,
    TimeStamp,
    bcd_to_decimal,
    is_leap,
    pit_divisor,
    timestamp_from_rtc,
)


def test_bcd_round_trip():
    for number in range(100):
        assert bcd_to_decimal(int(f"{number:02d}", 16)) == number


@pytest.mark.parametrize("year, leap", [(2000, True), (1900, False), (2024, True), (2023, False)])
def test_is_leap(year, leap):
    assert is_leap(year) is leap


def test_daytime_keeps_date():
    ts = timestamp_from_rtc(0x10, 0x20, 0x15, 0x14, 0x07, 0x24)
    assert (ts.seconds, ts.minutes) == (10, 20)
    assert (ts.day, ts.month, ts.year) == (14, 7, 24)


def test_local_hours_cover_the_day_once():
    hours = [timestamp_from_rtc(0, 0, int(f"{h:02d}", 16), 0x15, 0x06, 0x24).hours for h in range(24)]
    assert sorted(hours) == list(range(24))


def test_rollback_into_leap_february():
    ts = timestamp_from_rtc(0x30, 0x45, 0x01, 0x01, 0x03, 0x24)
    assert ts == TimeStamp(seconds=30, minutes=45, hours=22, year=24, month=2, day=29)


def test_rollback_into_previous_year():
    ts = timestamp_from_rtc(0x00, 0x00, 0x02, 0x01, 0x01, 0x25)
    assert ts == TimeStamp(seconds=0, minutes=0, hours=23, year=24, month=12, day=31)


def test_rollback_into_common_february():
    ts = timestamp_from_rtc(0x00, 0x00, 0x02, 0x01, 0x03, 0x23)
    assert (ts.year, ts.month, ts.day) == (23, 2, 28)


def test_invalid_month_on_rollback_raises():
    with pytest.raises(ValueError):
        timestamp_from_rtc(0x00, 0x00, 0x02, 0x01, 0x00, 0x24)


@pytest.mark.parametrize("frequency", [18, 100, 120, 1000, 65535])
def test_pit_divisor_fits_sixteen_bits(frequency):
    assert 0 <= pit_divisor(frequency) <= 0xFFFF


@pytest.mark.parametrize("frequency", [0, -5, 70000])
def test_pit_divisor_rejects_bad_frequency(frequency):
    with pytest.raises(ValueError):
        pit_divisor(frequency)


def test_clock_counts_ticks_and_seconds():
    clock = TickClock()
    assert clock.frequency == DEFAULT_FREQUENCY
    for _ in range(DEFAULT_FREQUENCY - 1):
        clock.timer_handler()
    assert clock.seconds_elapsed() == 0
    clock.timer_handler()
    assert clock.ticks_elapsed() == DEFAULT_FREQUENCY
    assert clock.seconds_elapsed() == 1


def test_set_tick_frequency_programs_pit():
    clock = TickClock()
    writes = clock.set_tick_frequency(120)
    assert writes[0] == (0x43, 0xB6)
    assert writes[1][0] == writes[2][0] == 0x40
    assert writes[1][1] | (writes[2][1] << 8) == pit_divisor(120)
    assert clock.frequency == 120


def test_seconds_follow_new_frequency():
    clock = TickClock()
    clock.set_tick_frequency(120)
    for _ in range(240):
        clock.timer_handler()
    assert clock.seconds_elapsed() == 240 // 120


def test_bad_frequency_leaves_clock_unchanged():
    clock = TickClock()
    with pytest.raises(ValueError):
        clock.set_tick_frequency(0)
    assert clock.frequency == DEFAULT_FREQUENCY