import pytest

from nanokernel import stdlib
from nanokernel.buddy import BuddyAllocator
from nanokernel.simplealloc import SimpleAllocator


def test_file_descriptor_values():
    assert [stdlib.FileDescriptor(v).value for v in (1, 2, 3)] == [1, 2, 3]
    with pytest.raises(ValueError):
        stdlib.FileDescriptor(4)


def test_format_signed_and_string():
    assert stdlib.format_message("%s=%d", "x", -5) == "x=-5"


def test_format_hex_is_uppercase():
    assert stdlib.format_message("%x", 255) == "FF"


def test_format_unsigned_wraps_to_32_bits():
    assert stdlib.format_message("%u", -1) == "4294967295"


def test_format_char_from_int_and_str():
    assert stdlib.format_message("%c%c", ord("a"), "b") == "ab"


def test_format_escapes():
    assert stdlib.format_message("a\\nb\\tc") == "a\nb\tc"


def test_format_unknown_escape_drops_next_character():
    assert stdlib.format_message("a\\qb") == "a\\b"


def test_format_trailing_percent_kept():
    assert stdlib.format_message("100%") == "100%"


def test_format_unknown_conversion_kept_literally():
    assert stdlib.format_message("%q") == "%q"


def test_format_missing_argument():
    with pytest.raises(TypeError):
        stdlib.format_message("%d")


def test_format_truncates_to_max_chars():
    result = stdlib.format_message("%s", "z" * 5000)
    assert len(result) == stdlib.MAX_CHARS


@pytest.mark.parametrize("number", [0, 7, -42, 2147483647, -2147483648])
def test_format_scan_round_trip(number):
    assert stdlib.scan("%d", stdlib.format_message("%d", number)) == [number]


def test_scan_several_fields():
    assert stdlib.scan("%s %d %u %c", "hello -3 12 q") == ["hello", -3, 12, "q"]


def test_scan_skips_leading_spaces():
    assert stdlib.scan("%s", "   word") == ["word"]


def test_scan_runs_out_of_input():
    with pytest.raises(ValueError):
        stdlib.scan("%d %d", "5")


def test_read_line_plain():
    assert stdlib.read_line(list("abc\n"), 100) == "abc"


def test_read_line_backspace():
    assert stdlib.read_line(list("abx\bc\n"), 100) == "abc"


def test_read_line_backspace_on_empty_is_ignored():
    assert stdlib.read_line(["\b", "a", "\n"], 100) == "a"


def test_read_line_truncates_to_count():
    assert stdlib.read_line(list("abcdef\n"), 3) == "abc"


def test_read_line_stops_at_newline():
    keys = iter("ab\ncd\n")
    assert stdlib.read_line(keys, 10) == "ab"
    assert stdlib.read_line(keys, 10) == "cd"


def test_read_line_without_newline():
    with pytest.raises(EOFError):
        stdlib.read_line(list("abc"), 10)


def test_compare_equal():
    assert stdlib.compare("help", "help") == 0


def test_compare_same_length_difference():
    assert stdlib.compare("abd", "abc") == ord("d") - ord("c")
    assert stdlib.compare("abc", "abd") < 0


def test_compare_longer_string_gives_its_extra_char():
    assert stdlib.compare("ab", "abc") == ord("c")
    assert stdlib.compare("abc", "ab") == ord("c")


def test_to_lower_ascii_only():
    assert stdlib.to_lower("HeLLo World") == "hello world"
    assert stdlib.to_lower("ÀB") == "Àb"


def test_to_lower_is_idempotent():
    once = stdlib.to_lower("MiXeD 123")
    assert stdlib.to_lower(once) == once


def test_malloc_check_passes_on_simple_allocator():
    allocator = SimpleAllocator()
    assert stdlib.test_malloc(allocator) == 0
    assert allocator.used() == 0