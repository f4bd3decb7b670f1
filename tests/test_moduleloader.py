import struct

import pytest

from nanokernel.modpacker import build_image
from nanokernel.moduleloader import load_modules


def _payload(*modules):
    return struct.pack("<I", len(modules)) + b"".join(
        struct.pack("<I", len(m)) + m for m in modules
    )


def test_loads_each_module_to_its_target():
    code = b"\x90" * 10
    data = b"This is sample data.\0"
    loaded = load_modules(_payload(code, data), [0x400000, 0x500000])
    assert [m.data for m in loaded] == [code, data]
    assert [m.target_address for m in loaded] == [0x400000, 0x500000]
    assert [m.size for m in loaded] == [len(code), len(data)]


def test_offsets_point_inside_payload():
    payload = _payload(b"abc", b"defg")
    loaded = load_modules(payload, [1, 2])
    assert len(loaded) == 2
    for module in loaded:
        assert payload[module.offset:module.offset + module.size] == module.data


def test_empty_payload_has_no_modules():
    assert load_modules(struct.pack("<I", 0), []) == []


def test_extra_target_addresses_are_ignored():
    loaded = load_modules(_payload(b"x"), [10, 20, 30])
    assert [m.target_address for m in loaded] == [10]


def test_truncated_count_raises():
    with pytest.raises(ValueError):
        load_modules(b"\x01\x00", [])


def test_truncated_module_raises():
    with pytest.raises(ValueError):
        load_modules(_payload(b"abcdef")[:-2], [0x400000])


def test_missing_target_address_raises():
    with pytest.raises(ValueError):
        load_modules(_payload(b"a", b"b"), [0x400000])


def test_description_names_target_and_size():
    (module,) = load_modules(_payload(b"abc"), [0x400000])
    text = str(module)
    assert text.startswith("Will copy module at 0x")
    assert "to 0x400000" in text
    assert "(3 bytes)" in text


def test_round_trip_with_packer(tmp_path):
    kernel = tmp_path / "kernel.bin"
    kernel.write_bytes(b"K" * 77)
    first = tmp_path / "a.bin"
    first.write_bytes(b"first module")
    second = tmp_path / "b.bin"
    second.write_bytes(b"second\0")
    out = tmp_path / "packed.bin"
    build_image([kernel, first, second], out)
    payload = out.read_bytes()[len(kernel.read_bytes()):]
    loaded = load_modules(payload, [0x400000, 0x500000])
    assert [m.data for m in loaded] == [first.read_bytes(), second.read_bytes()]