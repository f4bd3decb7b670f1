import io
import struct

import pytest

from nanokernel.modpacker import (
    BUFFER_SIZE,
    OUTPUT_FILE,
    PackError,
    build_image,
    check_files,
    main,
    write_file,
    write_size,
)


@pytest.fixture
def binaries(tmp_path):
    kernel = tmp_path / "kernel.bin"
    kernel.write_bytes(b"KERNEL" * 50)
    code = tmp_path / "0000-code.bin"
    code.write_bytes(bytes(range(256)))
    data = tmp_path / "0001-data.bin"
    data.write_bytes(b"This is sample data.\0")
    return kernel, code, data


def _module(path):
    content = path.read_bytes()
    return struct.pack("<I", len(content)) + content


def test_write_file_copies_everything_in_chunks():
    payload = bytes(range(256)) * 3
    assert len(payload) > BUFFER_SIZE
    target = io.BytesIO()
    assert write_file(target, io.BytesIO(payload)) == len(payload)
    assert target.getvalue() == payload


def test_write_size_is_little_endian_uint32(tmp_path):
    path = tmp_path / "m.bin"
    path.write_bytes(b"x" * 300)
    target = io.BytesIO()
    assert write_size(target, path) == 300
    assert target.getvalue() == struct.pack("<I", 300)


def test_check_files_reports_missing(tmp_path, binaries):
    missing = tmp_path / "absent.bin"
    with pytest.raises(PackError, match="Can't open file") as info:
        check_files([*binaries, missing])
    assert str(missing) in str(info.value)


def test_build_image_layout(tmp_path, binaries):
    kernel, code, data = binaries
    out = tmp_path / "packed.bin"
    build_image([kernel, code, data], out)
    expected = kernel.read_bytes() + struct.pack("<i", 2) + _module(code) + _module(data)
    assert out.read_bytes() == expected


def test_build_image_kernel_only(tmp_path, binaries):
    kernel = binaries[0]
    out = tmp_path / "packed.bin"
    build_image([kernel], out)
    assert out.read_bytes() == kernel.read_bytes() + struct.pack("<i", 0)


def test_build_image_unwritable_target(tmp_path, binaries):
    with pytest.raises(PackError, match="Can't create target file"):
        build_image([binaries[0]], tmp_path / "missing_dir" / "out.bin")


def test_main_writes_requested_output(tmp_path, binaries):
    out = tmp_path / "image.bin"
    assert main([str(p) for p in binaries] + ["-o", str(out)]) == 0
    kernel, code, data = binaries
    assert out.read_bytes() == kernel.read_bytes() + struct.pack("<i", 2) + _module(code) + _module(data)


def test_main_default_output(tmp_path, monkeypatch, binaries):
    monkeypatch.chdir(tmp_path)
    kernel = binaries[0]
    assert main([str(kernel)]) == 0
    assert (tmp_path / OUTPUT_FILE).read_bytes() == kernel.read_bytes() + struct.pack("<i", 0)


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.bin"), "-o", str(tmp_path / "o.bin")]) == 1
    assert "Can't open file" in capsys.readouterr().out
    assert not (tmp_path / "o.bin").exists()


def test_main_requires_kernel():
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2