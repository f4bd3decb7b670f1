"""Pack a kernel binary and its modules into one loadable image.

The image is the kernel, then a 32-bit count of extra modules, then each
module preceded by its size as a 32-bit little-endian integer.
"""

from __future__ import annotations

import argparse
import os
import struct
import sys
from typing import BinaryIO, Iterable, Sequence

BUFFER_SIZE = 128
OUTPUT_FILE = "packedKernel.bin"
MAX_FILES = 128
VERSION = "ModulePacker v0.2"


class PackError(Exception):
    """Raised when an image cannot be built."""


def check_files(paths: Iterable[str | os.PathLike]) -> None:
    """Raise PackError naming the first path that cannot be read."""
    for path in paths:
        if not os.access(path, os.R_OK):
            raise PackError(f"Can't open file: {os.fspath(path)}")


def write_size(target: BinaryIO, path: str | os.PathLike) -> int:
    """Write the size of the file at path as a little-endian uint32."""
    size = os.stat(path).st_size & 0xFFFFFFFF
    target.write(struct.pack("<I", size))
    return size


def write_file(target: BinaryIO, source: BinaryIO) -> int:
    """Copy source into target in small chunks; return the bytes copied."""
    written = 0
    while chunk := source.read(BUFFER_SIZE):
        target.write(chunk)
        written += len(chunk)
    return written


def build_image(paths: Sequence[str | os.PathLike], output_file: str | os.PathLike) -> None:
    """Write the kernel (first path) and the modules (the rest) to output_file."""
    paths = list(paths)
    if not paths:
        raise PackError("No kernel file given")
    kernel, *modules = paths
    try:
        target = open(output_file, "wb")
    except OSError as exc:
        raise PackError("Can't create target file") from exc
    with target:
        with open(kernel, "rb") as source:
            write_file(target, source)
        target.write(struct.pack("<i", len(modules)))
        for module in modules:
            write_size(target, module)
            with open(module, "rb") as source:
                write_file(target, source)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mp",
        description="ModulePacker is an appender of binary files to be loaded all together",
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        default=OUTPUT_FILE,
        help="Output to FILE instead of standard output",
    )
    parser.add_argument("-V", "--version", action="version", version=VERSION)
    parser.add_argument("files", nargs="+", metavar="FILE", help="KernelFile Module1 Module2 ...")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point; returns the process exit status."""
    parser = _parser()
    args = parser.parse_args(argv)
    if len(args.files) > MAX_FILES:
        parser.error(f"at most {MAX_FILES} files can be packed")
    try:
        check_files(args.files)
        build_image(args.files, args.output)
    except PackError as exc:
        print(exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())