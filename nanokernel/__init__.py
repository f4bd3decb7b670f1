"""Simulated parts of a small teaching kernel: module packer and loader, allocators, console, clock, shell and game."""

__version__ = "0.1.0"

__all__ = [
    "buddy",
    "console",
    "eliminator",
    "memory",
    "modpacker",
    "moduleloader",
    "registers",
    "rtc",
    "shell",
    "simplealloc",
    "stdlib",
]