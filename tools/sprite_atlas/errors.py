# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:

import sys
from typing import Final, Optional, TextIO, Union

from .ansi_color import colors_for


# `path` is the location of the error, the identifier or filename first.
# The exception arguments match the constructor so errors can cross process boundaries.
class FileError(Exception):
    def __init__(self, message: str, path: tuple[str, ...]):
        super().__init__(message, path)
        self.message: Final = message
        self.path: Final = path

    def __str__(self) -> str:
        return f"{ ' '.join(self.path) }: { self.message }"


class ConfigurationError(FileError):
    "Unsupported metadata value or invalid project configuration"


class ImageError(FileError):
    "Image cannot be read or has the wrong size"


class IdentifierError(ValueError):
    pass


class ResolutionError(RuntimeError):
    "No autotile adjacency rule matched a neighbour pattern"

    def __init__(self, x: Optional[int], y: Optional[int], mask: int):
        super().__init__(x, y, mask)
        self.x: Final = x
        self.y: Final = y
        self.mask: Final = mask

    def __str__(self) -> str:
        if self.x is None or self.y is None:
            return f"Wang autotile failed for neighbour pattern 0b{ self.mask:08b}"
        return f"Wang autotile failed at: { self.x }, { self.y } (neighbour pattern 0b{ self.mask:08b})"


class PackingPreconditionError(RuntimeError):
    pass


def null_print_function(message: str) -> None:
    pass


def print_error(msg: str, e: Optional[Union[str, Exception]] = None, fp: Optional[TextIO] = None) -> None:
    if fp is None:
        fp = sys.stderr

    ac = colors_for(fp)

    fp.write(ac.BOLD + ac.BRIGHT_RED)
    fp.write(msg)
    if e:
        fp.write(": ")
        fp.write(ac.NORMAL)
        if isinstance(e, str):
            fp.write(e)
        elif isinstance(e, FileError):
            if e.path:
                fp.write(ac.BOLD + ac.BRIGHT_WHITE)
                fp.write(e.path[0])
                fp.write(ac.NORMAL)
                if len(e.path) > 1:
                    fp.write(f" { ': '.join(e.path[1:]) }: ")
                else:
                    fp.write(": ")
            fp.write(ac.BRIGHT_RED)
            fp.write(e.message)
        elif isinstance(e, (ValueError, RuntimeError)):
            fp.write(str(e))
        else:
            fp.write(f"{ type(e).__name__ }({ e })")
    fp.write(ac.RESET + "\n")


def print_warning(msg: str, fp: Optional[TextIO] = None) -> None:
    if fp is None:
        fp = sys.stderr

    ac = colors_for(fp)

    fp.write(ac.BOLD + ac.BRIGHT_YELLOW + "WARNING: " + ac.NORMAL + msg + ac.RESET + "\n")
