# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:

import os
from typing import final, Final, TextIO, Type, Union


@final
class NoAnsiColors:
    RESET: Final = ""

    BOLD: Final = ""
    NORMAL: Final = ""

    BRIGHT_RED: Final = ""
    BRIGHT_YELLOW: Final = ""
    BRIGHT_WHITE: Final = ""


@final
class AnsiColors:
    RESET: Final = "\033[0m"

    BOLD: Final = "\033[1m"
    NORMAL: Final = "\033[22m"

    BRIGHT_RED: Final = "\033[91m"
    BRIGHT_YELLOW: Final = "\033[93m"
    BRIGHT_WHITE: Final = "\033[97m"


ColorTable = Union[Type[NoAnsiColors], Type[AnsiColors]]


def colors_for(fp: TextIO) -> ColorTable:
    if os.getenv("NO_COLOR", "") != "":
        return NoAnsiColors
    if not fp.isatty():
        return NoAnsiColors
    return AnsiColors
