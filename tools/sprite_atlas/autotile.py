# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:

"""
Wang blob autotiling.

A tile's neighbourhood is 8 booleans in the order NW, N, NE, W, E, SW, S, SE.
As an 8 bit mask the first neighbour (NW) is the most significant bit.

    ┊       ┊
 NW ┊   N   ┊ NE
┈┈┈┈┼┈┈┈┈┈┈┈┼┈┈┈┈
  W ┊ tile  ┊ E
┈┈┈┈┼┈┈┈┈┈┈┈┼┈┈┈┈
 SW ┊   S   ┊ SE
    ┊       ┊

The variant of a tile is the index of the first rule in `ADJACENCY_RULES` that matches its
neighbourhood.  The rules are ordered, later rules are only reached if every earlier rule fails.
The variant index is also the frame index of the blob autotile atlas entry.
"""

from abc import ABC, abstractmethod
from typing import Callable, Final, Iterable, NamedTuple, Optional, Sequence

from .errors import ResolutionError


N_NEIGHBOURS: Final = 8

# (x, y) offset of each neighbour, in pattern order
NEIGHBOUR_OFFSETS: Final = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


class AdjacencyRule(NamedTuple):
    # 0 -> empty, 1 -> tile
    match_mask: int
    # 0 -> must match, 1 -> ignored (the neighbour can be a tile or empty)
    ignore_mask: int

    def matches(self, mask: int) -> bool:
        return (mask ^ self.match_mask) & ~self.ignore_mask & 0xFF == 0


ADJACENCY_RULES: Final = (
    AdjacencyRule(0b_000_01_011, 0b_101_00_100),  #  0
    AdjacencyRule(0b_000_11_111, 0b_101_00_000),  #  1
    AdjacencyRule(0b_000_10_110, 0b_101_00_001),  #  2
    AdjacencyRule(0b_000_00_010, 0b_101_00_101),  #  3
    AdjacencyRule(0b_000_01_010, 0b_101_00_100),  #  4
    AdjacencyRule(0b_000_11_110, 0b_101_00_000),  #  5
    AdjacencyRule(0b_000_11_011, 0b_101_00_000),  #  6
    AdjacencyRule(0b_000_10_010, 0b_101_00_001),  #  7
    AdjacencyRule(0b_000_11_010, 0b_101_00_000),  #  8
    AdjacencyRule(0b_110_11_011, 0b_000_00_000),  #  9
    AdjacencyRule(0b_011_01_011, 0b_100_00_100),  # 10
    AdjacencyRule(0b_111_11_111, 0b_000_00_000),  # 11
    AdjacencyRule(0b_110_10_110, 0b_001_00_001),  # 12
    AdjacencyRule(0b_010_00_010, 0b_101_00_101),  # 13
    AdjacencyRule(0b_011_01_010, 0b_100_00_100),  # 14
    AdjacencyRule(0b_111_11_110, 0b_000_00_000),  # 15
    AdjacencyRule(0b_111_11_011, 0b_000_00_000),  # 16
    AdjacencyRule(0b_110_10_010, 0b_001_00_001),  # 17
    AdjacencyRule(0b_111_11_010, 0b_000_00_000),  # 18
    AdjacencyRule(0b_011_11_110, 0b_000_00_000),  # 19
    AdjacencyRule(0b_011_01_000, 0b_100_00_101),  # 20
    AdjacencyRule(0b_111_11_000, 0b_000_00_101),  # 21
    AdjacencyRule(0b_110_10_000, 0b_001_00_101),  # 22
    AdjacencyRule(0b_010_00_000, 0b_101_00_101),  # 23
    AdjacencyRule(0b_010_01_010, 0b_100_00_101),  # 24
    AdjacencyRule(0b_110_11_111, 0b_000_00_000),  # 25
    AdjacencyRule(0b_011_11_111, 0b_000_00_000),  # 26
    AdjacencyRule(0b_010_10_110, 0b_001_00_001),  # 27
    AdjacencyRule(0b_010_11_111, 0b_000_00_000),  # 28
    AdjacencyRule(0b_010_11_011, 0b_000_00_000),  # 29
    AdjacencyRule(0b_010_11_110, 0b_000_00_000),  # 30
    AdjacencyRule(0b_000_01_000, 0b_101_00_101),  # 31
    AdjacencyRule(0b_000_11_000, 0b_101_00_101),  # 32
    AdjacencyRule(0b_000_10_000, 0b_101_00_101),  # 33
    AdjacencyRule(0b_000_00_000, 0b_101_00_101),  # 34
    AdjacencyRule(0b_010_01_000, 0b_100_00_101),  # 35
    AdjacencyRule(0b_110_11_000, 0b_000_00_101),  # 36
    AdjacencyRule(0b_011_11_000, 0b_000_00_101),  # 37
    AdjacencyRule(0b_010_10_000, 0b_001_00_101),  # 38
    AdjacencyRule(0b_010_11_000, 0b_000_00_101),  # 39
    AdjacencyRule(0b_011_11_010, 0b_000_00_000),  # 40
    AdjacencyRule(0b_110_11_010, 0b_000_00_000),  # 41
    AdjacencyRule(0b_010_01_010, 0b_100_00_100),  # 42
    AdjacencyRule(0b_110_11_110, 0b_000_00_000),  # 43
    AdjacencyRule(0b_011_11_011, 0b_000_00_000),  # 44
    AdjacencyRule(0b_010_10_010, 0b_001_00_001),  # 45
    AdjacencyRule(0b_010_11_010, 0b_000_00_000),  # 46
)

N_VARIANTS: Final = len(ADJACENCY_RULES)

FULLY_SURROUNDED_VARIANT: Final = 11

assert N_VARIANTS == 47


def pattern_to_mask(pattern: Sequence[bool]) -> int:
    if len(pattern) != N_NEIGHBOURS:
        raise ValueError(f"Expected { N_NEIGHBOURS } neighbours, got { len(pattern) }")

    mask = 0
    for b in pattern:
        mask = (mask << 1) | bool(b)
    return mask


def mask_to_pattern(mask: int) -> tuple[bool, ...]:
    return tuple(bool(mask & (1 << (7 - j))) for j in range(N_NEIGHBOURS))


def resolve_mask(mask: int, position: Optional[tuple[int, int]] = None) -> int:
    "Returns the index of the first adjacency rule that matches the neighbour mask"

    if mask < 0 or mask > 0xFF:
        raise ValueError(f"Invalid neighbour mask: { mask } (expected 0 - 255)")

    for i, rule in enumerate(ADJACENCY_RULES):
        if rule.matches(mask):
            return i

    if position is not None:
        raise ResolutionError(position[0], position[1], mask)
    raise ResolutionError(None, None, mask)


def resolve(pattern: Sequence[bool], position: Optional[tuple[int, int]] = None) -> int:
    return resolve_mask(pattern_to_mask(pattern), position)


def neighbour_pattern(check_tile: Callable[[int, int], bool], x: int, y: int) -> tuple[bool, ...]:
    return tuple(bool(check_tile(x + dx, y + dy)) for dx, dy in NEIGHBOUR_OFFSETS)


class Autotiler(ABC):
    @abstractmethod
    def check_tile(self, x: int, y: int) -> bool:
        pass

    def get_state(self, x: int, y: int) -> int:
        "Returns the autotile variant of the tile at (x, y)"
        return resolve(neighbour_pattern(self.check_tile, x, y), (x, y))


class OccupancyGrid(Autotiler):
    "A set of occupied tile positions"

    EMPTY_CHARACTERS: Final = " ."

    def __init__(self, tiles: Iterable[tuple[int, int]]):
        self.__tiles: Final = frozenset(tiles)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "OccupancyGrid":
        "Any character except space or '.' is an occupied tile"

        return cls(
            (x, y) for y, line in enumerate(lines) for x, c in enumerate(line.rstrip("\r\n")) if c not in cls.EMPTY_CHARACTERS
        )

    def check_tile(self, x: int, y: int) -> bool:
        return (x, y) in self.__tiles

    def tiles(self) -> list[tuple[int, int]]:
        "Occupied tiles in row-major order"
        return sorted(self.__tiles, key=lambda p: (p[1], p[0]))

    def width(self) -> int:
        return max((x for x, _y in self.__tiles), default=-1) + 1

    def height(self) -> int:
        return max((y for _x, y in self.__tiles), default=-1) + 1
