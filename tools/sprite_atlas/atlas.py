# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:


import math
import PIL.Image
from typing import Callable, Final, Iterable, Iterator, NamedTuple, Optional, Sequence, Union

from .errors import ConfigurationError, IdentifierError, ImageError, PackingPreconditionError, null_print_function
from .identifier import Identifier
from .images import new_transparent_image


class Rectangle(NamedTuple):
    x: int
    y: int
    width: int
    height: int

    def box(self) -> tuple[int, int, int, int]:
        "PIL (left, upper, right, lower) box"
        return self.x, self.y, self.x + self.width, self.y + self.height

    def overlaps(self, other: "Rectangle") -> bool:
        return (
            self.x < other.x + other.width
            and other.x < self.x + self.width
            and self.y < other.y + other.height
            and other.y < self.y + self.height
        )


# The frames of a single texture before it is packed into the atlas.
# Frame order is the animation (or autotile variant) order.
class ExtractedEntry(NamedTuple):
    identifier: Identifier
    frames: tuple[PIL.Image.Image, ...]

    @property
    def is_animated(self) -> bool:
        return len(self.frames) > 1


class AtlasEntry(NamedTuple):
    frames: tuple[Rectangle, ...]

    @property
    def is_animated(self) -> bool:
        return len(self.frames) > 1

    def frame(self, i: int) -> Rectangle:
        return self.frames[i]


class AtlasBuilder:
    """
    Accumulates the textures and animations that will be packed into the atlas.

    The atlas' missing entry is the lookup entry of the first identifier added.
    """

    def __init__(self, tile_size: int) -> None:
        if tile_size < 1:
            raise ValueError(f"Invalid tile size: { tile_size }")

        self.tile_size: Final = tile_size
        self.__entries: Final[list[ExtractedEntry]] = list()

    def add(self, entry: ExtractedEntry) -> None:
        if not entry.frames:
            raise ConfigurationError("Texture has no frames", (str(entry.identifier),))
        self.__entries.append(entry)

    def add_image(self, identifier: Identifier, image: PIL.Image.Image) -> None:
        self.add(ExtractedEntry(identifier, (image,)))

    def add_animation(self, identifier: Identifier, frames: Sequence[PIL.Image.Image]) -> None:
        self.add(ExtractedEntry(identifier, tuple(frames)))

    def entries(self) -> list[ExtractedEntry]:
        return list(self.__entries)

    def n_frames(self) -> int:
        return sum(len(e.frames) for e in self.__entries)

    def duplicate_identifiers(self) -> list[Identifier]:
        "Identifiers that have been added more than once (the last entry added is used by the atlas)"

        seen: set[Identifier] = set()
        out: list[Identifier] = list()
        for e in self.__entries:
            if e.identifier in seen and e.identifier not in out:
                out.append(e.identifier)
            seen.add(e.identifier)
        return out

    def build(self, log_message: Callable[[str], None] = null_print_function) -> "TextureAtlas":
        return pack_atlas(self.__entries, self.tile_size, log_message)


class TextureAtlas:
    """
    A square power-of-two image containing every texture frame.

    The atlas MUST NOT be modified after it has been packed.
    """

    def __init__(self, tile_size: int, grid_dimension: int, image: PIL.Image.Image, lookup: dict[Identifier, AtlasEntry], missing_entry: AtlasEntry):
        self.tile_size: Final = tile_size
        self.grid_dimension: Final = grid_dimension
        self.size: Final = grid_dimension * tile_size
        self.unit: Final = tile_size / self.size
        self.image: Final = image
        self.missing_entry: Final = missing_entry
        self.__lookup: Final = lookup

        assert image.size == (self.size, self.size)

    @staticmethod
    def __to_identifier(key: Union[Identifier, str]) -> Optional[Identifier]:
        if isinstance(key, Identifier):
            return key
        try:
            return Identifier.parse(key)
        except IdentifierError:
            return None

    def get(self, key: Union[Identifier, str]) -> AtlasEntry:
        "Returns the entry for `key` or the missing entry if `key` is not in the atlas"

        identifier = self.__to_identifier(key)
        if identifier is None:
            return self.missing_entry
        return self.__lookup.get(identifier, self.missing_entry)

    def __getitem__(self, key: Union[Identifier, str]) -> AtlasEntry:
        return self.get(key)

    def __contains__(self, key: Union[Identifier, str]) -> bool:
        identifier = self.__to_identifier(key)
        return identifier is not None and identifier in self.__lookup

    def __len__(self) -> int:
        return len(self.__lookup)

    def identifiers(self) -> Iterator[Identifier]:
        return iter(self.__lookup)

    def items(self) -> Iterable[tuple[Identifier, AtlasEntry]]:
        return self.__lookup.items()

    def frame_image(self, key: Union[Identifier, str], frame: int = 0) -> PIL.Image.Image:
        return self.image.crop(self.get(key).frames[frame].box())

    def rgba_data(self) -> bytes:
        "Row-major RGBA pixel data, 4 bytes per pixel"
        return self.image.tobytes()


def grid_geometry(n_frames: int) -> tuple[int, int, int]:
    """Returns (columns, rows, grid_dimension) for `n_frames` frames.

    `grid_dimension` is the smallest power of two that fits both the columns and rows.
    """

    if n_frames < 1:
        raise PackingPreconditionError("Cannot pack an atlas with no frames")

    columns = math.isqrt(n_frames)
    if columns * columns < n_frames:
        columns += 1
    rows = -(-n_frames // columns)

    grid_dimension = 1
    while grid_dimension < max(columns, rows):
        grid_dimension *= 2

    return columns, rows, grid_dimension


def frame_position(i: int, grid_dimension: int, tile_size: int) -> tuple[int, int]:
    return (i % grid_dimension) * tile_size, (i // grid_dimension) * tile_size


def pack_atlas(entries: Sequence[ExtractedEntry], tile_size: int, log_message: Callable[[str], None] = null_print_function) -> TextureAtlas:
    n_frames = sum(len(e.frames) for e in entries)

    log_message(f"Stitching atlas for { n_frames } textures...")

    grid_dimension = grid_geometry(n_frames)[2]
    atlas_size = grid_dimension * tile_size

    log_message(f"Creating atlas for size { atlas_size }x{ atlas_size }")

    image = new_transparent_image(atlas_size, atlas_size)

    lookup: dict[Identifier, AtlasEntry] = dict()

    i = 0
    for entry in entries:
        frames = list()

        for frame_id, frame in enumerate(entry.frames):
            if frame.size != (tile_size, tile_size):
                raise ImageError(
                    f"Frame { frame_id } is { frame.width }x{ frame.height } px, expected { tile_size }x{ tile_size } px",
                    (str(entry.identifier),),
                )
            if frame.mode != "RGBA":
                frame = frame.convert("RGBA")

            x, y = frame_position(i, grid_dimension, tile_size)
            image.paste(frame, (x, y))
            frames.append(Rectangle(x, y, tile_size, tile_size))
            i += 1

        lookup[entry.identifier] = AtlasEntry(tuple(frames))

    # The first identifier may have been replaced by a later entry
    missing_entry = lookup[entries[0].identifier]

    return TextureAtlas(tile_size, grid_dimension, image, lookup, missing_entry)
