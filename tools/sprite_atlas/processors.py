# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:


import PIL.Image
from abc import ABC, abstractmethod
from typing import Final, Sequence

from .atlas import AtlasBuilder
from .errors import ConfigurationError, ImageError
from .identifier import Identifier
from .images import crop_tile, composite, new_transparent_image
from .json_formats import TextureMetadata


class TextureMetadataProcessor(ABC):
    """
    Converts a texture and its metadata into atlas entries.

    A processor MUST NOT add anything to the builder if its metadata key is not present.
    Processors are pickled and sent to the texture loading processes.
    """

    @abstractmethod
    def process(self, identifier: Identifier, texture: PIL.Image.Image, metadata: TextureMetadata, builder: AtlasBuilder) -> None:
        pass


#
# Strip
# =====
#

# mode -> (x axis, y axis)
STRIP_AXES: Final = {
    "horizontal": (1, 0),
    "vertical": (0, 1),
}


def extract_strip_frames(image: PIL.Image.Image, mode: str, tile_size: int) -> list[PIL.Image.Image]:
    ax, ay = STRIP_AXES[mode]

    size = image.width if ax else image.height

    return [crop_tile(image, ax * i * tile_size, ay * i * tile_size, tile_size) for i in range(size // tile_size)]


class StripProcessor(TextureMetadataProcessor):
    KEY: Final = "strip"

    def process(self, identifier: Identifier, texture: PIL.Image.Image, metadata: TextureMetadata, builder: AtlasBuilder) -> None:
        mode = metadata.get_optional_string(self.KEY)
        if mode is None:
            return

        if mode not in STRIP_AXES:
            raise ConfigurationError(
                f"Unsupported strip mode: { mode } (valid options include: 'horizontal', 'vertical')", (str(identifier), self.KEY)
            )

        ts = builder.tile_size
        other_axis = texture.height if mode == "horizontal" else texture.width
        if other_axis < ts:
            raise ImageError(f"Strip image is too small ({ texture.width }x{ texture.height } px)", (str(identifier),))

        frames = extract_strip_frames(texture, mode, ts)
        if not frames:
            raise ImageError(f"Strip image is too small ({ texture.width }x{ texture.height } px)", (str(identifier),))

        builder.add_animation(identifier, frames)


#
# Autotile
# ========
#

# (x_shift, n_tiles) for each row of a blob autotile image
AUTOTILE_BLOB_ROWS: Final = (
    (0, 10),
    (0, 10),
    (0, 11),
    (0, 11),
    (4, 5),
)

N_AUTOTILE_BLOB_FRAMES: Final = 47

# Size of a blob autotile image in tiles
AUTOTILE_BLOB_WIDTH: Final = max(s + n for s, n in AUTOTILE_BLOB_ROWS)
AUTOTILE_BLOB_HEIGHT: Final = len(AUTOTILE_BLOB_ROWS)

assert sum(n for _s, n in AUTOTILE_BLOB_ROWS) == N_AUTOTILE_BLOB_FRAMES


def autotile_blob_tile_positions() -> list[tuple[int, int]]:
    "Returns the (x, y) tile position of each blob autotile frame, in variant order"

    return [(x + x_shift, y) for y, (x_shift, n_tiles) in enumerate(AUTOTILE_BLOB_ROWS) for x in range(n_tiles)]


def extract_autotile_frames(image: PIL.Image.Image, tile_size: int) -> list[PIL.Image.Image]:
    return [crop_tile(image, x * tile_size, y * tile_size, tile_size) for x, y in autotile_blob_tile_positions()]


class AutotileProcessor(TextureMetadataProcessor):
    KEY: Final = "autotile"

    def process(self, identifier: Identifier, texture: PIL.Image.Image, metadata: TextureMetadata, builder: AtlasBuilder) -> None:
        mode = metadata.get_optional_string(self.KEY)
        if mode is None:
            return

        if mode != "blob":
            raise ConfigurationError(f"Unsupported autotile type: { mode } (valid options include: 'blob')", (str(identifier), self.KEY))

        ts = builder.tile_size
        if texture.width < AUTOTILE_BLOB_WIDTH * ts or texture.height < AUTOTILE_BLOB_HEIGHT * ts:
            raise ImageError(
                f"Blob autotile image MUST BE at least { AUTOTILE_BLOB_WIDTH * ts }x{ AUTOTILE_BLOB_HEIGHT * ts } px", (str(identifier),)
            )

        builder.add_animation(identifier, extract_autotile_frames(texture, ts))


#
# Scrolling textures
# ==================
#


def _sign(i: int) -> int:
    return (i > 0) - (i < 0)


def scroll_offsets(i: int, increment_x: int, increment_y: int, width: int, height: int) -> tuple[tuple[int, int], tuple[int, int]]:
    """Returns the (primary, wrap) draw positions of frame `i` of a scrolling texture.

    The wrap copy is one image width/height behind the primary copy in the direction of each non-zero increment.
    """

    x = increment_x * i
    y = increment_y * i

    return (x, y), (x - _sign(increment_x) * width, y - _sign(increment_y) * height)


def build_scrolling_frames(image: PIL.Image.Image, n_frames: int, increment_x: int, increment_y: int) -> list[PIL.Image.Image]:
    frames = list()

    for i in range(n_frames):
        primary, wrap = scroll_offsets(i, increment_x, increment_y, image.width, image.height)

        frame = new_transparent_image(image.width, image.height)
        composite(frame, image, *primary)
        composite(frame, image, *wrap)
        frames.append(frame)

    return frames


class ScrollingTextureProcessor(TextureMetadataProcessor):
    KEY: Final = "autoscroll"
    FIELDS: Final = ("frames", "increment_x", "increment_y")

    def process(self, identifier: Identifier, texture: PIL.Image.Image, metadata: TextureMetadata, builder: AtlasBuilder) -> None:
        settings = metadata.get_optional_dict(self.KEY)
        if settings is None:
            return

        if not all(settings.contains(f) for f in self.FIELDS):
            return

        n_frames = settings.get_int("frames")
        increment_x = settings.get_int("increment_x")
        increment_y = settings.get_int("increment_y")

        if n_frames < 1:
            raise ConfigurationError(f"Invalid number of scrolling frames: { n_frames }", (str(identifier), self.KEY, "frames"))

        ts = builder.tile_size
        if texture.size != (ts, ts):
            raise ImageError(f"Scrolling texture MUST BE { ts }x{ ts } px", (str(identifier),))

        builder.add_animation(identifier, build_scrolling_frames(texture, n_frames, increment_x, increment_y))


#
# Processor registry
# ==================
#

# Every processor is applied to every texture, in this order.
PROCESSORS: Final[list[TextureMetadataProcessor]] = [
    AutotileProcessor(),
    ScrollingTextureProcessor(),
    StripProcessor(),
]


def register_processor(processor: TextureMetadataProcessor) -> None:
    PROCESSORS.append(processor)


def run_processors(
    identifier: Identifier,
    texture: PIL.Image.Image,
    metadata: TextureMetadata,
    builder: AtlasBuilder,
    processors: Sequence[TextureMetadataProcessor],
) -> int:
    "Returns the number of entries added to `builder`"

    n_entries = len(builder.entries())
    for p in processors:
        p.process(identifier, texture, metadata, builder)
    return len(builder.entries()) - n_entries
