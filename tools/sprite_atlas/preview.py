# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:


import PIL.Image
from typing import Union

from .atlas import Rectangle, TextureAtlas
from .autotile import Autotiler, OccupancyGrid, N_VARIANTS
from .errors import ImageError
from .identifier import Identifier
from .images import new_transparent_image


def render_autotile_map(atlas: TextureAtlas, identifier: Union[Identifier, str], grid: OccupancyGrid) -> PIL.Image.Image:
    ts = atlas.tile_size
    entry = atlas[identifier]

    if len(entry.frames) < N_VARIANTS:
        raise ImageError(f"Not an autotile texture ({ len(entry.frames) } frames)", (str(identifier),))

    image = new_transparent_image(max(grid.width(), 1) * ts, max(grid.height(), 1) * ts)

    for x, y in grid.tiles():
        draw_autotile(image, atlas, entry.frames, grid, x, y)

    return image


def draw_autotile(image: PIL.Image.Image, atlas: TextureAtlas, frames: tuple[Rectangle, ...], autotiler: Autotiler, x: int, y: int) -> None:
    ts = atlas.tile_size
    rect = frames[autotiler.get_state(x, y)]
    image.paste(atlas.image.crop(rect.box()), (x * ts, y * ts))
