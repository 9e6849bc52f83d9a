# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:


import PIL.Image
import PIL.ImageDraw

from .errors import ImageError
from .json_formats import Filename


TRANSPARENT = (0, 0, 0, 0)
MISSING_TEXTURE_COLORS = ((0, 0, 0, 255), (255, 0, 255, 255))


def load_rgba_image(filename: Filename) -> PIL.Image.Image:
    try:
        with PIL.Image.open(filename) as image:
            image.load()
    except Exception as e:
        raise ImageError(str(e), (filename,))

    if image.mode != "RGBA":
        image = image.convert("RGBA")

    return image


def new_transparent_image(width: int, height: int) -> PIL.Image.Image:
    return PIL.Image.new("RGBA", (width, height), TRANSPARENT)


# NOTE: No bounds checking
def crop_tile(image: PIL.Image.Image, x: int, y: int, tile_size: int) -> PIL.Image.Image:
    return image.crop((x, y, x + tile_size, y + tile_size))


def composite(canvas: PIL.Image.Image, image: PIL.Image.Image, x: int, y: int) -> None:
    """Alpha composites `image` onto `canvas` at (x, y), clipping anything outside the canvas.

    Unlike `Image.alpha_composite`, the destination position may be negative.
    """

    left = max(x, 0)
    top = max(y, 0)
    right = min(x + image.width, canvas.width)
    bottom = min(y + image.height, canvas.height)

    if right <= left or bottom <= top:
        return

    canvas.alpha_composite(image, dest=(left, top), source=(left - x, top - y, right - x, bottom - y))


def create_missing_texture(tile_size: int) -> PIL.Image.Image:
    "Black square with magenta top-left and bottom-right quadrants"

    background, foreground = MISSING_TEXTURE_COLORS
    half = tile_size // 2

    image = PIL.Image.new("RGBA", (tile_size, tile_size), background)
    draw = PIL.ImageDraw.Draw(image)
    if tile_size > 1:
        draw.rectangle((0, 0, half - 1, half - 1), fill=foreground)
        draw.rectangle((half, half, tile_size - 1, tile_size - 1), fill=foreground)
    return image
