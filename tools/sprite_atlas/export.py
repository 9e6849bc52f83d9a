# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:


import json
from typing import Any

from .atlas import AtlasEntry, TextureAtlas
from .identifier import Identifier
from .json_formats import Filename


def _entry_to_list(entry: AtlasEntry) -> list[list[int]]:
    return [list(r) for r in entry.frames]


def atlas_to_json_dict(atlas: TextureAtlas) -> dict[str, Any]:
    return {
        "tile_size": atlas.tile_size,
        "size": atlas.size,
        "unit": atlas.unit,
        "missing": _entry_to_list(atlas.missing_entry),
        "entries": {str(i): _entry_to_list(e) for i, e in atlas.items()},
    }


def save_atlas_json(filename: Filename, atlas: TextureAtlas) -> None:
    with open(filename, "w") as fp:
        json.dump(atlas_to_json_dict(atlas), fp, indent=2)
        fp.write("\n")


def save_atlas_image(filename: Filename, atlas: TextureAtlas) -> None:
    atlas.image.save(filename, format="PNG")


def save_atlas_rgba(filename: Filename, atlas: TextureAtlas) -> None:
    with open(filename, "wb") as fp:
        fp.write(atlas.rgba_data())


def debug_image_filename(identifier: Identifier) -> Filename:
    "ATLAS_DEBUG_<directory of the identifier path, '/' replaced with '.'>.png"

    path = identifier.path
    directory = path[: path.rfind("/")] if "/" in path else path
    return f"ATLAS_DEBUG_{ directory.replace('/', '.') }.png"
