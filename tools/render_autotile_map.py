#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:

import sys
import argparse

from sprite_atlas.autotile import OccupancyGrid
from sprite_atlas.errors import print_error, print_warning
from sprite_atlas.json_formats import load_atlas_project_json
from sprite_atlas.loader import build_atlas, print_texture_error, texture_identifier_factory
from sprite_atlas.preview import render_autotile_map


def main() -> None:
    parser = argparse.ArgumentParser(description="Renders a text tile map with a blob autotile texture")
    parser.add_argument("-o", "--output", required=True, help="png output file")
    parser.add_argument("-j", "--processes", required=False, type=int, default=None, help="Number of processors to use (default=all)")
    parser.add_argument("project_json", help="atlas project JSON file")
    parser.add_argument("texture", help="autotile texture identifier")
    parser.add_argument("map_file", help="text map (any character except ' ' or '.' is a tile)")

    args = parser.parse_args()

    try:
        project = load_atlas_project_json(args.project_json)
        texture_id = texture_identifier_factory(project).create(args.texture)

        with open(args.map_file, "r") as fp:
            grid = OccupancyGrid.from_lines(fp)
    except Exception as e:
        print_error("ERROR", e)
        sys.exit(1)

    atlas = build_atlas(project, args.processes, print_texture_error, warning_handler=print_warning)
    if atlas is None:
        print_error("Error building atlas")
        sys.exit(1)

    if texture_id not in atlas:
        print_error("ERROR", f"Texture not found: { texture_id }")
        sys.exit(1)

    try:
        image = render_autotile_map(atlas, texture_id, grid)
    except Exception as e:
        print_error("ERROR", e)
        sys.exit(1)

    image.save(args.output, format="PNG")


if __name__ == "__main__":
    main()
