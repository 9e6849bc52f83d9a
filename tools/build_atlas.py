#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:

import sys
import argparse
from typing import Optional

from sprite_atlas.atlas import TextureAtlas
from sprite_atlas.errors import print_error, print_warning, null_print_function
from sprite_atlas.export import save_atlas_image, save_atlas_json, save_atlas_rgba, debug_image_filename
from sprite_atlas.json_formats import AtlasProject, Filename, load_atlas_project_json
from sprite_atlas.loader import build_atlas, print_texture_error


def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Packs the textures of an atlas project into a single image")
    parser.add_argument("-o", "--output", required=True, help="atlas png output file")
    parser.add_argument("-J", "--json", required=False, help="atlas lookup JSON output file")
    parser.add_argument("--rgba", required=False, help="raw RGBA atlas output file")
    parser.add_argument("-j", "--processes", required=False, type=int, default=None, help="Number of processors to use (default=all)")

    debug = parser.add_mutually_exclusive_group()
    debug.add_argument("--debug-image", required=False, help="Write a debug copy of the atlas image to this file")
    debug.add_argument(
        "--debug", action="store_true", help="Write a debug copy of the atlas image (project debug_image or ATLAS_DEBUG_<dir>.png)"
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Print progress messages")
    parser.add_argument("project_json", help="atlas project JSON file")

    return parser.parse_args(argv)


def debug_image_output(args: argparse.Namespace, project: AtlasProject, atlas: TextureAtlas) -> Optional[Filename]:
    if args.debug_image:
        return args.debug_image
    if args.debug:
        return project.debug_image or debug_image_filename(next(atlas.identifiers()))
    return project.debug_image


def main() -> None:
    args = parse_arguments()

    try:
        project = load_atlas_project_json(args.project_json)
    except Exception as e:
        print_error("ERROR", e)
        sys.exit(1)

    log_message = print if args.verbose else null_print_function

    atlas = build_atlas(project, args.processes, print_texture_error, log_message, print_warning)
    if atlas is None:
        print_error("Error building atlas")
        sys.exit(1)

    save_atlas_image(args.output, atlas)

    if args.json:
        save_atlas_json(args.json, atlas)

    if args.rgba:
        save_atlas_rgba(args.rgba, atlas)

    debug_image = debug_image_output(args, project, atlas)
    if debug_image:
        log_message(f"Writing debug image to { debug_image }")
        save_atlas_image(debug_image, atlas)


if __name__ == "__main__":
    main()
