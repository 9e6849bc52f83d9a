#!/usr/bin/env python3

import itertools
import unittest

import PIL.Image

from sprite_atlas.atlas import AtlasBuilder, ExtractedEntry, Rectangle, grid_geometry, pack_atlas
from sprite_atlas.errors import ConfigurationError, ImageError, PackingPreconditionError
from sprite_atlas.identifier import Identifier


def solid(tile_size: int, i: int) -> PIL.Image.Image:
    return PIL.Image.new("RGBA", (tile_size, tile_size), (i * 20 % 256, 255 - i, 64, 255))


def ident(name: str) -> Identifier:
    return Identifier("builtin", "textures/" + name)


class GridGeometryTests(unittest.TestCase):
    def test_ten_frames(self) -> None:
        self.assertEqual(grid_geometry(10), (4, 3, 4))

    def test_sizes(self) -> None:
        self.assertEqual(grid_geometry(1), (1, 1, 1))
        self.assertEqual(grid_geometry(2), (2, 1, 2))
        self.assertEqual(grid_geometry(5), (3, 2, 4))
        self.assertEqual(grid_geometry(16), (4, 4, 4))
        self.assertEqual(grid_geometry(17), (5, 4, 8))
        self.assertEqual(grid_geometry(64), (8, 8, 8))
        self.assertEqual(grid_geometry(65), (9, 8, 16))

    def test_grid_dimension_is_a_power_of_two(self) -> None:
        for n in range(1, 300):
            columns, rows, dim = grid_geometry(n)
            self.assertEqual(dim & (dim - 1), 0)
            self.assertGreaterEqual(dim, max(columns, rows))
            self.assertGreaterEqual(columns * rows, n)

    def test_no_frames(self) -> None:
        with self.assertRaises(PackingPreconditionError):
            grid_geometry(0)


class PackingTests(unittest.TestCase):
    def build_ten_frame_atlas(self) -> tuple:
        builder = AtlasBuilder(8)
        builder.add_image(ident("missing"), solid(8, 0))
        builder.add_animation(ident("anim"), [solid(8, i) for i in range(1, 6)])
        builder.add_image(ident("a"), solid(8, 6))
        builder.add_animation(ident("b"), [solid(8, i) for i in range(7, 10)])
        return builder, builder.build()

    def test_ten_frames(self) -> None:
        builder, atlas = self.build_ten_frame_atlas()

        self.assertEqual(builder.n_frames(), 10)
        self.assertEqual(atlas.grid_dimension, 4)
        self.assertEqual(atlas.size, 32)
        self.assertEqual(atlas.image.size, (32, 32))
        self.assertEqual(atlas.unit, 0.25)
        self.assertEqual(len(atlas), 4)

        # Frame 5 is the last frame of `anim`
        self.assertEqual(atlas[ident("anim")].frames[4], Rectangle(8, 8, 8, 8))

    def test_frame_order_is_preserved(self) -> None:
        _, atlas = self.build_ten_frame_atlas()

        anim = atlas[ident("anim")]
        self.assertTrue(anim.is_animated)
        self.assertEqual([(r.x, r.y) for r in anim.frames], [(8, 0), (16, 0), (24, 0), (0, 8), (8, 8)])

        for i, r in enumerate(anim.frames):
            self.assertEqual(atlas.image.getpixel((r.x, r.y)), solid(8, i + 1).getpixel((0, 0)))
            self.assertEqual(atlas.frame_image(ident("anim"), i).getpixel((7, 7)), solid(8, i + 1).getpixel((0, 0)))

        self.assertFalse(atlas[ident("a")].is_animated)
        self.assertEqual(atlas[ident("a")].frames, (Rectangle(16, 8, 8, 8),))
        self.assertEqual(atlas[ident("b")].frame(2), Rectangle(8, 16, 8, 8))

    def test_unused_cells_are_transparent(self) -> None:
        _, atlas = self.build_ten_frame_atlas()
        self.assertEqual(atlas.image.getpixel((31, 31)), (0, 0, 0, 0))

    def test_rectangles_do_not_overlap(self) -> None:
        builder = AtlasBuilder(4)
        for i in range(13):
            builder.add_animation(ident(f"t{i}"), [solid(4, j) for j in range(i % 4 + 1)])
        atlas = builder.build()

        rects = [r for _i, e in atlas.items() for r in e.frames]
        self.assertEqual(len(rects), builder.n_frames())

        for r in rects:
            self.assertEqual((r.width, r.height), (4, 4))
            self.assertGreaterEqual(r.x, 0)
            self.assertGreaterEqual(r.y, 0)
            self.assertLessEqual(r.x + r.width, atlas.size)
            self.assertLessEqual(r.y + r.height, atlas.size)

        for a, b in itertools.combinations(rects, 2):
            self.assertFalse(a.overlaps(b), f"{a} overlaps {b}")

    def test_frames_are_copied_without_blending(self) -> None:
        builder = AtlasBuilder(2)
        builder.add_image(ident("missing"), PIL.Image.new("RGBA", (2, 2), (10, 20, 30, 40)))
        atlas = builder.build()

        self.assertEqual(atlas.image.getpixel((1, 1)), (10, 20, 30, 40))

    def test_rgb_frames_are_converted(self) -> None:
        builder = AtlasBuilder(2)
        builder.add_image(ident("missing"), PIL.Image.new("RGB", (2, 2), (1, 2, 3)))
        atlas = builder.build()

        self.assertEqual(atlas.image.getpixel((0, 0)), (1, 2, 3, 255))

    def test_wrong_frame_size(self) -> None:
        builder = AtlasBuilder(8)
        builder.add_image(ident("missing"), solid(8, 0))
        builder.add_image(ident("large"), solid(16, 0))

        with self.assertRaises(ImageError) as cm:
            builder.build()
        self.assertEqual(cm.exception.path, (str(ident("large")),))

    def test_empty_builder(self) -> None:
        with self.assertRaises(PackingPreconditionError):
            AtlasBuilder(8).build()

    def test_empty_animation(self) -> None:
        with self.assertRaises(ConfigurationError):
            AtlasBuilder(8).add_animation(ident("empty"), [])

    def test_rgba_data(self) -> None:
        _, atlas = self.build_ten_frame_atlas()

        data = atlas.rgba_data()
        self.assertEqual(len(data), 32 * 32 * 4)
        self.assertEqual(tuple(data[0:4]), solid(8, 0).getpixel((0, 0)))

    def test_log_messages(self) -> None:
        messages: list[str] = []
        pack_atlas([ExtractedEntry(ident("missing"), (solid(8, 0),))], 8, messages.append)

        self.assertEqual(messages, ["Stitching atlas for 1 textures...", "Creating atlas for size 8x8"])


class LookupTests(unittest.TestCase):
    def setUp(self) -> None:
        builder = AtlasBuilder(8)
        builder.add_image(ident("missing"), solid(8, 0))
        builder.add_image(ident("stone"), solid(8, 1))
        self.atlas = builder.build()

    def test_exact_match(self) -> None:
        self.assertEqual(self.atlas[ident("stone")].frames, (Rectangle(8, 0, 8, 8),))
        self.assertEqual(self.atlas["builtin:textures/stone"], self.atlas[ident("stone")])
        self.assertEqual(self.atlas["textures/stone"], self.atlas[ident("stone")])

    def test_unknown_identifier_returns_missing_entry(self) -> None:
        self.assertEqual(self.atlas["unknown:id"], self.atlas[ident("missing")])
        self.assertIs(self.atlas.get(Identifier("unknown", "id")), self.atlas.missing_entry)

    def test_invalid_identifier_returns_missing_entry(self) -> None:
        self.assertIs(self.atlas["Not a valid identifier!"], self.atlas.missing_entry)

    def test_no_partial_matches(self) -> None:
        self.assertIs(self.atlas["builtin:textures/ston"], self.atlas.missing_entry)
        self.assertIs(self.atlas["builtin:textures"], self.atlas.missing_entry)

    def test_contains(self) -> None:
        self.assertIn(ident("stone"), self.atlas)
        self.assertIn("builtin:textures/missing", self.atlas)
        self.assertNotIn("unknown:id", self.atlas)
        self.assertNotIn("Invalid!", self.atlas)

    def test_identifiers_are_in_accumulation_order(self) -> None:
        self.assertEqual(list(self.atlas.identifiers()), [ident("missing"), ident("stone")])


class DuplicateIdentifierTests(unittest.TestCase):
    def test_last_entry_wins_for_the_missing_entry(self) -> None:
        builder = AtlasBuilder(8)
        builder.add_image(ident("missing"), solid(8, 0))
        builder.add_animation(ident("missing"), [solid(8, 1), solid(8, 2)])

        self.assertEqual(builder.duplicate_identifiers(), [ident("missing")])

        atlas = builder.build()
        self.assertEqual(len(atlas[ident("missing")].frames), 2)
        self.assertEqual(atlas.missing_entry.frames, (Rectangle(8, 0, 8, 8), Rectangle(0, 8, 8, 8)))
        self.assertEqual(atlas["unknown:id"], atlas[ident("missing")])
        self.assertEqual(len(atlas), 1)

    def test_first_identifier_replaced_after_other_entries(self) -> None:
        builder = AtlasBuilder(8)
        builder.add_image(ident("missing"), solid(8, 0))
        builder.add_image(ident("stone"), solid(8, 1))
        builder.add_image(ident("missing"), solid(8, 2))

        atlas = builder.build()
        self.assertEqual(atlas[ident("missing")].frames, (Rectangle(0, 8, 8, 8),))
        self.assertEqual(atlas["unknown:id"], atlas[ident("missing")])
        self.assertEqual(atlas.frame_image("unknown:id").getpixel((0, 0)), solid(8, 2).getpixel((0, 0)))


if __name__ == "__main__":
    unittest.main()
