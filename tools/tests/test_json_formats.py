#!/usr/bin/env python3

import os.path
import tempfile
import unittest

from sprite_atlas.errors import ConfigurationError
from sprite_atlas.json_formats import (
    JsonError,
    TextureMetadata,
    atlas_project_from_dict,
    load_atlas_project_json,
    load_texture_metadata,
    texture_metadata_from_dict,
)


def project_dict(**kwargs: object) -> dict:
    d: dict = {"tile_size": 16, "namespaces": {"builtin": "assets"}}
    d.update(kwargs)
    return d


class AtlasProjectTests(unittest.TestCase):
    def test_defaults(self) -> None:
        project = atlas_project_from_dict(project_dict(), "proj", "project.json")

        self.assertEqual(project.tile_size, 16)
        self.assertEqual(project.texture_directory, "textures")
        self.assertEqual(list(project.namespaces.items()), [("builtin", os.path.join("proj", "assets"))])
        self.assertEqual(project.missing_texture, "missing")
        self.assertIsNone(project.debug_image)

    def test_all_fields(self) -> None:
        d = project_dict(
            texture_directory="/gfx/textures/",
            namespaces={"builtin": "base", "extra": "mods/extra"},
            missing_texture="debug/missing",
            debug_image="debug.png",
        )
        project = atlas_project_from_dict(d, "proj", "project.json")

        self.assertEqual(project.texture_directory, "gfx/textures")
        self.assertEqual(list(project.namespaces), ["builtin", "extra"])
        self.assertEqual(project.namespaces["extra"], os.path.join("proj", "mods/extra"))
        self.assertEqual(project.missing_texture, "debug/missing")
        self.assertEqual(project.debug_image, os.path.join("proj", "debug.png"))

    def test_tile_size_as_string(self) -> None:
        self.assertEqual(atlas_project_from_dict(project_dict(tile_size="32"), "").tile_size, 32)

    def test_invalid_tile_size(self) -> None:
        for tile_size in (0, -16, 4097, True, "sixteen", 1.5):
            with self.subTest(tile_size=tile_size):
                with self.assertRaises(JsonError) as cm:
                    atlas_project_from_dict(project_dict(tile_size=tile_size), "", "project.json")
                self.assertEqual(cm.exception.path, ("project.json", "tile_size"))

    def test_missing_tile_size(self) -> None:
        with self.assertRaises(JsonError) as cm:
            atlas_project_from_dict({"namespaces": {"builtin": "assets"}}, "", "project.json")
        self.assertIn("tile_size", cm.exception.message)

    def test_missing_namespaces(self) -> None:
        with self.assertRaises(JsonError) as cm:
            atlas_project_from_dict({"tile_size": 16}, "", "project.json")
        self.assertEqual(cm.exception.message, "Missing JSON field: namespaces")
        self.assertEqual(cm.exception.path, ("project.json",))

    def test_invalid_namespaces(self) -> None:
        for namespaces in (None, {}, {"Bad Name": "assets"}, {"builtin": 5}, ["assets"]):
            with self.subTest(namespaces=namespaces):
                with self.assertRaises(JsonError):
                    atlas_project_from_dict(project_dict(namespaces=namespaces), "", "project.json")

    def test_invalid_texture_directory(self) -> None:
        with self.assertRaises(JsonError):
            atlas_project_from_dict(project_dict(texture_directory="My Textures"), "")

    def test_not_a_dict(self) -> None:
        with self.assertRaises(JsonError):
            atlas_project_from_dict([16], "", "project.json")  # type: ignore

    def test_json_error_is_a_configuration_error(self) -> None:
        self.assertTrue(issubclass(JsonError, ConfigurationError))


class JsonFileTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, name: str, text: str) -> str:
        filename = os.path.join(self.tmp.name, name)
        with open(filename, "w") as fp:
            fp.write(text)
        return filename

    def test_load_project(self) -> None:
        filename = self.write("project.json", '{ "tile_size": 8, "namespaces": { "builtin": "assets" } }')

        project = load_atlas_project_json(filename)

        self.assertEqual(project.tile_size, 8)
        self.assertEqual(project.namespaces["builtin"], os.path.join(self.tmp.name, "assets"))

    def test_error_path_starts_with_the_filename(self) -> None:
        filename = self.write("project.json", '{ "tile_size": 0, "namespaces": { "builtin": "assets" } }')

        with self.assertRaises(JsonError) as cm:
            load_atlas_project_json(filename)
        self.assertEqual(cm.exception.path, (filename, "tile_size"))

    def test_invalid_json(self) -> None:
        filename = self.write("project.json", "{ tile_size: 8 ")

        with self.assertRaises(JsonError) as cm:
            load_atlas_project_json(filename)
        self.assertEqual(cm.exception.path, (filename,))

    def test_missing_file(self) -> None:
        with self.assertRaises(JsonError):
            load_atlas_project_json(os.path.join(self.tmp.name, "missing.json"))

    def test_load_texture_metadata(self) -> None:
        filename = self.write("grass.json", '{ "autotile": "blob" }')

        metadata = load_texture_metadata(filename)

        self.assertIsInstance(metadata, TextureMetadata)
        self.assertEqual(metadata.get_optional_string("autotile"), "blob")

        with self.assertRaises(JsonError) as cm:
            metadata.get_int("frames")
        self.assertEqual(cm.exception.path, (filename,))


class TextureMetadataTests(unittest.TestCase):
    def test_empty(self) -> None:
        metadata = TextureMetadata.empty("stone.json")

        self.assertFalse(metadata.contains("strip"))
        self.assertIsNone(metadata.get_optional_string("strip"))
        self.assertIsNone(metadata.get_optional_dict("autoscroll"))

    def test_nested_dict_path(self) -> None:
        metadata = texture_metadata_from_dict({"autoscroll": {"frames": "many"}}, "water.json")

        autoscroll = metadata.get_optional_dict("autoscroll")
        assert autoscroll is not None

        with self.assertRaises(JsonError) as cm:
            autoscroll.get_int("frames")
        self.assertEqual(cm.exception.path, ("water.json", "autoscroll", "frames"))

    def test_nested_value_must_be_a_dict(self) -> None:
        metadata = texture_metadata_from_dict({"autoscroll": 4}, "water.json")

        with self.assertRaises(JsonError):
            metadata.get_optional_dict("autoscroll")


if __name__ == "__main__":
    unittest.main()
