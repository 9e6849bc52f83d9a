# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:


import json
import os.path
from collections import OrderedDict
from typing import Any, Final, Generator, NamedTuple, NoReturn, Optional, Type, TypeVar, Union

from .errors import ConfigurationError
from .identifier import is_valid_namespace, PATH_REGEX


Name = str
Filename = str

MAX_TILE_SIZE: Final = 4096


class JsonError(ConfigurationError):
    pass


class _Helper:
    """
    A helper class to help parse the output of `json.load()` into structured data.

    This class will also recursively track the position within the `json.load()` output to improve error messages.
    """

    # _Helper class or subclass of _Helper
    _Self = TypeVar("_Self", bound="_Helper")

    _T = TypeVar("_T")
    _U = TypeVar("_U")

    def __init__(self, d: dict[str, Any], *path: str):
        if not isinstance(d, dict):
            raise JsonError("Expected a dict", path)

        self.__dict: Final = d
        self.__path: Final = path

    def _raise_error(self, e: Union[str, Exception], *location: str) -> NoReturn:
        if isinstance(e, Exception):
            e = f"{ type(e).__name__ }: { e }"
        raise JsonError(e, self.__path + location) from None

    def _raise_missing_field_error(self, key: str, *location: str) -> NoReturn:
        raise JsonError(f"Missing JSON field: { key }", self.__path + location)

    def contains(self, key: str) -> bool:
        return key in self.__dict

    def _get2(self, key: str, type_a: Type[_T], type_b: Type[_U]) -> Union[_T, _U]:
        assert type_a != dict and type_a != OrderedDict
        assert type_b != dict and type_b != OrderedDict

        v = self.__dict.get(key)
        if v is None:
            self._raise_missing_field_error(key)
        if not isinstance(v, type_a) and not isinstance(v, type_b):
            self._raise_error(f"Expected a { type_a.__name__ } or { type_b.__name__ }", key)
        return v

    def _optional_get(self, key: str, _type: Type[_T]) -> Optional[_T]:
        assert _type != dict and _type != OrderedDict

        v = self.__dict.get(key)
        if v is None:
            return None
        if not isinstance(v, _type):
            self._raise_error(f"Expected a { _type.__name__ }", key)
        return v

    def get_optional_dict(self: _Self, key: str) -> Optional[_Self]:
        cls = type(self)

        d = self.__dict.get(key)
        if d is None:
            return None
        if not isinstance(d, dict):
            self._raise_error("Expected a JSON dict type", key)

        return cls(d, *self.__path, key)

    def iterate_str_dict(self, key: str, _type: Type[_T]) -> Generator[tuple[str, _T], None, None]:
        assert _type != dict or _type != OrderedDict

        d = self.__dict.get(key)
        if d is None:
            self._raise_missing_field_error(key)
        if not isinstance(d, dict):
            self._raise_error("Expected a JSON dict type", key)

        for name, item in d.items():
            assert isinstance(name, str)

            if not isinstance(item, _type):
                self._raise_error(f"Expected a { _type.__name__ }", key, name)

            yield name, item

    # `self.__dict` MUST NOT be accessed below this line
    # --------------------------------------------------

    def get_optional_string(self, key: str) -> Optional[str]:
        return self._optional_get(key, str)

    def get_int(self, key: str) -> int:
        # bool is a subclass of int
        v = self._get2(key, str, int)
        if isinstance(v, bool):
            self._raise_error("Expected an integer", key)
        if isinstance(v, int):
            return v
        else:
            try:
                return int(v)
            except ValueError:
                self._raise_error("Expected an integer", key)

    def get_int_range(self, key: str, min_: int, max_: int) -> int:
        i = self.get_int(key)
        if i < min_ or i > max_:
            self._raise_error(f"Integer out of range: { i } (min: {min_}, max: {max_})", key)
        return i

    def get_optional_filename(self, key: str) -> Optional[Filename]:
        return self.get_optional_string(key)


def _read_json_file(filename: Filename) -> Any:
    try:
        with open(filename, "r") as fp:
            return json.load(fp)
    except OSError as e:
        raise JsonError(f"Cannot read file: { e.strerror }", (filename,)) from None
    except ValueError as e:
        raise JsonError(f"Invalid JSON: { e }", (filename,)) from None


def _load_json_file(filename: Filename, cls: Type[_Helper._Self]) -> _Helper._Self:
    return cls(_read_json_file(filename), filename)


#
# Texture metadata
# ================
#


class TextureMetadata(_Helper):
    "The optional `<texture>.json` metadata sidecar of a texture"

    @classmethod
    def empty(cls, *path: str) -> "TextureMetadata":
        return cls({}, *path)


def load_texture_metadata(filename: Filename) -> TextureMetadata:
    return _load_json_file(filename, TextureMetadata)


def texture_metadata_from_dict(d: dict[str, Any], *path: str) -> TextureMetadata:
    return TextureMetadata(d, *path)


#
# Atlas project
# =============
#


class AtlasProject(NamedTuple):
    tile_size: int
    texture_directory: str
    # namespace -> asset directory, in load order
    namespaces: OrderedDict[str, Filename]
    missing_texture: str
    debug_image: Optional[Filename]


class _AtlasProject_Helper(_Helper):
    def get_namespaces(self, key: str, base_dir: Filename) -> OrderedDict[str, Filename]:
        out: OrderedDict[str, Filename] = OrderedDict()

        for name, directory in self.iterate_str_dict(key, str):
            if not is_valid_namespace(name):
                self._raise_error(f"Invalid namespace: { name }", key)
            out[name] = os.path.join(base_dir, directory)

        if not out:
            self._raise_error("Expected at least one namespace", key)

        return out

    def get_texture_directory(self, key: str) -> str:
        s = self.get_optional_string(key)
        if s is None:
            return "textures"
        s = s.strip("/")
        if not PATH_REGEX.match(s):
            self._raise_error(f"Invalid texture directory: { s }", key)
        return s


def atlas_project_from_dict(d: dict[str, Any], base_dir: Filename, *path: str) -> AtlasProject:
    jh = _AtlasProject_Helper(d, *path)

    debug_image = jh.get_optional_filename("debug_image")
    if debug_image is not None:
        debug_image = os.path.join(base_dir, debug_image)

    return AtlasProject(
        tile_size=jh.get_int_range("tile_size", 1, MAX_TILE_SIZE),
        texture_directory=jh.get_texture_directory("texture_directory"),
        namespaces=jh.get_namespaces("namespaces", base_dir),
        missing_texture=jh.get_optional_string("missing_texture") or "missing",
        debug_image=debug_image,
    )


def load_atlas_project_json(filename: Filename) -> AtlasProject:
    return atlas_project_from_dict(_read_json_file(filename), os.path.dirname(filename), filename)
