# -*- coding: utf-8 -*-
# vim: set fenc=utf-8 ai ts=4 sw=4 sts=4 et:

import re
from typing import Final, NamedTuple

from .errors import IdentifierError


BUILTIN_NAMESPACE: Final = "builtin"

NAMESPACE_REGEX: Final = re.compile(r"[a-z0-9_]+$")
PATH_REGEX: Final = re.compile(r"[a-z0-9_/]+$")


class Identifier(NamedTuple):
    """
    A `namespace:path` asset identifier.

    An identifier without a namespace belongs to the `builtin` namespace.
    """

    namespace: str
    path: str

    def __str__(self) -> str:
        return f"{ self.namespace }:{ self.path }"

    @classmethod
    def parse(cls, s: str) -> "Identifier":
        if s.count(":") > 1:
            raise IdentifierError(f"{ s } is not a valid Identifier! (Hint: Identifiers must only contain one or no instance of ':')")

        if ":" in s:
            namespace, path = s.split(":")
        else:
            namespace, path = BUILTIN_NAMESPACE, s

        if not NAMESPACE_REGEX.match(namespace):
            raise IdentifierError(f"{ s } is not a valid Identifier! (Hint: Invalid character in namespace, valid characters: a-z, 0-9, '_')")

        if not PATH_REGEX.match(path):
            raise IdentifierError(f"{ s } is not a valid Identifier! (Hint: Invalid character in path, valid characters: a-z, 0-9, '_', '/')")

        return cls(namespace, path)

    def with_path(self, path: str) -> "Identifier":
        return Identifier(self.namespace, path)


def is_valid_namespace(s: str) -> bool:
    return bool(NAMESPACE_REGEX.match(s))


class IdentifierFactory:
    """
    Roots identifiers under a fixed base path.

        f = IdentifierFactory("textures/tile")
        f.create("wood0")              -> builtin:textures/tile/wood0
        f.create("mod:slate4")         -> mod:textures/tile/slate4
        f.create("mod:textures/slate") -> mod:textures/tile/slate
    """

    def __init__(self, base_path: str):
        base_path = base_path.strip("/")
        if not PATH_REGEX.match(base_path):
            raise IdentifierError(f"Invalid identifier base path: { base_path }")

        self.base_path: Final = base_path
        self.__dirs: Final = tuple(d + "/" for d in base_path.split("/"))

    def validate(self, identifier: Identifier) -> Identifier:
        path = identifier.path
        for d in self.__dirs:
            if path.startswith(d):
                path = path[len(d) :]

        return Identifier(identifier.namespace, f"{ self.base_path }/{ path }")

    def create(self, s: str) -> Identifier:
        return self.validate(Identifier.parse(s))
