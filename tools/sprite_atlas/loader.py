# Sprite atlas texture loader
#
# Finds the textures of every namespace, runs the metadata processors and packs the atlas.

import os
import os.path
import multiprocessing
from dataclasses import dataclass
from typing import Callable, Final, Iterable, NamedTuple, Optional, Sequence, TextIO, Union

from .atlas import AtlasBuilder, ExtractedEntry, TextureAtlas
from .errors import ConfigurationError, IdentifierError, ImageError, null_print_function, print_error
from .identifier import Identifier, IdentifierFactory
from .images import create_missing_texture, load_rgba_image
from .json_formats import AtlasProject, Filename, TextureMetadata, load_texture_metadata
from .processors import PROCESSORS, TextureMetadataProcessor, run_processors


TEXTURE_EXTENSION: Final = ".png"
METADATA_EXTENSION: Final = ".json"


class TextureSource(NamedTuple):
    identifier: Identifier
    image_filename: Filename
    # May not exist
    metadata_filename: Filename


@dataclass(frozen=True)
class TextureError:
    identifier: Identifier
    error: Exception

    def res_string(self) -> str:
        return f"texture { self.identifier }"


def print_texture_error(e: Union[TextureError, Exception], fp: Optional[TextIO] = None) -> None:
    if isinstance(e, TextureError):
        print_error(f"ERROR: { e.res_string() }", e.error, fp)
    else:
        print_error("ERROR", e, fp)


@dataclass(frozen=True)
class TextureOutput:
    identifier: Identifier
    entries: tuple[ExtractedEntry, ...]


# A single texture to load (must be picklable)
class _TextureTask(NamedTuple):
    source: TextureSource
    tile_size: int
    processors: tuple[TextureMetadataProcessor, ...]


def texture_identifier_factory(project: AtlasProject) -> IdentifierFactory:
    return IdentifierFactory(project.texture_directory)


def _find_png_files(directory: Filename) -> list[str]:
    "Returns the path (relative to `directory`, without extension) of every texture, skipping `_` prefixed files and directories"

    out = list()

    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames[:] = [d for d in dirnames if not d.startswith("_")]

        for fn in filenames:
            base, ext = os.path.splitext(fn)
            if ext == TEXTURE_EXTENSION and not fn.startswith("_"):
                rel = os.path.relpath(os.path.join(dirpath, base), directory)
                out.append(rel.replace(os.sep, "/"))

    out.sort()

    return out


def find_textures(project: AtlasProject) -> list[TextureSource]:
    factory: Final = texture_identifier_factory(project)

    sources = list()

    for namespace, ns_directory in project.namespaces.items():
        texture_dir = os.path.join(ns_directory, *project.texture_directory.split("/"))
        if not os.path.isdir(texture_dir):
            continue

        for rel in _find_png_files(texture_dir):
            base = os.path.join(texture_dir, *rel.split("/"))
            try:
                identifier = factory.validate(Identifier.parse(f"{ namespace }:{ rel }"))
            except IdentifierError as e:
                raise ConfigurationError(str(e), (base + TEXTURE_EXTENSION,)) from None
            sources.append(TextureSource(identifier, base + TEXTURE_EXTENSION, base + METADATA_EXTENSION))

    return sources


def load_texture(
    source: TextureSource, tile_size: int, processors: Sequence[TextureMetadataProcessor] = PROCESSORS
) -> Union[TextureOutput, TextureError]:
    identifier = source.identifier

    try:
        texture = load_rgba_image(source.image_filename)

        if os.path.exists(source.metadata_filename):
            metadata = load_texture_metadata(source.metadata_filename)
        else:
            metadata = TextureMetadata.empty(source.metadata_filename)

        builder = AtlasBuilder(tile_size)

        n_entries = run_processors(identifier, texture, metadata, builder, processors)

        if n_entries == 0:
            if texture.size != (tile_size, tile_size):
                raise ImageError(
                    f"Texture MUST BE { tile_size }x{ tile_size } px (is { texture.width }x{ texture.height } px)", (str(identifier),)
                )
            builder.add_image(identifier, texture)

        return TextureOutput(identifier, tuple(builder.entries()))

    except Exception as e:
        return TextureError(identifier, e)


def _load_texture_task(task: _TextureTask) -> Union[TextureOutput, TextureError]:
    return load_texture(task.source, task.tile_size, task.processors)


def load_textures(
    sources: Iterable[TextureSource], tile_size: int, n_processes: Optional[int], processors: Sequence[TextureMetadataProcessor] = PROCESSORS
) -> list[Union[TextureOutput, TextureError]]:
    """Loads the textures, preserving the order of `sources`.

    Uses multiprocessing to speed up the loading if `n_processes` is not 1 (None is one process per CPU).
    """

    tasks = [_TextureTask(s, tile_size, tuple(processors)) for s in sources]

    if n_processes == 1 or len(tasks) <= 1:
        return [_load_texture_task(t) for t in tasks]

    with multiprocessing.Pool(processes=n_processes) as mp:
        # imap keeps the output in `tasks` order
        return list(mp.imap(_load_texture_task, tasks))


def build_atlas(
    project: AtlasProject,
    n_processes: Optional[int],
    err_handler: Callable[[Union[TextureError, Exception]], None],
    log_message: Callable[[str], None] = null_print_function,
    warning_handler: Callable[[str], None] = null_print_function,
    processors: Sequence[TextureMetadataProcessor] = PROCESSORS,
) -> Optional[TextureAtlas]:
    "Returns None if there is an error in any texture"

    valid = True

    builder = AtlasBuilder(project.tile_size)

    try:
        missing_id = texture_identifier_factory(project).create(project.missing_texture)
        sources = find_textures(project)
    except Exception as e:
        err_handler(e)
        return None

    builder.add_image(missing_id, create_missing_texture(project.tile_size))

    log_message(f"Loading { len(sources) } textures")

    for o in load_textures(sources, project.tile_size, n_processes, processors):
        if isinstance(o, TextureError):
            valid = False
            err_handler(o)
        else:
            for e in o.entries:
                builder.add(e)

    if not valid:
        return None

    for d in builder.duplicate_identifiers():
        warning_handler(f"{ d } has more than one atlas entry, only the last entry is accessible")

    try:
        return builder.build(log_message)
    except Exception as e:
        err_handler(e)
        return None
