"""Exploring and extracting files of a single layer."""

import logging
import tarfile
import zlib
from typing import BinaryIO

from .core.types import DuplicatePolicy
from .exceptions import ArchiveReadError, DecompressError, PathIsDirectoryError, PathNotFoundError
from .layers import select_layer
from .models import CatResult, FileRow, FilesystemListing, Image, LayerHandle
from .tar.paths import normalize_target
from .tar.reader import iter_entries, iter_visible_entries

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024


def explore_filesystem(image: Image, ordinal: int) -> FilesystemListing:
    """List the visible entries of one layer, whiteouts omitted.

    Raises:
        LayerOutOfRangeError: If ordinal is outside 1..N
        DecompressError: If the layer cannot be decompressed
        ArchiveReadError: If the layer is not a tar archive
    """
    layer = select_layer(image, ordinal)
    rows = []
    with layer.open_uncompressed() as stream:
        for entry in iter_visible_entries(stream):
            rows.append(FileRow(mode=entry.mode_string, size=entry.size, path=entry.normalized_path))
    return FilesystemListing(ordinal=ordinal, rows=rows)


def _count_matches(layer: LayerHandle, target: str) -> int:
    with layer.open_uncompressed() as stream:
        return sum(1 for entry in iter_entries(stream) if entry.normalized_path == target)


def cat_file(
    image: Image,
    ordinal: int,
    path: str,
    sink: BinaryIO,
    policy: DuplicatePolicy = DuplicatePolicy.LAST,
) -> CatResult:
    """Stream one file of one layer to a binary sink, byte for byte.

    If the layer stores the path more than once, policy decides which
    occurrence wins: LAST (overlay order, needs a full scan first) or
    FIRST (stops at the first match).

    Args:
        image: Resolved image
        ordinal: 1-based layer number
        path: Path inside the layer; a leading "/" is ignored
        sink: Binary file object receiving the content
        policy: Duplicate path resolution

    Returns:
        CatResult with the number of bytes written

    Raises:
        LayerOutOfRangeError: If ordinal is outside 1..N
        PathNotFoundError: If the path is not in the layer
        PathIsDirectoryError: If the path is a directory
        DecompressError: If the layer cannot be decompressed
        ArchiveReadError: If the file data is cut short or damaged
    """
    layer = select_layer(image, ordinal)
    target = normalize_target(path)

    occurrence = 1
    if policy is DuplicatePolicy.LAST:
        occurrence = _count_matches(layer, target)
        if occurrence == 0:
            raise PathNotFoundError(target, ordinal)
        if occurrence > 1:
            logger.info("%s appears %d times in layer #%d, using the last", target, occurrence, ordinal)

    seen = 0
    with layer.open_uncompressed() as stream:
        for entry in iter_entries(stream):
            if entry.normalized_path != target:
                continue
            seen += 1
            if seen < occurrence:
                continue
            if entry.is_dir:
                raise PathIsDirectoryError(target, ordinal)

            with entry.open() as content:
                written = _copy(content, sink, target, ordinal)
            return CatResult(path=target, ordinal=ordinal, size=written)

    raise PathNotFoundError(target, ordinal)


def _copy(source: BinaryIO, sink: BinaryIO, target: str, ordinal: int) -> int:
    written = 0
    while True:
        try:
            chunk = source.read(COPY_CHUNK_SIZE)
        except tarfile.TarError as e:
            raise ArchiveReadError(f"Error reading {target} in layer #{ordinal}: {e}") from e
        except (EOFError, OSError, zlib.error) as e:
            raise DecompressError(f"Error decompressing {target} in layer #{ordinal}: {e}") from e
        if not chunk:
            return written
        sink.write(chunk)
        written += len(chunk)
