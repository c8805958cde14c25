"""Streaming reader for layer tar archives."""

import logging
import tarfile
import zlib
from typing import BinaryIO, Iterator, Optional

from ..exceptions import ArchiveReadError
from .models import ArchiveEntry

logger = logging.getLogger(__name__)

# Errors that can surface from tarfile, gzip or zlib while reading forward.
READ_ERRORS = (tarfile.TarError, EOFError, OSError, zlib.error)

END_OF_ARCHIVE_BLOCK = tarfile.NUL * tarfile.BLOCKSIZE


class _TailRecorder:
    """Read-through wrapper keeping the most recently read bytes.

    tarfile stops silently on a damaged header past the first member, so
    the reader looks back at the block that ended the scan.
    """

    def __init__(self, stream: BinaryIO, window: int = 4 * tarfile.RECORDSIZE) -> None:
        self._stream = stream
        self._window = window
        self._tail = b""
        self.position = 0

    def read(self, size: int = -1) -> bytes:
        data = self._stream.read(size)
        self.position += len(data)
        self._tail = (self._tail + data)[-self._window:]
        return data

    def block_at(self, offset: int) -> Optional[bytes]:
        """Return up to one block starting at offset, None once it left the window."""
        start = self.position - len(self._tail)
        if offset < start:
            return None
        return self._tail[offset - start : offset - start + tarfile.BLOCKSIZE]


def _report_unclean_end(recorder: _TailRecorder, offset: int) -> None:
    block = recorder.block_at(offset)
    if not block or block == END_OF_ARCHIVE_BLOCK:
        return
    if len(block) < tarfile.BLOCKSIZE:
        logger.warning("Error reading tar: truncated header at offset %d", offset)
    else:
        logger.warning("Error reading tar: invalid header at offset %d", offset)


def iter_entries(stream: BinaryIO) -> Iterator[ArchiveEntry]:
    """Iterate over the entries of a tar stream, one pass, forward only.

    A read error after the archive has been opened ends the iteration;
    it is logged and entries already yielded stay valid. A scan that
    stops on anything but the end-of-archive marker is logged too.

    Args:
        stream: Readable binary stream over an uncompressed tar payload

    Yields:
        ArchiveEntry objects in archive order

    Raises:
        ArchiveReadError: If the stream is not a tar archive at all
    """
    recorder = _TailRecorder(stream)
    try:
        tar = tarfile.open(fileobj=recorder, mode="r|")
    except READ_ERRORS as e:
        raise ArchiveReadError(f"Cannot read layer archive: {e}") from e

    with tar:
        members = iter(tar)
        while True:
            try:
                member = next(members)
            except StopIteration:
                _report_unclean_end(recorder, tar.offset)
                return
            except READ_ERRORS as e:
                logger.warning("Error reading tar: %s", e)
                return
            yield ArchiveEntry.from_member(tar, member)


def iter_visible_entries(stream: BinaryIO) -> Iterator[ArchiveEntry]:
    """Iterate over entries, skipping whiteout markers."""
    for entry in iter_entries(stream):
        if not entry.is_whiteout:
            yield entry
