"""Layer blob decompression."""

import gzip
import io
from contextlib import contextmanager
from typing import BinaryIO, Iterator

from ..exceptions import DecompressError

GZIP_MAGIC = b"\x1f\x8b"
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"


def detect_compression(blob: bytes) -> str:
    """Return "gzip", "zstd" or "none" from the blob's magic bytes."""
    if blob.startswith(GZIP_MAGIC):
        return "gzip"
    if blob.startswith(ZSTD_MAGIC):
        return "zstd"
    return "none"


@contextmanager
def open_decompressed(blob: bytes) -> Iterator[BinaryIO]:
    """Open a layer blob as an uncompressed byte stream.

    Gzip content is decompressed lazily while reading.

    Args:
        blob: Raw layer blob

    Yields:
        Readable binary stream over the tar payload

    Raises:
        DecompressError: If the compression format is not supported
    """
    compression = detect_compression(blob)
    if compression == "zstd":
        raise DecompressError("zstd-compressed layers are not supported")

    stream: BinaryIO
    if compression == "gzip":
        try:
            stream = gzip.GzipFile(fileobj=io.BytesIO(blob), mode="rb")
        except OSError as e:
            raise DecompressError(f"Failed to open gzip layer: {e}") from e
    else:
        stream = io.BytesIO(blob)

    try:
        yield stream
    finally:
        stream.close()
