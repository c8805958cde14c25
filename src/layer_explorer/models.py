"""Data models for resolved images and inspection results."""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Dict, Iterator, List, Optional

from .utils.compression import open_decompressed


@dataclass
class LayerHandle:
    """One layer blob of a resolved image."""

    index: int  # 1-based ordinal
    digest: str
    size: int  # compressed size in bytes
    media_type: str
    loader: Callable[[], bytes] = field(repr=False, compare=False)
    _blob: Optional[bytes] = field(default=None, init=False, repr=False, compare=False)

    def load(self) -> bytes:
        """Return the raw (possibly compressed) blob, loading it once."""
        if self._blob is None:
            self._blob = self.loader()
        return self._blob

    @contextmanager
    def open_uncompressed(self) -> Iterator[BinaryIO]:
        """Yield the uncompressed tar payload; the stream is closed on exit.

        Raises:
            DecompressError: If the blob uses an unsupported compression
            FetchError: If the blob cannot be retrieved
        """
        with open_decompressed(self.load()) as stream:
            yield stream


@dataclass
class HistoryRecord:
    """One build step from the image config."""

    position: int  # 1-based build order
    created_by: str
    empty_layer: bool = False
    created: Optional[str] = None
    comment: Optional[str] = None


@dataclass
class Image:
    """A resolved image: ordered layers plus build history."""

    name: str
    layers: List[LayerHandle]
    history: List[HistoryRecord]
    architecture: str = ""
    os: str = ""
    config_digest: str = ""


@dataclass
class LayerSummary:
    """Digest and size of one layer."""

    ordinal: int
    digest: str
    size: int


@dataclass
class LayerListing:
    """Result of listing layers."""

    layers: List[LayerSummary]
    total_size: int


@dataclass
class HistoryStep:
    """One reconciled history step."""

    ordinal: int
    produced_layer: bool
    command: str
    layer: Optional[LayerSummary] = None


@dataclass
class HistoryListing:
    """Result of reconciling history against layers."""

    steps: List[HistoryStep]
    total_size: int
    missing_layers: int = 0  # non-empty records with no layer left
    unmatched_layers: int = 0  # layers no record accounted for


@dataclass
class FileRow:
    """One visible entry of a layer."""

    mode: str
    size: int
    path: str


@dataclass
class FilesystemListing:
    """Visible entries of a single layer."""

    ordinal: int
    rows: List[FileRow]


@dataclass
class CatResult:
    """Outcome of streaming a file out of a layer."""

    path: str
    ordinal: int
    size: int


def history_from_config(config: Dict[str, Any]) -> List[HistoryRecord]:
    """Build history records from an image config's "history" array."""
    records = []
    for position, item in enumerate(config.get("history") or [], start=1):
        records.append(
            HistoryRecord(
                position=position,
                created_by=item.get("created_by", "") or "",
                empty_layer=bool(item.get("empty_layer", False)),
                created=item.get("created"),
                comment=item.get("comment"),
            )
        )
    return records
