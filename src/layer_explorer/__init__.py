"""layer-explorer - browse the layers of OCI/Docker images."""

__version__ = "0.1.0"

from .core.types import DuplicatePolicy, ExplorerConfig
from .exceptions import (
    ArchiveReadError,
    ConfigUnavailableError,
    DecompressError,
    ExplorerError,
    FetchError,
    InvalidReferenceError,
    LayerOutOfRangeError,
    PathIsDirectoryError,
    PathNotFoundError,
    ReconciliationError,
)
from .filesystem import cat_file, explore_filesystem
from .history import reconcile_history
from .layers import list_layers, select_layer
from .registry import resolve_image

__all__ = [
    "ArchiveReadError",
    "ConfigUnavailableError",
    "DecompressError",
    "DuplicatePolicy",
    "ExplorerConfig",
    "ExplorerError",
    "FetchError",
    "InvalidReferenceError",
    "LayerOutOfRangeError",
    "PathIsDirectoryError",
    "PathNotFoundError",
    "ReconciliationError",
    "cat_file",
    "explore_filesystem",
    "list_layers",
    "reconcile_history",
    "resolve_image",
    "select_layer",
]
