"""Layer archive reading."""

from .image import ArchiveImageSource
from .models import ArchiveEntry, EntryType
from .paths import is_whiteout, normalize_path, normalize_target
from .reader import iter_entries, iter_visible_entries

__all__ = [
    "ArchiveEntry",
    "ArchiveImageSource",
    "EntryType",
    "is_whiteout",
    "iter_entries",
    "iter_visible_entries",
    "normalize_path",
    "normalize_target",
]
