"""Utility functions for layer-explorer."""

from .compression import detect_compression, open_decompressed
from .digest import calculate_digest, validate_digest, verify_digest
from .formatting import format_megabytes, format_mode

__all__ = [
    "calculate_digest",
    "detect_compression",
    "format_megabytes",
    "format_mode",
    "open_decompressed",
    "validate_digest",
    "verify_digest",
]
