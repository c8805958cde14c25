"""Human-readable rendering helpers."""

import stat

MEGABYTE = 1024 * 1024


def format_megabytes(size: int) -> str:
    """Render a byte count as megabytes with two decimals."""
    return f"{size / MEGABYTE:.2f} MB"


def format_mode(mode: int, type_bits: int) -> str:
    """Render permission bits plus a file type as an ls-style string.

    Examples:
        format_mode(0o755, stat.S_IFDIR) -> "drwxr-xr-x"
        format_mode(0o644, stat.S_IFREG) -> "-rw-r--r--"
    """
    return stat.filemode(type_bits | (mode & 0o7777))
