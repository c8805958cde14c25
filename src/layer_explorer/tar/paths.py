"""Path normalization and whiteout detection for layer entries."""

import posixpath

WHITEOUT_PREFIX = ".wh."
OPAQUE_WHITEOUT = ".wh..wh..opq"


def normalize_path(path: str) -> str:
    """Canonicalize an archive path for comparison.

    Strips a single leading "./" and a single trailing "/".

    Examples:
        normalize_path("./etc/os-release") -> "etc/os-release"
        normalize_path("usr/lib/") -> "usr/lib"
    """
    if path.startswith("./"):
        path = path[2:]
    if path.endswith("/"):
        path = path[:-1]
    return path


def normalize_target(path: str) -> str:
    """Canonicalize a user-supplied path ("/etc/hosts" -> "etc/hosts")."""
    return normalize_path(path.lstrip("/"))


def is_whiteout(path: str) -> bool:
    """Check whether an entry marks a deletion in its layer.

    Opaque directory markers count as whiteouts too.
    """
    return posixpath.basename(normalize_path(path)).startswith(WHITEOUT_PREFIX)
