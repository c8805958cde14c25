"""Custom exceptions for layer-explorer."""


class ExplorerError(Exception):
    """Base exception for all layer-explorer errors."""

    pass


class InvalidReferenceError(ExplorerError):
    """Raised when an image reference cannot be parsed."""

    pass


class FetchError(ExplorerError):
    """Raised when an image, manifest or blob cannot be retrieved."""

    pass


class RegistryConnectionError(FetchError):
    """Raised when unable to connect to the registry."""

    pass


class AuthenticationError(FetchError):
    """Raised when a registry token cannot be obtained."""

    pass


class ManifestError(FetchError):
    """Raised when manifest retrieval fails."""

    pass


class BlobFetchError(FetchError):
    """Raised when blob download fails."""

    pass


class DigestMismatchError(BlobFetchError):
    """Raised when downloaded content does not match its digest."""

    pass


class ConfigUnavailableError(ExplorerError):
    """Raised when the image config blob cannot be read."""

    pass


class LayerOutOfRangeError(ExplorerError):
    """Raised when a layer ordinal is outside 1..N."""

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        if requested < 1:
            message = f"layer numbers start at 1 (you requested layer {requested})"
        else:
            message = (
                f"the image only contains {available} layers "
                f"(you requested layer {requested})"
            )
        super().__init__(message)


class DecompressError(ExplorerError):
    """Raised when a layer blob cannot be decompressed."""

    pass


class ArchiveReadError(ExplorerError):
    """Raised when a stream cannot be read as a tar archive."""

    pass


class PathNotFoundError(ExplorerError):
    """Raised when a path is absent from a layer."""

    def __init__(self, path: str, ordinal: int) -> None:
        self.path = path
        self.ordinal = ordinal
        super().__init__(f"{path} not found in layer #{ordinal}")


class PathIsDirectoryError(ExplorerError):
    """Raised when a path names a directory where a file was expected."""

    def __init__(self, path: str, ordinal: int) -> None:
        self.path = path
        self.ordinal = ordinal
        super().__init__(f"{path} is a directory in layer #{ordinal}, not a regular file")


class ReconciliationError(ExplorerError):
    """Raised when history records and layers cannot be paired up."""

    pass
