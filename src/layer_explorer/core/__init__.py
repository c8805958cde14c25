"""Registry access and configuration."""

from .reference import ImageReference, parse_reference
from .registry_client import RegistryClient
from .source import RegistryImageSource, select_platform
from .types import DuplicatePolicy, ExplorerConfig, RegistryConfig

__all__ = [
    "DuplicatePolicy",
    "ExplorerConfig",
    "ImageReference",
    "RegistryClient",
    "RegistryConfig",
    "RegistryImageSource",
    "parse_reference",
    "select_platform",
]
