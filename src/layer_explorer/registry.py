"""Functional entry point for resolving images."""

import os
from typing import Optional

from .core.source import RegistryImageSource
from .core.types import ExplorerConfig
from .models import Image
from .tar.image import ArchiveImageSource


def resolve_image(reference: str, config: Optional[ExplorerConfig] = None) -> Image:
    """Resolve an image from a registry reference or a local tarball.

    Args:
        reference: Image reference (e.g., "alpine:3.20",
            "localhost:5000/myapp:v1") or the path of a "docker save" tar
        config: Explorer settings (default: from the environment)

    Returns:
        Image: ordered layers and build history

    Raises:
        InvalidReferenceError: If the reference is malformed
        FetchError: If the image cannot be retrieved
        ConfigUnavailableError: If the image config cannot be read
        ArchiveReadError: If a local tarball is not a valid image archive

    Blocking: inside a running event loop use
    RegistryImageSource.resolve_async() instead.

    Examples:
        image = resolve_image("alpine:latest")
        print(f"{image.name}: {len(image.layers)} layers")

        image = resolve_image("./exports/nginx.tar")
    """
    if os.path.isfile(reference):
        return ArchiveImageSource(reference).resolve()
    return RegistryImageSource(config or ExplorerConfig.from_env()).resolve(reference)
