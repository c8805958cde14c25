"""Image source backed by a remote registry."""

import asyncio
import json
import logging
from functools import partial
from typing import Any, Dict, List, Optional

from ..exceptions import (
    ConfigUnavailableError,
    DigestMismatchError,
    FetchError,
    ManifestError,
    RegistryConnectionError,
)
from ..models import Image, LayerHandle, history_from_config
from ..utils.digest import validate_digest, verify_digest
from .reference import ImageReference, parse_reference
from .registry_client import INDEX_MEDIA_TYPES, RegistryClient
from .types import ExplorerConfig

logger = logging.getLogger(__name__)


def select_platform(index: Dict[str, Any], platform: str) -> Dict[str, Any]:
    """Pick the manifest descriptor matching "os/architecture[/variant]".

    Raises:
        ManifestError: If no entry matches
    """
    wanted = platform.split("/")
    if len(wanted) < 2:
        raise ManifestError(f"Invalid platform: {platform!r} (expected os/architecture)")
    wanted_os, wanted_arch = wanted[0], wanted[1]
    wanted_variant = wanted[2] if len(wanted) > 2 else None

    available = []
    for descriptor in index.get("manifests", []):
        entry = descriptor.get("platform", {})
        available.append(f"{entry.get('os')}/{entry.get('architecture')}")
        if entry.get("os") != wanted_os or entry.get("architecture") != wanted_arch:
            continue
        if wanted_variant and entry.get("variant") != wanted_variant:
            continue
        return descriptor

    raise ManifestError(
        f"No manifest for platform {platform} (available: {', '.join(available) or 'none'})"
    )


class RegistryImageSource:
    """Resolve image references against remote registries.

    Each network round-trip runs on its own event loop, so callers stay
    synchronous. Layer blobs are downloaded on first use and held in
    memory by their handle.

    resolve() and the layer loaders call asyncio.run and fail inside a
    running event loop; coroutines should await resolve_async() and
    fetch_blob_async() instead.
    """

    def __init__(self, config: Optional[ExplorerConfig] = None) -> None:
        self.config = config or ExplorerConfig()

    def _client(self, ref: ImageReference) -> RegistryClient:
        registry = self.config.registry_config(ref.registry)
        return RegistryClient(
            registry.url,
            timeout=registry.timeout,
            username=registry.username,
            password=registry.password,
        )

    def resolve(self, reference: str) -> Image:
        """Resolve a reference to an Image (blocking, no running loop allowed).

        Raises:
            InvalidReferenceError: If the reference is malformed
            FetchError: If the manifest cannot be retrieved
            ConfigUnavailableError: If the image config cannot be read
        """
        ref = parse_reference(reference)
        return asyncio.run(self.resolve_async(ref))

    async def resolve_async(self, ref: ImageReference) -> Image:
        """Fetch manifest and config for a parsed reference."""
        logger.info("Pulling image %s...", ref.name)
        async with self._client(ref) as client:
            if not await client.check_registry_v2():
                raise RegistryConnectionError(
                    f"{client.registry_url} does not answer the registry v2 API"
                )
            manifest = await client.get_manifest(ref.repository, ref.reference)
            if manifest.get("mediaType") in INDEX_MEDIA_TYPES or "manifests" in manifest:
                descriptor = select_platform(manifest, self.config.platform)
                logger.debug("Selected %s for %s", descriptor.get("digest"), self.config.platform)
                manifest = await client.get_manifest(ref.repository, descriptor["digest"])

            config_descriptor = manifest.get("config")
            if not isinstance(config_descriptor, dict) or "digest" not in config_descriptor:
                raise ManifestError(f"Manifest for {ref.name} has no config descriptor")

            try:
                config_blob = await client.get_blob(ref.repository, config_descriptor["digest"])
                config = json.loads(config_blob)
            except (FetchError, ValueError) as e:
                raise ConfigUnavailableError(f"Failed to retrieve config file: {e}") from e
            if not isinstance(config, dict):
                raise ConfigUnavailableError(f"Config for {ref.name} is not a JSON object")

        layers = self._layer_handles(ref, manifest.get("layers", []))
        logger.info("Resolved %s with %d layers", ref.name, len(layers))
        return Image(
            name=ref.name,
            layers=layers,
            history=history_from_config(config),
            architecture=config.get("architecture", ""),
            os=config.get("os", ""),
            config_digest=config_descriptor["digest"],
        )

    def _layer_handles(
        self, ref: ImageReference, descriptors: List[Dict[str, Any]]
    ) -> List[LayerHandle]:
        return [
            LayerHandle(
                index=index,
                digest=descriptor["digest"],
                size=int(descriptor.get("size", 0)),
                media_type=descriptor.get("mediaType", ""),
                loader=partial(self.fetch_blob, ref, descriptor["digest"]),
            )
            for index, descriptor in enumerate(descriptors, start=1)
        ]

    def fetch_blob(self, ref: ImageReference, digest: str) -> bytes:
        """Download one blob (blocking, no running loop allowed)."""
        return asyncio.run(self.fetch_blob_async(ref, digest))

    async def fetch_blob_async(self, ref: ImageReference, digest: str) -> bytes:
        """Download one blob and check it against its digest.

        Raises:
            BlobFetchError: If download fails
            DigestMismatchError: If the content does not match the digest
        """
        async with self._client(ref) as client:
            blob = await client.get_blob(ref.repository, digest)

        if self.config.verify_digests and validate_digest(digest):
            if not verify_digest(blob, digest):
                raise DigestMismatchError(f"Blob content does not match digest {digest}")
        logger.info("Downloaded %s (%d bytes)", digest, len(blob))
        return blob
