"""Image source for tarballs produced by "docker save"."""

import json
import logging
import re
import tarfile
from pathlib import Path
from typing import Any, Dict, Optional

from ..exceptions import ArchiveReadError, ConfigUnavailableError
from ..models import Image, LayerHandle, history_from_config
from ..utils.digest import calculate_digest

logger = logging.getLogger(__name__)

DEFAULT_LAYER_MEDIA_TYPE = "application/vnd.docker.image.rootfs.diff.tar"
HEX_PATTERN = re.compile(r"^[a-f0-9]+$")


class ArchiveImageSource:
    """Resolve images stored in a local "docker save" tar file.

    Both the legacy layout (<id>/layer.tar) and the OCI layout
    (blobs/sha256/<hex>) are supported. Only the first image of the
    archive is used.
    """

    def __init__(self, tar_path: str) -> None:
        """Initialize the source.

        Args:
            tar_path: Path to the tar file

        Raises:
            ArchiveReadError: If the file does not exist
        """
        self.tar_path = Path(tar_path)
        if not self.tar_path.is_file():
            raise ArchiveReadError(f"Tar file not found: {tar_path}")

    def resolve(self) -> Image:
        """Read manifest, config and layer metadata from the archive.

        Raises:
            ArchiveReadError: If the archive or its manifest is invalid
            ConfigUnavailableError: If the image config cannot be read
        """
        try:
            with tarfile.open(self.tar_path, "r") as tar:
                manifest_data = _extract_json_file(tar, "manifest.json")
                if not isinstance(manifest_data, list) or not manifest_data:
                    raise ArchiveReadError("Invalid manifest.json")
                manifest = manifest_data[0]

                config_path = manifest.get("Config", "")
                config = _extract_json_file(tar, config_path) if config_path else None
                if not isinstance(config, dict):
                    raise ConfigUnavailableError(
                        f"Cannot read config file: {config_path or '(none)'}"
                    )

                layer_sources = manifest.get("LayerSources", {})
                layers = [
                    self._layer_handle(tar, index, layer_path, layer_sources)
                    for index, layer_path in enumerate(manifest.get("Layers", []), start=1)
                ]
        except tarfile.TarError as e:
            raise ArchiveReadError(f"Failed to read image archive: {e}") from e

        repo_tags = manifest.get("RepoTags") or []
        name = repo_tags[0] if repo_tags else self.tar_path.name
        logger.info("Loaded %s from %s with %d layers", name, self.tar_path, len(layers))

        return Image(
            name=name,
            layers=layers,
            history=history_from_config(config),
            architecture=config.get("architecture", ""),
            os=config.get("os", ""),
            config_digest=_digest_from_path(config_path) or "",
        )

    def _layer_handle(
        self,
        tar: tarfile.TarFile,
        index: int,
        layer_path: str,
        layer_sources: Dict[str, Any],
    ) -> LayerHandle:
        try:
            member = tar.getmember(layer_path)
        except KeyError as e:
            raise ArchiveReadError(f"Layer {layer_path} not found in archive") from e

        digest = _digest_from_path(layer_path)
        if digest is None:
            # Legacy layout names layers by id, not by content
            digest = calculate_digest(_read_member(tar, layer_path))
        source = layer_sources.get(digest, {})

        return LayerHandle(
            index=index,
            digest=digest,
            size=source.get("size", member.size),
            media_type=source.get("mediaType", DEFAULT_LAYER_MEDIA_TYPE),
            loader=lambda: self.read_blob(layer_path),
        )

    def read_blob(self, layer_path: str) -> bytes:
        """Read one blob from the archive."""
        try:
            with tarfile.open(self.tar_path, "r") as tar:
                return _read_member(tar, layer_path)
        except tarfile.TarError as e:
            raise ArchiveReadError(f"Failed to read {layer_path}: {e}") from e


def _read_member(tar: tarfile.TarFile, name: str) -> bytes:
    member = tar.extractfile(name)
    if member is None:
        raise ArchiveReadError(f"Could not extract {name}")
    with member:
        return member.read()


def _digest_from_path(path: str) -> Optional[str]:
    """Return the digest encoded in a "blobs/<algorithm>/<hex>" path."""
    parts = path.split("/")
    if len(parts) == 3 and parts[0] == "blobs":
        return f"{parts[1]}:{parts[2]}"
    stem = path[: -len(".json")] if path.endswith(".json") else ""
    if HEX_PATTERN.match(stem):
        # legacy config: <hex>.json
        return f"sha256:{stem}"
    return None


def _extract_json_file(tar: tarfile.TarFile, file_path: str) -> Optional[Any]:
    """Extract and parse a JSON file from the archive."""
    try:
        member = tar.extractfile(file_path)
        if member is None:
            return None
        with member:
            return json.loads(member.read().decode("utf-8"))
    except (KeyError, json.JSONDecodeError, UnicodeDecodeError):
        return None
