"""Image reference parsing."""

import re
from dataclasses import dataclass
from typing import Optional

from ..exceptions import InvalidReferenceError
from ..utils.digest import validate_digest

DOCKER_HUB_REGISTRY = "registry-1.docker.io"
DOCKER_HUB_ALIASES = ("docker.io", "index.docker.io", DOCKER_HUB_REGISTRY)
DEFAULT_TAG = "latest"

PATH_COMPONENT = re.compile(r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*$")
TAG_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$")


@dataclass(frozen=True)
class ImageReference:
    """A parsed image reference."""

    registry: str
    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    @property
    def reference(self) -> str:
        """Tag or digest to request from the manifests endpoint."""
        return self.digest or self.tag or DEFAULT_TAG

    @property
    def name(self) -> str:
        """Canonical full name, e.g. index.docker.io/library/alpine:latest."""
        registry = "index.docker.io" if self.registry == DOCKER_HUB_REGISTRY else self.registry
        name = f"{registry}/{self.repository}"
        if self.tag:
            name += f":{self.tag}"
        if self.digest:
            name += f"@{self.digest}"
        return name


def _is_registry_host(component: str) -> bool:
    return "." in component or ":" in component or component == "localhost"


def parse_reference(text: str) -> ImageReference:
    """Parse "[host[:port]/]path[:tag][@digest]" into its parts.

    Examples:
        parse_reference("alpine")
        # ImageReference("registry-1.docker.io", "library/alpine", "latest")

        parse_reference("localhost:5000/team/app:v1")
        # ImageReference("localhost:5000", "team/app", "v1")

    Raises:
        InvalidReferenceError: If the reference is malformed
    """
    if not text or text != text.strip():
        raise InvalidReferenceError(f"Invalid image reference: {text!r}")

    remainder = text
    digest = None
    if "@" in remainder:
        remainder, digest = remainder.split("@", 1)
        if not validate_digest(digest):
            raise InvalidReferenceError(f"Invalid digest in reference: {text!r}")

    tag = None
    last_slash = remainder.rfind("/")
    colon = remainder.rfind(":")
    if colon > last_slash:
        remainder, tag = remainder[:colon], remainder[colon + 1 :]
        if not TAG_PATTERN.match(tag):
            raise InvalidReferenceError(f"Invalid tag in reference: {text!r}")

    components = remainder.split("/")
    registry = DOCKER_HUB_REGISTRY
    if len(components) > 1 and _is_registry_host(components[0]):
        registry = components.pop(0)
        if registry in DOCKER_HUB_ALIASES:
            registry = DOCKER_HUB_REGISTRY

    if not components or not all(PATH_COMPONENT.match(c) for c in components):
        raise InvalidReferenceError(f"Invalid repository in reference: {text!r}")

    if registry == DOCKER_HUB_REGISTRY and len(components) == 1:
        components.insert(0, "library")

    if tag is None and digest is None:
        tag = DEFAULT_TAG

    return ImageReference(
        registry=registry,
        repository="/".join(components),
        tag=tag,
        digest=digest,
    )
