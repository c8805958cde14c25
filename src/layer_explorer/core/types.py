"""Configuration types for layer-explorer."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

DEFAULT_PLATFORM = "linux/amd64"
DEFAULT_TIMEOUT = 30

# Hosts always reached over plain http
PLAIN_HTTP_HOSTS = ("localhost", "127.0.0.1")


class DuplicatePolicy(Enum):
    """Which entry wins when a layer stores the same path twice."""

    FIRST = "first"
    LAST = "last"


@dataclass
class RegistryConfig:
    """Connection settings for one registry."""

    url: str
    timeout: int = DEFAULT_TIMEOUT
    username: Optional[str] = None
    password: Optional[str] = None


@dataclass
class ExplorerConfig:
    """Settings threaded through image resolution and inspection."""

    timeout: int = DEFAULT_TIMEOUT
    platform: str = DEFAULT_PLATFORM
    insecure_registries: Tuple[str, ...] = field(default_factory=tuple)
    username: Optional[str] = None
    password: Optional[str] = None
    verify_digests: bool = True
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST
    strict_history: bool = False

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ExplorerConfig":
        """Build a config from LAYER_EXPLORER_* environment variables."""
        env = os.environ if environ is None else environ
        insecure = env.get("LAYER_EXPLORER_INSECURE_REGISTRIES", "")
        return cls(
            timeout=int(env.get("LAYER_EXPLORER_TIMEOUT", DEFAULT_TIMEOUT)),
            platform=env.get("LAYER_EXPLORER_PLATFORM", DEFAULT_PLATFORM),
            insecure_registries=tuple(h.strip() for h in insecure.split(",") if h.strip()),
            username=env.get("LAYER_EXPLORER_USERNAME") or None,
            password=env.get("LAYER_EXPLORER_PASSWORD") or None,
            verify_digests=env.get("LAYER_EXPLORER_VERIFY_DIGESTS", "true").lower()
            not in ("0", "false", "no"),
        )

    def scheme_for(self, registry: str) -> str:
        """Return "http" for insecure or local registries, else "https"."""
        host = registry.split(":", 1)[0]
        if host in PLAIN_HTTP_HOSTS or registry in self.insecure_registries:
            return "http"
        if host in self.insecure_registries:
            return "http"
        return "https"

    def registry_config(self, registry: str) -> RegistryConfig:
        """Connection settings for a registry host."""
        return RegistryConfig(
            url=f"{self.scheme_for(registry)}://{registry}",
            timeout=self.timeout,
            username=self.username,
            password=self.password,
        )
