"""Docker Registry API v2 async client (pull side)."""

import asyncio
import json
import logging
import re
from typing import Any, Dict, Optional, Tuple

import aiohttp

from ..exceptions import (
    AuthenticationError,
    BlobFetchError,
    ManifestError,
    RegistryConnectionError,
)

logger = logging.getLogger(__name__)

DOCKER_MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
DOCKER_MANIFEST_LIST = "application/vnd.docker.distribution.manifest.list.v2+json"
OCI_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
OCI_INDEX = "application/vnd.oci.image.index.v1+json"

MANIFEST_ACCEPT = ", ".join([OCI_INDEX, DOCKER_MANIFEST_LIST, OCI_MANIFEST, DOCKER_MANIFEST_V2])
INDEX_MEDIA_TYPES = (OCI_INDEX, DOCKER_MANIFEST_LIST)

CHALLENGE_PARAM = re.compile(r'(\w+)="([^"]*)"')


class RegistryClient:
    """Docker Registry API v2 async client for pulling manifests and blobs.

    Handles the anonymous (or basic-credential) bearer token flow used
    by Docker Hub and most public registries.
    """

    def __init__(
        self,
        registry_url: str,
        timeout: int = 30,
        username: Optional[str] = None,
        password: Optional[str] = None,
        connector: Optional[aiohttp.TCPConnector] = None,
    ) -> None:
        """Initialize the registry client.

        Args:
            registry_url: Registry URL (e.g., https://registry-1.docker.io)
            timeout: Request timeout in seconds
            username: Optional user for token endpoints
            password: Optional password or access token
            connector: aiohttp connector for connection pooling
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self.username = username
        self.password = password
        self.connector = connector
        self.session: Optional[aiohttp.ClientSession] = None
        self._authorization: Optional[str] = None

    async def __aenter__(self) -> "RegistryClient":
        """Enter async context manager."""
        if not self.session:
            self.session = aiohttp.ClientSession(
                connector=self.connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the client session."""
        if self.session and not self.session.closed:
            await self.session.close()

    async def check_registry_v2(self) -> bool:
        """Check if the registry supports v2 API.

        A 401 answer still means the endpoint exists.
        """
        try:
            async with self.session.get(f"{self.registry_url}/v2/") as resp:
                return resp.status in (200, 401)
        except (aiohttp.ClientError, asyncio.TimeoutError):
            return False

    async def get_manifest(
        self,
        repository: str,
        reference: str,
        accept: str = MANIFEST_ACCEPT,
    ) -> Dict[str, Any]:
        """Retrieve a manifest or manifest list from the registry.

        The returned dictionary always carries a "mediaType" key, taken
        from the response Content-Type when the document omits it.

        Raises:
            ManifestError: If retrieval fails
        """
        try:
            body, content_type = await self._get(
                f"/v2/{repository}/manifests/{reference}", repository, accept=accept
            )
        except aiohttp.ClientResponseError as e:
            raise ManifestError(
                f"Failed to get manifest {repository}:{reference}: {e.status} {e.message}"
            ) from e

        try:
            manifest = json.loads(body)
        except ValueError as e:
            raise ManifestError(f"Manifest for {repository}:{reference} is not JSON") from e

        if not isinstance(manifest, dict):
            raise ManifestError(f"Manifest for {repository}:{reference} is not an object")
        manifest.setdefault("mediaType", content_type.split(";", 1)[0].strip())
        return manifest

    async def get_blob(self, repository: str, digest: str) -> bytes:
        """Download a blob.

        Raises:
            BlobFetchError: If download fails
        """
        try:
            body, _ = await self._get(f"/v2/{repository}/blobs/{digest}", repository)
        except aiohttp.ClientResponseError as e:
            raise BlobFetchError(
                f"Failed to get blob {digest}: {e.status} {e.message}"
            ) from e
        return body

    async def _get(
        self, path: str, repository: str, accept: Optional[str] = None
    ) -> Tuple[bytes, str]:
        """GET a registry path, authenticating once on a 401 challenge."""
        url = f"{self.registry_url}{path}"
        for attempt in range(2):
            headers = {"Accept": accept} if accept else {}
            if self._authorization:
                headers["Authorization"] = self._authorization
            logger.debug("GET %s", url)
            try:
                async with self.session.get(url, headers=headers) as resp:
                    if resp.status == 401 and attempt == 0:
                        challenge = resp.headers.get("WWW-Authenticate", "")
                    else:
                        resp.raise_for_status()
                        return await resp.read(), resp.headers.get("Content-Type", "")
            except aiohttp.ClientResponseError:
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise RegistryConnectionError(
                    f"Cannot reach registry at {self.registry_url}: {e}"
                ) from e
            await self._authenticate(challenge, repository)

        raise AssertionError("unreachable")

    async def _authenticate(self, challenge: str, repository: str) -> None:
        """Answer a WWW-Authenticate challenge.

        Raises:
            AuthenticationError: If no credentials can be obtained
        """
        scheme, _, params = challenge.partition(" ")
        scheme = scheme.lower()

        if scheme == "basic":
            if not self.username:
                raise AuthenticationError(
                    f"Registry {self.registry_url} requires credentials"
                )
            self._authorization = aiohttp.BasicAuth(
                self.username, self.password or ""
            ).encode()
            return

        if scheme != "bearer":
            raise AuthenticationError(f"Unsupported authentication challenge: {challenge!r}")

        fields = dict(CHALLENGE_PARAM.findall(params))
        realm = fields.get("realm")
        if not realm:
            raise AuthenticationError(f"Bearer challenge without realm: {challenge!r}")

        query = {"scope": fields.get("scope", f"repository:{repository}:pull")}
        if "service" in fields:
            query["service"] = fields["service"]
        auth = aiohttp.BasicAuth(self.username, self.password or "") if self.username else None

        logger.debug("Requesting token from %s for %s", realm, query["scope"])
        try:
            async with self.session.get(realm, params=query, auth=auth) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise AuthenticationError(f"Failed to obtain registry token: {e}") from e

        token = (data.get("token") or data.get("access_token")) if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError("Token endpoint returned no token")
        self._authorization = f"Bearer {token}"
