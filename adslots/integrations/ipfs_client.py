"""
IPFS Pinning Client

Pins token metadata to IPFS through the HTTP API (``/api/v0/add``) and reads
it back by content hash. ``MetadataPublisher`` wraps the client with the
canonical metadata serialization used by the mint orchestrator.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import httpx

from adslots.core.metadata import TokenMetadata, serialize_metadata
from adslots.exceptions import PublishError, VerificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedMetadata:
    content_hash: str


class IPFSClient:
    """Client for the IPFS HTTP API of a pinning provider."""

    def __init__(
        self,
        api_url: str,
        project_id: Optional[str] = None,
        project_secret: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the IPFS client.

        Args:
            api_url: Base URL of the IPFS HTTP API, e.g. https://ipfs.infura.io:5001
            project_id: Optional basic-auth user for the pinning provider
            project_secret: Optional basic-auth password for the pinning provider
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._auth: Optional[Tuple[str, str]] = None
        if project_id and project_secret:
            self._auth = (project_id, project_secret)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout=self.timeout, connect=10.0),
            auth=self._auth,
            transport=self._transport,
        )

    async def pin(self, data: bytes) -> str:
        """
        Add and pin ``data``.

        Returns:
            Content hash (CID) reported by the node

        Raises:
            PublishError: on transport failure, a non-200 status, or a
                response without a ``Hash`` field
        """
        files = {"file": ("meta.json", data, "application/json")}
        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.api_url}/api/v0/add",
                    params={"pin": "true"},
                    files=files,
                )
        except httpx.HTTPError as e:
            raise PublishError(f"IPFS add request failed: {e}") from e

        if response.status_code != 200:
            raise PublishError(
                f"IPFS add returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise PublishError(f"IPFS add returned invalid JSON: {response.text}") from e

        content_hash = result.get("Hash") if isinstance(result, dict) else None
        if not content_hash:
            raise PublishError(f"IPFS add succeeded but returned no Hash: {result}")

        logger.info(f"IPFSClient: Pinned {len(data)} bytes as {content_hash}")
        return content_hash

    async def cat(self, content_hash: str) -> bytes:
        """Fetch the raw bytes stored under ``content_hash``."""
        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.api_url}/api/v0/cat", params={"arg": content_hash}
                )
        except httpx.HTTPError as e:
            raise PublishError(f"IPFS cat request failed for {content_hash}: {e}") from e

        if response.status_code != 200:
            raise PublishError(
                f"IPFS cat returned status {response.status_code} for {content_hash}",
                status_code=response.status_code,
            )
        return response.content


class MetadataPublisher:
    """Serializes metadata canonically and pins it."""

    def __init__(self, client: IPFSClient, max_retries: int = 0, retry_delay: float = 1.0):
        self.client = client
        self.max_retries = max(0, max_retries)
        self.retry_delay = retry_delay

    async def publish(self, metadata: TokenMetadata) -> PublishedMetadata:
        """
        Pin ``metadata`` and return its content hash.

        With ``max_retries`` > 0 failed pins are attempted again; when every
        attempt fails the last PublishError propagates.
        """
        payload = serialize_metadata(metadata)
        attempts = self.max_retries + 1

        attempt = 1
        while True:
            try:
                content_hash = await self.client.pin(payload)
                return PublishedMetadata(content_hash=content_hash)
            except PublishError as e:
                if attempt >= attempts:
                    raise
                logger.warning(
                    f"Publishing metadata for '{metadata.name}' failed "
                    f"(attempt {attempt}/{attempts}): {e}"
                )
            await asyncio.sleep(self.retry_delay)
            attempt += 1

    async def verify_roundtrip(self, published: PublishedMetadata, metadata: TokenMetadata) -> None:
        """Fetch the pinned bytes back and compare them with the local serialization."""
        stored = await self.client.cat(published.content_hash)
        if stored != serialize_metadata(metadata):
            raise VerificationError(
                f"Pinned content {published.content_hash} does not match metadata for '{metadata.name}'"
            )
