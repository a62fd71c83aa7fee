"""HTTP resource downloader."""

from dataclasses import dataclass

import httpx

from photo_relay.services.delivery import ResourceFetcher


@dataclass
class HttpxResourceFetcher(ResourceFetcher):
    """Resource fetcher implemented with httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxResourceFetcher":
        """Create a fetcher with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(follow_redirects=True))

    async def fetch_bytes(self, url: str) -> bytes:
        """Download the URL and return the response body."""
        response = await self.http_client.get(url, timeout=20)
        response.raise_for_status()
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
