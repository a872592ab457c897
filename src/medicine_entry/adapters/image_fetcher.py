"""Image download client."""

from dataclasses import dataclass

import httpx

from medicine_entry.services.exports import ImageFetcher


@dataclass
class HttpxImageFetcher(ImageFetcher):
    """Downloads stored images over HTTP with httpx."""

    http_client: httpx.AsyncClient
    timeout: float = 20.0

    @classmethod
    def create(cls, timeout: float = 20.0) -> "HttpxImageFetcher":
        """Create a fetcher with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True), timeout=timeout
        )

    async def fetch(self, url: str) -> bytes:
        """Download the bytes behind a URL."""
        response = await self.http_client.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
