"""HTTP client for the third-party calorie recognition API."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from calorie_estimator.domain.transport import ProviderReply

API_KEY_PARAM = "user_key"


class CalorieProviderClient(Protocol):
    """Interface for the two request formats the provider may accept."""

    async def post_image(self, image_bytes: bytes) -> ProviderReply:
        """Send the image as a raw JPEG request body."""

    async def post_base64(self, image_base64: str) -> ProviderReply:
        """Send the image as base64 inside a JSON body."""


@dataclass
class HttpxCalorieProviderClient(CalorieProviderClient):
    """HTTPX-backed calorie provider client.

    Transport failures are returned as replies without a status code so the
    caller can decide on a fallback without exception handling.
    """

    api_url: str
    api_key: str | None
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15.0

    @classmethod
    def create(
        cls, api_url: str, api_key: str | None, timeout_seconds: float = 15.0
    ) -> "HttpxCalorieProviderClient":
        """Create a provider client with a managed httpx session."""
        return cls(
            api_url=api_url,
            api_key=api_key,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    def binary_url(self) -> httpx.URL:
        """Return the endpoint with the API key appended as a query parameter."""
        url = httpx.URL(self.api_url)
        if self.api_key and API_KEY_PARAM not in url.params:
            url = url.copy_merge_params({API_KEY_PARAM: self.api_key})
        return url

    def json_headers(self) -> dict[str, str]:
        """Return headers for the JSON request, carrying the key redundantly."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["x-api-key"] = self.api_key
        return headers

    async def post_image(self, image_bytes: bytes) -> ProviderReply:
        """POST raw JPEG bytes to the endpoint."""
        return await self._send(
            self.binary_url(),
            content=image_bytes,
            headers={"Content-Type": "image/jpeg"},
        )

    async def post_base64(self, image_base64: str) -> ProviderReply:
        """POST ``{"image_base64": ...}`` to the endpoint."""
        return await self._send(
            httpx.URL(self.api_url),
            json={"image_base64": image_base64},
            headers=self.json_headers(),
        )

    async def _send(
        self,
        url: httpx.URL,
        *,
        headers: dict[str, str],
        content: bytes | None = None,
        json: dict[str, object] | None = None,
    ) -> ProviderReply:
        try:
            response = await self.http_client.post(
                url,
                content=content,
                json=json,
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            return ProviderReply(
                status_code=None, body="", error=f"{type(exc).__name__}: {exc}"
            )
        return ProviderReply(status_code=response.status_code, body=response.text)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
