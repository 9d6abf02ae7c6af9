"""Monitoring API client for sourcemap uploads."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from sourcemap_sync.config import Settings
from sourcemap_sync.domain.sourcemaps import (
    PresignedPost,
    SourcemapRegistration,
    SourcemapRegistrationResponse,
)
from sourcemap_sync.errors import FatalError, MonitoringAPIError

UPLOAD_SUCCESS_STATUS = 204


class MonitoringClient(Protocol):
    """Interface for the monitoring sourcemap endpoints."""

    async def register_sourcemap(
        self, pro_id: str, token: str, registration: SourcemapRegistration
    ) -> PresignedPost:
        """Register a sourcemap and return its presigned upload form."""

    async def upload_sourcemap(
        self, presigned: PresignedPost, name: str, content: str
    ) -> None:
        """Upload sourcemap content to a presigned endpoint."""


@dataclass
class HttpxMonitoringClient(MonitoringClient):
    """Monitoring client implemented with httpx.

    Registration goes through ``api_client`` with a bearer token. Uploads go
    through ``upload_client``, which shares the HTTP configuration but never
    carries the token.
    """

    api_url: str
    api_client: httpx.AsyncClient
    upload_client: httpx.AsyncClient

    @classmethod
    def create(cls, settings: Settings) -> "HttpxMonitoringClient":
        """Create a client with managed httpx sessions."""
        http_config = settings.http_config()
        return cls(
            api_url=settings.api_url.rstrip("/"),
            api_client=httpx.AsyncClient(**http_config),
            upload_client=httpx.AsyncClient(**http_config),
        )

    async def register_sourcemap(
        self, pro_id: str, token: str, registration: SourcemapRegistration
    ) -> PresignedPost:
        """POST the sourcemap metadata and return the presigned form."""
        url = f"{self.api_url}/monitoring/{pro_id}/sourcemaps"
        try:
            response = await self.api_client.post(
                url,
                headers={"Authorization": f"Bearer {token}"},
                json=registration.to_payload(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise MonitoringAPIError(
                _error_message(exc.response), status_code=exc.response.status_code
            ) from exc
        except httpx.RequestError as exc:
            raise MonitoringAPIError(f"{type(exc).__name__}: {exc}") from exc
        try:
            payload = response.json()
            if isinstance(payload, dict):
                payload = payload.get("data", payload)
            return SourcemapRegistrationResponse.model_validate(payload).sourcemap_post
        except ValueError as exc:
            raise FatalError(
                f"Unexpected sourcemap registration response: {exc}"
            ) from exc

    async def upload_sourcemap(
        self, presigned: PresignedPost, name: str, content: str
    ) -> None:
        """Submit the presigned multipart form with the sourcemap as ``file``."""
        try:
            response = await self.upload_client.post(
                presigned.url,
                data=presigned.fields,
                files={"file": (name, content.encode("utf-8"), "application/json")},
            )
        except httpx.RequestError as exc:
            raise FatalError(
                f"Unable to upload {name}: {type(exc).__name__}: {exc}"
            ) from exc
        if response.status_code != UPLOAD_SUCCESS_STATUS:
            raise FatalError(
                f"Unexpected status code from AWS: {response.status_code}"
            )

    async def close(self) -> None:
        """Close the underlying HTTP sessions."""
        await self.api_client.aclose()
        await self.upload_client.aclose()


def _error_message(response: httpx.Response) -> str:
    """Build a readable message from an API error response."""
    message = f"HTTP {response.status_code}"
    try:
        payload = response.json()
    except ValueError:
        return message
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return f"{message}: {error['message']}"
    return message
