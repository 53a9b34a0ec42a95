"""HTTP client for the folioshell server API."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from folioshell.domain.models import (
    ClientConfig,
    LastLoginResponse,
    LoginRecord,
    SudoDecision,
)

logger = logging.getLogger(__name__)


class ApiClient:
    """Talks to the folioshell server endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def connect(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
            logger.info("API client ready for %s", self._base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("API client closed")

    async def fetch_config(self) -> ClientConfig:
        data = await self._request("GET", "/api/config")
        try:
            return ClientConfig.model_validate(data)
        except ValidationError as e:
            raise ApiError(f"Invalid config payload: {e}") from e

    async def fetch_motd(self) -> list[str]:
        """Return the MOTD lines; an unsuccessful answer is an error."""
        data = await self._request("GET", "/api/motd")
        if not data.get("success"):
            raise ApiError(data.get("error") or "MOTD unavailable")
        return [str(line) for line in data.get("motd") or []]

    async def sudo(self, password: str, arg: str) -> SudoDecision:
        data = await self._request("POST", "/api/sudo", json={"password": password, "arg": arg})
        try:
            return SudoDecision.model_validate(data)
        except ValidationError as e:
            raise ApiError(f"Invalid sudo response: {e}") from e

    async def fetch_last_login(self) -> LoginRecord | None:
        data = await self._request("GET", "/api/last-login")
        try:
            response = LastLoginResponse.model_validate(data)
        except ValidationError as e:
            raise ApiError(f"Invalid last-login payload: {e}") from e
        return response.data if response.success else None

    async def save_login(
        self, user_agent: str, ip_address: str | None, location: str | None
    ) -> None:
        """Record this visit. Fire-and-forget: failures are only logged."""
        try:
            await self._request(
                "POST",
                "/api/save-login",
                json={"user_agent": user_agent, "ip_address": ip_address, "location": location},
            )
        except ApiError as e:
            logger.warning("Could not save login: %s", e)

    async def server_stats(self) -> dict[str, Any]:
        return await self._request("GET", "/api/sysinfo/cpu")

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        if self._client is None:
            raise ApiError("Not connected to server")
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise ApiError(e.response.reason_phrase or str(e)) from e
        except httpx.HTTPError as e:
            raise ApiError(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise ApiError(f"{method} {path} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise ApiError(f"{method} {path} returned unexpected payload")
        return data

    async def __aenter__(self) -> ApiClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


class ApiError(Exception):
    """Raised when a folioshell server call fails."""
