"""Thin clients for the third-party lookups used by ``info`` and ``weather``.

Public IP (ipinfo.io), IP geolocation (ipapi.co), forward geocoding and
forecasts (open-meteo), reverse geocoding (nominatim). Device position
comes from a pluggable :class:`GeolocationProvider`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

logger = logging.getLogger(__name__)

IPINFO_URL = "https://ipinfo.io/json"
IPAPI_URL = "https://ipapi.co/{ip}/json/"
GEOCODE_URL = "https://geocoding-api.open-meteo.com/v1/search"
REVERSE_GEOCODE_URL = "https://nominatim.openstreetmap.org/reverse"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"


class LocationServices:
    """IP, geocoding and weather lookups over one shared httpx client."""

    def __init__(
        self,
        user_agent: str = "folioshell",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": user_agent},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def public_ip(self) -> str | None:
        """The caller's public IP, or None when it cannot be determined."""
        try:
            data = await self._get_json(IPINFO_URL)
        except IntegrationError as e:
            logger.warning("Error fetching IP address: %s", e)
            return None
        return data.get("ip") or None

    async def locate_ip(self, ip: str | None) -> str | None:
        """``"City, Country"`` for an IP, or None."""
        if not ip:
            return None
        try:
            data = await self._get_json(IPAPI_URL.format(ip=ip))
            if data.get("error"):
                raise IntegrationError(data.get("reason") or "Unknown error")
        except IntegrationError as e:
            logger.warning("Error fetching location: %s", e)
            return None
        return ", ".join(p for p in (data.get("city"), data.get("country_name")) if p) or None

    async def ip_coordinates(self) -> tuple[float, float, str]:
        """Latitude, longitude and display name for the caller's IP."""
        data = await self._get_json(IPINFO_URL)
        try:
            lat, lon = (float(v) for v in data["loc"].split(","))
        except (KeyError, ValueError, AttributeError) as e:
            raise IntegrationError("No coordinates for this IP") from e
        return lat, lon, f"{data.get('city')}, {data.get('country')}"

    async def geocode(self, name: str) -> tuple[float, float, str]:
        data = await self._get_json(GEOCODE_URL, params={"name": name})
        results = data.get("results") or []
        if not results:
            raise IntegrationError("Location not found.")
        place = results[0]
        return place["latitude"], place["longitude"], f"{place['name']}, {place.get('country')}"

    async def reverse_geocode(self, lat: float, lon: float, language: str = "en") -> str:
        """Best-effort place name for coordinates, falling back to the numbers."""
        fallback = f"Lat {lat:.2f}, Lon {lon:.2f}"
        try:
            data = await self._get_json(
                REVERSE_GEOCODE_URL,
                params={"format": "json", "lat": lat, "lon": lon},
                headers={"Accept-Language": language},
            )
        except IntegrationError:
            return fallback
        addr = data.get("address")
        if not addr:
            return fallback
        place = (
            addr.get("city") or addr.get("town") or addr.get("village")
            or addr.get("hamlet") or addr.get("county")
        )
        return ", ".join(p for p in (place, addr.get("state"), addr.get("country")) if p) or fallback

    async def current_weather(self, lat: float, lon: float) -> tuple[dict[str, Any], str]:
        """The ``current_weather`` block and the location's timezone name."""
        data = await self._get_json(
            FORECAST_URL,
            params={
                "latitude": lat,
                "longitude": lon,
                "current_weather": "true",
                "timezone": "auto",
            },
        )
        weather = data.get("current_weather")
        if not weather:
            raise IntegrationError("No weather data available")
        return weather, data.get("timezone") or "UTC"

    async def _get_json(self, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = await self._client.get(url, **kwargs)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise IntegrationError(str(e)) from e
        except ValueError as e:
            raise IntegrationError(f"Invalid JSON from {url}") from e
        if not isinstance(data, dict):
            raise IntegrationError(f"Unexpected payload from {url}")
        return data


class IntegrationError(Exception):
    """Raised when a third-party lookup fails."""


class GeolocationError(Exception):
    """Device position could not be obtained. ``code`` follows the W3C values."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    MESSAGES = {
        PERMISSION_DENIED: "GPS authorization not given (permission denied)",
        POSITION_UNAVAILABLE: "GPS position unavailable",
        TIMEOUT: "GPS request timed out",
    }

    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(message or self.MESSAGES.get(code, "GPS error"))
        self.code = code

    @property
    def user_message(self) -> str:
        return self.MESSAGES.get(self.code, "Could not resolve location.")


class GeolocationProvider(ABC):
    """Source of the device's own coordinates for ``weather -gps``."""

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    async def current_position(self) -> tuple[float, float]:
        """Return ``(latitude, longitude)``.

        Raises:
            GeolocationError: With the W3C error code on failure.
        """
        ...


class NoGeolocation(GeolocationProvider):
    """Used when the platform has no positioning source."""

    @property
    def available(self) -> bool:
        return False

    async def current_position(self) -> tuple[float, float]:
        raise GeolocationError(GeolocationError.POSITION_UNAVAILABLE)


class FixedGeolocation(GeolocationProvider):
    """Coordinates supplied up front (e.g. from the command line)."""

    def __init__(self, latitude: float, longitude: float) -> None:
        self._position = (latitude, longitude)

    async def current_position(self) -> tuple[float, float]:
        return self._position
