"""MapQuest geocoding client with retry logic."""

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Optional

import httpx

from app.config import settings
from app.exceptions import GeocoderAPIException, ServiceUnavailableException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    """A single geocoded location."""

    latitude: float
    longitude: float
    formatted_address: str
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None

    def as_location(self) -> dict:
        """Bootcamp column values for this location."""
        return asdict(self)


class MapQuestGeocoder:
    """Async wrapper for the MapQuest geocoding API with retry logic."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_base: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.GEOCODER_API_KEY
        self.base_url = base_url or settings.GEOCODER_BASE_URL
        self.timeout = timeout or settings.GEOCODER_TIMEOUT
        self.max_retries = max_retries or settings.GEOCODER_MAX_RETRIES
        self.backoff_base = backoff_base
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of the HTTP client."""
        if self._client is None:
            if not self.api_key:
                raise ServiceUnavailableException("GEOCODER_API_KEY is not configured")
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            )
        return self._client

    async def geocode(self, address: str) -> Optional[GeocodeResult]:
        """
        Resolve a free-form address or zipcode.

        Args:
            address: Address text to resolve

        Returns:
            The best match, or None if the provider found nothing

        Raises:
            ServiceUnavailableException: If no API key is configured
            GeocoderAPIException: If the provider fails after retries
        """
        last_error: Optional[str] = None

        for attempt in range(self.max_retries):
            try:
                response = await self.client.get(
                    "/address",
                    params={"key": self.api_key, "location": address, "maxResults": 1},
                )
            except httpx.TransportError as e:
                last_error = str(e) or type(e).__name__
                await self._backoff(attempt, "Connection error")
                continue

            if response.status_code == 429 or response.status_code >= 500:
                last_error = f"HTTP {response.status_code}"
                await self._backoff(attempt, f"Geocoder returned {response.status_code}")
                continue

            if response.status_code != 200:
                logger.error(f"Geocoder error: {response.status_code} - {response.text[:200]}")
                raise GeocoderAPIException(f"HTTP {response.status_code}")

            return self._parse(response.json())

        raise GeocoderAPIException(
            f"request failed after {self.max_retries} retries: {last_error}"
        )

    async def _backoff(self, attempt: int, reason: str):
        if attempt + 1 >= self.max_retries:
            return
        wait_time = self.backoff_base ** (attempt + 1)  # 2, 4, 8 seconds
        logger.warning(
            f"{reason}, retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
        )
        await asyncio.sleep(wait_time)

    @staticmethod
    def _parse(payload: dict) -> Optional[GeocodeResult]:
        info = payload.get("info") or {}
        if info.get("statuscode", 0) != 0:
            messages = "; ".join(info.get("messages") or []) or "unknown error"
            logger.error(f"Geocoder rejected request: {info.get('statuscode')} - {messages}")
            raise GeocoderAPIException(messages)

        results = payload.get("results") or []
        locations = results[0].get("locations") if results else None
        if not locations:
            return None

        location = locations[0]
        lat_lng = location.get("latLng") or {}
        if "lat" not in lat_lng or "lng" not in lat_lng:
            return None

        street = location.get("street") or None
        city = location.get("adminArea5") or None
        state = location.get("adminArea3") or None
        zipcode = location.get("postalCode") or None
        country = location.get("adminArea1") or None
        state_zip = " ".join(part for part in (state, zipcode) if part)
        formatted = ", ".join(part for part in (street, city, state_zip, country) if part)

        return GeocodeResult(
            latitude=float(lat_lng["lat"]),
            longitude=float(lat_lng["lng"]),
            formatted_address=formatted,
            street=street,
            city=city,
            state=state,
            zipcode=zipcode,
            country=country,
        )

    async def close(self):
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


geocoder = MapQuestGeocoder()
