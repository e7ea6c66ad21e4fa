import os
import math
import time
import logging
from typing import Optional, Dict, Any

import requests

from been_there.exceptions import InvalidInputError, ProviderError
from been_there.geocoding.cache import GeoCache
from been_there.models.place import PlaceDescription

# Constants
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/reverse")
USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "BeenThereApp/1.0")
REQUEST_TIMEOUT = float(os.getenv("GEOCODE_TIMEOUT", 10))
RETRY_DELAY = 1.1
MAX_RETRIES = 2
UNKNOWN_LOCATION = "Unknown location"

# Most specific first
LOCALITY_KEYS = ("city", "town", "village", "hamlet", "suburb", "neighbourhood")
REGION_KEYS = ("state", "region", "province", "county")

# Countries where the state/province is part of how people name a place
STATE_PROMINENT_COUNTRIES = {"us", "ca", "au"}

# Get logger
logger = logging.getLogger(__name__)


def _first_present(address: Dict[str, Any], keys) -> Optional[str]:
    for key in keys:
        value = address.get(key)
        if value:
            return value
    return None


def build_place_name(address: Dict[str, Any], display_name: Optional[str] = None) -> str:
    """
    Synthesize a human-readable place name from a Nominatim address breakdown.

    For the US, Canada and Australia the result is "City, State, Country";
    elsewhere it is "City, Country". Missing parts are dropped progressively,
    falling back to the provider's display string and finally to
    "Unknown location".
    """
    country_code = (address.get("country_code") or "").lower()
    country = address.get("country") or None
    locality = _first_present(address, LOCALITY_KEYS)
    region = _first_present(address, REGION_KEYS)

    if country_code in STATE_PROMINENT_COUNTRIES:
        if locality and region and country:
            return f"{locality}, {region}, {country}"
        if locality and country:
            return f"{locality}, {country}"
        if region and country:
            return f"{region}, {country}"
        if locality:
            return locality
        if country:
            return country
    else:
        if locality and country:
            return f"{locality}, {country}"
        if locality:
            return locality
        if region and country:
            return f"{region}, {country}"
        if country:
            return country

    return display_name or UNKNOWN_LOCATION


def normalize(payload: Dict[str, Any]) -> PlaceDescription:
    """Turn a raw Nominatim reverse response into a PlaceDescription."""
    address = payload.get("address") or {}
    country_code = (address.get("country_code") or "").lower() or None

    return PlaceDescription(
        place_name=build_place_name(address, payload.get("display_name")),
        country=address.get("country") or None,
        country_code=country_code,
        raw=payload,
    )


def validate_coordinates(lat, lng):
    for name, value in (("lat", lat), ("lng", lng)):
        # bool is an int subclass but never a coordinate
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInputError("lat and lng must be numbers")
        try:
            finite = math.isfinite(value)
        except OverflowError:
            # ints too large for a float
            finite = False
        if not finite:
            raise InvalidInputError(f"{name} must be a finite number")

    if not -90 <= lat <= 90:
        raise InvalidInputError("lat must be between -90 and 90")
    if not -180 <= lng <= 180:
        raise InvalidInputError("lng must be between -180 and 180")


class NominatimResolver:
    """
    Reverse geocodes coordinates through Nominatim, backed by a GeoCache.

    Concurrent misses for the same grid cell may each call the provider; the
    last one to finish wins the cache slot.
    """

    def __init__(
        self,
        cache: GeoCache,
        session: Optional[requests.Session] = None,
        base_url: str = NOMINATIM_BASE_URL,
        user_agent: str = USER_AGENT,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
    ):
        self.cache = cache
        self.session = session or requests.Session()
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def resolve(self, lat, lng) -> PlaceDescription:
        validate_coordinates(lat, lng)

        # Check cache first to avoid redundant API calls
        cached = self.cache.lookup(lat, lng)
        if cached is not None:
            logger.debug(f"Reverse-geocode cache hit for ({lat}, {lng})")
            return cached

        payload = self._fetch(lat, lng)
        description = normalize(payload)

        # Only cache full successes
        self.cache.store(lat, lng, description)
        logger.info(f"Successfully geocoded coordinates ({lat}, {lng}): {description.place_name}")
        return description

    def _fetch(self, lat: float, lng: float) -> Dict[str, Any]:
        params = {
            "lat": lat,
            "lon": lng,
            "format": "json",
            "zoom": 10,
            "addressdetails": 1,
            "accept-language": "en",
        }

        headers = {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

        attempts = 0
        while True:
            attempts += 1
            try:
                response = self.session.get(
                    self.base_url,
                    params=params,
                    headers=headers,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                if attempts > self.max_retries:
                    logger.error(f"Failed to geocode coordinates ({lat}, {lng}) after {attempts} attempts: {e}")
                    raise ProviderError(f"Geocoding provider unreachable: {e}") from e
                wait_time = self.retry_delay * attempts
                logger.warning(f"Network error for coordinates ({lat}, {lng}): {e}. Retrying in {wait_time}s... (Attempt {attempts}/{self.max_retries})")
                time.sleep(wait_time)
                continue

            if 200 <= response.status_code < 300:
                try:
                    data = response.json()
                except ValueError as e:
                    logger.error(f"Geocoding provider returned invalid JSON for ({lat}, {lng})")
                    raise ProviderError("Geocoding provider returned invalid JSON") from e
                if not isinstance(data, dict):
                    raise ProviderError("Geocoding provider returned an unexpected payload")
                return data

            retryable = response.status_code == 429 or response.status_code >= 500
            if not retryable or attempts > self.max_retries:
                logger.error(f"Nominatim error status {response.status_code} for coordinates ({lat}, {lng})")
                raise ProviderError(f"Geocoding provider error (HTTP {response.status_code})")

            wait_time = self.retry_delay * attempts
            logger.warning(f"Geocoding HTTP error ({response.status_code}) for coordinates ({lat}, {lng}). Retrying in {wait_time}s... (Attempt {attempts}/{self.max_retries})")
            time.sleep(wait_time)
