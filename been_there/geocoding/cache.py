import os
import time
import logging
from threading import Lock
from typing import Callable, Dict, Optional, Tuple

from been_there.models.place import PlaceDescription

# Constants
CACHE_TTL_SECONDS = float(os.getenv("GEOCODE_CACHE_TTL", 24 * 60 * 60))
# 3 decimals is roughly a 100-150m grid cell, 2 decimals roughly 1km
CACHE_PRECISION = int(os.getenv("GEOCODE_CACHE_PRECISION", 3))

# Get logger
logger = logging.getLogger(__name__)


class GeoCache:
    """
    In-memory reverse geocoding cache keyed by rounded coordinates.

    Entries expire ``ttl_seconds`` after they are stored. Expired entries are
    dropped lazily on the next lookup of the same grid cell; there is no
    background sweep and no capacity limit.
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        precision: int = CACHE_PRECISION,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.precision = precision
        self._clock = clock
        # Format: {"lat,lng": (description, expires_at)}
        self._entries: Dict[str, Tuple[PlaceDescription, float]] = {}
        self._lock = Lock()

    def make_key(self, lat: float, lng: float) -> str:
        # + 0.0 folds -0.0 into 0.0
        lat_key = round(float(lat), self.precision) + 0.0
        lng_key = round(float(lng), self.precision) + 0.0
        return f"{lat_key},{lng_key}"

    def lookup(self, lat: float, lng: float) -> Optional[PlaceDescription]:
        key = self.make_key(lat, lng)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            description, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                logger.debug(f"Geocode cache entry expired: {key}")
                return None

            return description

    def store(self, lat: float, lng: float, description: PlaceDescription) -> None:
        key = self.make_key(lat, lng)
        with self._lock:
            self._entries[key] = (description, self._clock() + self.ttl_seconds)
        logger.debug(f"Geocode cache store: {key}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
