import time
from collections import OrderedDict
from threading import Lock
from typing import Callable, Optional, Tuple

from motoalarm.utils.geocoder import GeocodingError
from motoalarm.utils.logger import get_logger

DEFAULT_TTL_SECONDS = 3600
DEFAULT_MAX_ENTRIES = 1024
KEY_PRECISION = 6

LOCATION_NOT_FOUND = "Location not found"
UNABLE_TO_FETCH = "Unable to fetch address"

logger = get_logger("address_cache")


def cache_key(latitude: float, longitude: float, precision: int = KEY_PRECISION) -> str:
    """Fixed-precision key so 40, 40.0 and 40.0000001 all land on one entry."""
    return f"{float(latitude):.{precision}f},{float(longitude):.{precision}f}"


class AddressCache:
    """
    Memoizes reverse-geocoded addresses for a fixed TTL.

    The geocoder is any object with `reverse(lat, lon) -> Optional[str]`
    that raises GeocodingError on failure. Failures and empty results are
    turned into sentinel strings and never cached.
    """

    def __init__(
        self,
        geocoder,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.geocoder = geocoder
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[str, float]]" = OrderedDict()
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            address, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return address

    def put(self, key: str, address: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (address, self._clock() + self.ttl_seconds)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def resolve(self, latitude: Optional[float], longitude: Optional[float]) -> str:
        if latitude is None or longitude is None:
            logger.warning(
                "address_cache.missing_coordinates",
                extra={"latitude": latitude, "longitude": longitude},
            )
            return LOCATION_NOT_FOUND

        key = cache_key(latitude, longitude)
        cached = self.get(key)
        if cached is not None:
            logger.debug("address_cache.hit", extra={"key": key})
            return cached

        try:
            address = self.geocoder.reverse(latitude, longitude)
        except GeocodingError as e:
            logger.error("address_cache.geocode_error", extra={"key": key, "error": str(e)})
            return UNABLE_TO_FETCH

        if not address:
            return LOCATION_NOT_FOUND

        self.put(key, address)
        logger.info("address_cache.stored", extra={"key": key})
        return address

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
