"""
Reverse geocoding
-----------------
Turns a latitude/longitude pair into a formatted street address using the
Google Maps Geocoding API.
"""
from typing import Optional

import requests

from motoalarm.utils.logger import get_logger

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
REQUEST_TIMEOUT = 10

# Statuses that mean "the request worked", even when nothing matched.
_OK_STATUSES = {"OK", "ZERO_RESULTS"}

logger = get_logger("geocoder")


class GeocodingError(Exception):
    """Transport, HTTP or API-level failure while geocoding."""


class GoogleGeocoder:
    def __init__(self, api_key: str, session: Optional[requests.Session] = None, timeout: float = REQUEST_TIMEOUT):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        """
        Return the first result's formatted address, or None when the API
        has no match for the coordinates.

        Raises GeocodingError on network errors, non-2xx responses,
        undecodable bodies and error statuses such as REQUEST_DENIED.
        """
        params = {
            "latlng": f"{latitude},{longitude}",
            "key": self.api_key,
        }

        try:
            response = self.session.get(GEOCODE_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise GeocodingError(f"Geocoding request failed: {e}") from e
        except ValueError as e:
            raise GeocodingError(f"Geocoding response is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise GeocodingError(f"Unexpected geocoding response type: {type(data).__name__}")

        status = data.get("status")
        if status is not None and status not in _OK_STATUSES:
            raise GeocodingError(f"Geocoding API returned {status}: {data.get('error_message', '')}")

        results = data.get("results") or []
        if not isinstance(results, list):
            raise GeocodingError(f"Unexpected geocoding results type: {type(results).__name__}")
        if not results:
            logger.info(
                "geocoder.no_results",
                extra={"latitude": latitude, "longitude": longitude},
            )
            return None

        first = results[0]
        if not isinstance(first, dict):
            raise GeocodingError(f"Unexpected geocoding result type: {type(first).__name__}")

        address = first.get("formatted_address")
        if address is not None and not isinstance(address, str):
            raise GeocodingError(f"Unexpected formatted_address type: {type(address).__name__}")
        return address

    def close(self) -> None:
        self.session.close()
