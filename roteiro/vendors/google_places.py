"""Client utilities for the Google Places API (New)."""

import logging
from typing import Any, Dict

import requests

from roteiro.core.cache import place_cache

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://places.googleapis.com/v1/places"
_FIELDS = "location,displayName"


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


def _fetch_place(place_id: str, api_key: str) -> Dict[str, Any]:
    params = {"key": api_key, "fields": _FIELDS}
    try:
        response = _SESSION.get(f"{_BASE_URL}/{place_id}", params=params, timeout=10)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error("get_place failed: place_id=%s, error=%s", place_id, exc)
        raise GooglePlacesError(str(exc)) from exc

    if not isinstance(payload, dict) or not payload.get("location"):
        raise GooglePlacesError("Places API response has no location")
    return payload


def get_place(place_id: str, api_key: str) -> Dict[str, Any]:
    """Return ``{"location": {...}, "displayName": {...}}`` for a place id.

    Successful lookups are cached for a long time; failures are not cached.
    """
    return place_cache.get_or_set(place_id, lambda: _fetch_place(place_id, api_key))
