"""Reverse geocoding for case locations (Mapbox places API)."""

from __future__ import annotations

import logging

import httpx

from fixmypidge.core.config import settings

logger = logging.getLogger(__name__)

MAPBOX_GEOCODE_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places/{lng},{lat}.json"


def format_coordinates(lat: float, lng: float) -> str:
    return f"{lat}, {lng}"


def reverse_geocode(
    lat: float,
    lng: float,
    *,
    client: httpx.Client | None = None,
) -> str:
    """
    Resolve a point to a human-readable address.

    Falls back to the raw coordinates when no token is configured, the
    provider fails, or it returns no feature.
    """
    fallback = format_coordinates(lat, lng)
    if not settings.GEOCODING_API_TOKEN:
        return fallback

    url = MAPBOX_GEOCODE_URL.format(lat=lat, lng=lng)
    params = {"access_token": settings.GEOCODING_API_TOKEN, "limit": 1}
    owns_client = client is None
    http = client or httpx.Client(timeout=settings.GEOCODING_TIMEOUT_SECONDS)
    try:
        response = http.get(url, params=params)
        response.raise_for_status()
        features = response.json().get("features") or []
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Reverse geocoding failed (%s)", type(exc).__name__)
        return fallback
    finally:
        if owns_client:
            http.close()

    if not features:
        return fallback
    return features[0].get("place_name") or fallback
