"""Tests for reverse geocoding fallbacks."""

import httpx

from fixmypidge.core.config import settings
from fixmypidge.services import geocoding_service


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_without_token_returns_coordinates():
    assert geocoding_service.reverse_geocode(51.5, -0.12) == "51.5, -0.12"


def test_returns_first_place_name(monkeypatch):
    monkeypatch.setattr(settings, "GEOCODING_API_TOKEN", "pk.test")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(
            200, json={"features": [{"place_name": "Trafalgar Square, London"}]}
        )

    with _client(handler) as client:
        address = geocoding_service.reverse_geocode(51.5, -0.12, client=client)

    assert address == "Trafalgar Square, London"
    assert seen["url"].path.endswith("/-0.12,51.5.json")
    assert seen["url"].params["access_token"] == "pk.test"


def test_provider_error_falls_back(monkeypatch):
    monkeypatch.setattr(settings, "GEOCODING_API_TOKEN", "pk.test")

    with _client(lambda request: httpx.Response(503)) as client:
        assert geocoding_service.reverse_geocode(1.0, 2.0, client=client) == "1.0, 2.0"


def test_no_features_falls_back(monkeypatch):
    monkeypatch.setattr(settings, "GEOCODING_API_TOKEN", "pk.test")

    with _client(lambda request: httpx.Response(200, json={"features": []})) as client:
        assert geocoding_service.reverse_geocode(1.0, 2.0, client=client) == "1.0, 2.0"
