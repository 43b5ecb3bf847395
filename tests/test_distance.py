"""Unit tests for the distance lookups (Distance Matrix client mocked at the transport)."""

from __future__ import annotations

import httpx
import pytest

from src.config import Settings
from src.domain.distance import HaversineDistanceLookup, haversine_km
from src.domain.entities import Location
from src.domain.errors import (
    DistanceLookupEmpty,
    DistanceLookupFailed,
    DistanceLookupMalformed,
)
from src.infrastructure.distance_client import (
    DistanceMatrixResponse,
    GoogleMapsDistanceLookup,
    build_distance_lookup,
)

ORIGIN = Location(37.8093475, -122.2740787)
DESTINATION = Location(37.8061044, -122.2943356)
API_KEY = "not-a-real-key"

# Literal from the Distance Matrix documentation
MATRIX_RESPONSE = {
    "status": "OK",
    "origin_addresses": ["Vancouver, BC, Canada", "Seattle, WA, USA"],
    "destination_addresses": ["San Francisco, CA, USA", "Victoria, BC, Canada"],
    "rows": [
        {
            "elements": [
                {
                    "status": "OK",
                    "duration": {"value": 340110, "text": "3 days 22 hours"},
                    "distance": {"value": 1734542, "text": "1 735 km"},
                },
                {
                    "status": "OK",
                    "duration": {"value": 24487, "text": "6 hours 48 mins"},
                    "distance": {"value": 129324, "text": "129 km"},
                },
            ]
        },
        {
            "elements": [
                {
                    "status": "OK",
                    "duration": {"value": 288834, "text": "3 days 8 hours"},
                    "distance": {"value": 1489604, "text": "1 490 km"},
                }
            ]
        },
    ],
}


def _lookup(handler) -> GoogleMapsDistanceLookup:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleMapsDistanceLookup(
        API_KEY, url="https://maps.example.test/distancematrix/json", client=client
    )


def _json(body):
    return lambda request: httpx.Response(200, json=body)


class TestHaversine:
    def test_same_point_is_zero(self):
        assert haversine_km(19.09, 72.87, 19.09, 72.87) == 0.0

    def test_known_distance(self):
        # Roughly 1.8 km across west Oakland
        km = haversine_km(
            ORIGIN.latitude, ORIGIN.longitude,
            DESTINATION.latitude, DESTINATION.longitude,
        )
        assert 1.5 < km < 2.2

    @pytest.mark.asyncio
    async def test_lookup_returns_whole_meters(self):
        distance = await HaversineDistanceLookup().lookup(ORIGIN, DESTINATION)
        assert isinstance(distance.meters, int)
        assert distance.meters > 0
        assert distance.text.endswith(" km")


class TestDistanceMatrixResponse:
    def test_first_element_of_first_row(self):
        body = DistanceMatrixResponse.model_validate(MATRIX_RESPONSE)
        distance = body.first_distance()
        assert distance.meters == 1734542
        assert distance.text == "1 735 km"

    def test_missing_rows(self):
        with pytest.raises(DistanceLookupEmpty):
            DistanceMatrixResponse.model_validate({"status": "OK"}).first_distance()


class TestGoogleMapsDistanceLookup:
    @pytest.mark.asyncio
    async def test_sends_points_and_key(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=MATRIX_RESPONSE)

        lookup = _lookup(handler)
        distance = await lookup.lookup(ORIGIN, DESTINATION)

        assert distance.meters == 1734542
        assert seen["origins"] == "37.8093475,-122.2740787"
        assert seen["destinations"] == "37.8061044,-122.2943356"
        assert seen["key"] == API_KEY

    @pytest.mark.asyncio
    async def test_timeout_is_lookup_failed(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(DistanceLookupFailed) as excinfo:
            await _lookup(handler).lookup(ORIGIN, DESTINATION)
        assert API_KEY not in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_connection_error_is_lookup_failed(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(DistanceLookupFailed):
            await _lookup(handler).lookup(ORIGIN, DESTINATION)

    @pytest.mark.asyncio
    async def test_http_error_status_is_lookup_failed(self):
        lookup = _lookup(lambda request: httpx.Response(503, text="unavailable"))
        with pytest.raises(DistanceLookupFailed) as excinfo:
            await lookup.lookup(ORIGIN, DESTINATION)
        assert API_KEY not in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_request_denied_is_lookup_failed(self):
        body = {"status": "REQUEST_DENIED", "error_message": "bad key", "rows": []}
        with pytest.raises(DistanceLookupFailed):
            await _lookup(_json(body)).lookup(ORIGIN, DESTINATION)

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self):
        lookup = _lookup(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(DistanceLookupMalformed):
            await lookup.lookup(ORIGIN, DESTINATION)

    @pytest.mark.asyncio
    async def test_wrong_shape_is_malformed(self):
        body = {"status": "OK", "rows": [{"elements": [{"distance": {"value": "far"}}]}]}
        with pytest.raises(DistanceLookupMalformed):
            await _lookup(_json(body)).lookup(ORIGIN, DESTINATION)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"status": "OK", "rows": []},
            {"status": "OK", "rows": [{"elements": []}]},
            {"status": "OK", "rows": [{"elements": [{"status": "ZERO_RESULTS"}]}]},
        ],
    )
    async def test_no_usable_entry_is_empty(self, body):
        with pytest.raises(DistanceLookupEmpty):
            await _lookup(_json(body)).lookup(ORIGIN, DESTINATION)

    @pytest.mark.asyncio
    async def test_aclose_closes_owned_client_only(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(_json(MATRIX_RESPONSE)))
        lookup = GoogleMapsDistanceLookup(API_KEY, url="https://x.test", client=client)
        await lookup.aclose()
        assert not client.is_closed
        await client.aclose()


class TestBuildDistanceLookup:
    def test_haversine_provider(self):
        settings = Settings(_env_file=None, distance_provider="haversine")
        assert isinstance(build_distance_lookup(settings), HaversineDistanceLookup)

    def test_google_requires_key(self):
        settings = Settings(
            _env_file=None, distance_provider="google_maps", google_maps_api_key=""
        )
        with pytest.raises(RuntimeError, match="GOOGLE_MAPS_API_KEY"):
            build_distance_lookup(settings)

    @pytest.mark.asyncio
    async def test_google_with_key(self):
        settings = Settings(
            _env_file=None,
            distance_provider="google_maps",
            google_maps_api_key=API_KEY,
            distance_lookup_timeout_seconds=1.5,
        )
        lookup = build_distance_lookup(settings)
        try:
            assert isinstance(lookup, GoogleMapsDistanceLookup)
            assert lookup.api_key == API_KEY
        finally:
            await lookup.aclose()

