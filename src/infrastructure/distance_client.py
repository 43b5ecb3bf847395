"""
Google Maps Distance Matrix client.

One GET per lookup, bounded by its own timeout, never retried.  The response
is decoded with pydantic; only the first element of the first row is used.

Failure mapping
---------------
* transport error / timeout / non-2xx / top-level status != OK
  -> ``DistanceLookupFailed``
* body is not JSON or has the wrong shape -> ``DistanceLookupMalformed``
* no rows, no elements, or first element without a distance
  -> ``DistanceLookupEmpty``

The request URL carries the API key, so error messages never include it.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from src.config import Settings
from src.domain.distance import DistanceLookup, HaversineDistanceLookup
from src.domain.entities import Distance, Location
from src.domain.errors import (
    DistanceLookupEmpty,
    DistanceLookupFailed,
    DistanceLookupMalformed,
)

logger = logging.getLogger(__name__)


# ── Response shape ────────────────────────────────────────────────────


class MatrixDistance(BaseModel):
    value: int
    text: str = ""


class MatrixElement(BaseModel):
    status: str = "OK"
    distance: Optional[MatrixDistance] = None


class MatrixRow(BaseModel):
    elements: list[MatrixElement] = []


class DistanceMatrixResponse(BaseModel):
    status: str = "OK"
    error_message: Optional[str] = None
    rows: list[MatrixRow] = []

    def first_distance(self) -> Distance:
        if not self.rows:
            raise DistanceLookupEmpty("Distance Matrix response missing rows")
        if not self.rows[0].elements:
            raise DistanceLookupEmpty("Distance Matrix response missing rows.elements")
        element = self.rows[0].elements[0]
        if element.status != "OK" or element.distance is None:
            raise DistanceLookupEmpty(
                f"Distance Matrix element has no distance (status={element.status})"
            )
        return Distance(meters=element.distance.value, text=element.distance.text)


# ── Client ────────────────────────────────────────────────────────────


class GoogleMapsDistanceLookup(DistanceLookup):
    def __init__(
        self,
        api_key: str,
        *,
        url: str,
        timeout: float = 3.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def lookup(self, origin: Location, destination: Location) -> Distance:
        params = {
            "origins": origin.as_query(),
            "destinations": destination.as_query(),
            "key": self.api_key,
        }
        try:
            response = await self._client.get(self.url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Distance Matrix returned HTTP %d", exc.response.status_code
            )
            raise DistanceLookupFailed(
                f"Distance Matrix returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Distance Matrix request failed: %s", type(exc).__name__)
            raise DistanceLookupFailed(
                f"Distance Matrix request failed: {type(exc).__name__}"
            ) from exc

        try:
            body = DistanceMatrixResponse.model_validate_json(response.content)
        except ValidationError as exc:
            logger.warning("Undecodable Distance Matrix response")
            raise DistanceLookupMalformed(
                f"unable to decode Distance Matrix response ({exc.error_count()} errors)"
            ) from exc

        if body.status != "OK":
            logger.warning(
                "Distance Matrix rejected request: %s %s",
                body.status, body.error_message or "",
            )
            raise DistanceLookupFailed(f"Distance Matrix status {body.status}")

        return body.first_distance()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def build_distance_lookup(settings: Settings) -> DistanceLookup:
    """Pick the lookup implementation named by ``settings.distance_provider``."""
    if settings.distance_provider == "haversine":
        logger.info("Using great-circle distances (no routing service)")
        return HaversineDistanceLookup()

    if not settings.google_maps_api_key:
        raise RuntimeError(
            "GOOGLE_MAPS_API_KEY is empty; set it or use DISTANCE_PROVIDER=haversine"
        )
    return GoogleMapsDistanceLookup(
        settings.google_maps_api_key,
        url=settings.distance_matrix_url,
        timeout=settings.distance_lookup_timeout_seconds,
    )
