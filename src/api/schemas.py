"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator

from src.domain.entities import Location
from src.domain.enums import OrderStatus

# ["lat", "lng"] -- strings or numbers, exactly two of them
CoordinatePair = Annotated[list[float], Field(min_length=2, max_length=2)]


# ── Requests ──────────────────────────────────────────────────────────


class CreateOrderRequest(BaseModel):
    origin: CoordinatePair
    destination: CoordinatePair

    @field_validator("origin", "destination")
    @classmethod
    def _within_bounds(cls, value: list[float]) -> list[float]:
        lat, lng = value
        if not -90 <= lat <= 90:
            raise ValueError("latitude must be within [-90, 90]")
        if not -180 <= lng <= 180:
            raise ValueError("longitude must be within [-180, 180]")
        return value

    def origin_location(self) -> Location:
        return Location(*self.origin)

    def destination_location(self) -> Location:
        return Location(*self.destination)


class TakeOrderRequest(BaseModel):
    status: Literal["TAKEN"]


# ── Responses ─────────────────────────────────────────────────────────


class OrderResponse(BaseModel):
    id: int
    distance: float
    status: OrderStatus

    model_config = {"from_attributes": True}


class StatusResponse(BaseModel):
    status: str = "SUCCESS"


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error: str
