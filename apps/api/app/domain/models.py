from __future__ import annotations

"""Pydantic models for the pickup tracker domain and request/response payloads."""

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator


PICKUP_DONE = "done"
POINTS_SOURCE_PICKUP = "pickup_completed"


class Coordinate(BaseModel):
    """A latitude/longitude pair, e.g. one waypoint of a picker route."""

    model_config = ConfigDict(extra="ignore")

    lat: float
    lng: float


class PickerLocation(BaseModel):
    """Latest position written onto a picker by the route strategies."""

    lat: float
    lng: float
    label: str
    lastUpdated: str


class LocationRecord(BaseModel):
    """A timestamped picker position, as stored in history and returned on poll."""

    id: Optional[int] = None
    pickerId: int | str
    lat: float
    lng: float
    updatedAt: str


class PointsHistoryEntry(BaseModel):
    """Points awarded to a user for one event."""

    id: int
    userId: int | str
    source: str
    points: float
    date: str

    @field_serializer("points")
    def _whole_points(self, points: float) -> float | int:
        return int(points) if float(points).is_integer() else points


def number_or_none(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class ConfirmPickupRequest(BaseModel):
    """Body of a pickup confirmation; every field is optional.

    Values that are not numbers (``"abc"``, lists...) count as absent, so the
    handler falls back to its defaults instead of rejecting the request.
    """

    model_config = ConfigDict(extra="ignore")

    weightKg: Optional[float] = None
    points: Optional[float] = None

    @field_validator("weightKg", "points", mode="before")
    @classmethod
    def _lenient_number(cls, value: Any) -> float | None:
        return number_or_none(value)


class MessageResponse(BaseModel):
    message: str
