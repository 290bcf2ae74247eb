from __future__ import annotations

"""Picker tracking endpoints: simulated location, history and route reset."""

from fastapi import APIRouter, Depends, Request

from app.core.errors import NotFoundError
from app.domain.models import MessageResponse
from app.services.document_store import get_store
from app.services.simulation import LocationStrategy, parse_picker_id

router = APIRouter(prefix="/pickers", tags=["pickers"])


def get_location_strategy(request: Request) -> LocationStrategy:
    """The strategy installed on the app at startup."""
    return request.app.state.location_strategy


@router.get("/{picker_id}/location")
def picker_location(picker_id: str, strategy: LocationStrategy = Depends(get_location_strategy)) -> dict:
    """Advance the picker one simulated step and report where it is."""
    return strategy.advance(get_store(), picker_id)


@router.post("/{picker_id}/resetRoute", response_model=MessageResponse)
def reset_route(picker_id: str, strategy: LocationStrategy = Depends(get_location_strategy)) -> MessageResponse:
    strategy.reset(get_store(), picker_id)
    return MessageResponse(message=f"Route reset for picker {picker_id}")


def _picker(picker_id: str) -> dict:
    picker = get_store().get("pickers", parse_picker_id(picker_id))
    if not picker:
        raise NotFoundError("Picker not found")
    return picker


@router.get("/{picker_id}/locations")
def picker_locations(picker_id: str) -> list:
    return _picker(picker_id).get("locations") or []


@router.get("/{picker_id}/location/latest")
def latest_picker_location(picker_id: str) -> dict:
    locations = _picker(picker_id).get("locations") or []
    if not locations:
        raise NotFoundError("No location data found")
    return locations[-1]
