from __future__ import annotations

"""Pickup confirmation and points award."""

import logging

from fastapi import APIRouter, Depends, Request

from app.core.config import get_settings
from app.core.errors import NotFoundError
from app.domain.models import (
    PICKUP_DONE,
    POINTS_SOURCE_PICKUP,
    ConfirmPickupRequest,
    MessageResponse,
    PointsHistoryEntry,
    number_or_none,
)
from app.services.document_store import get_store
from app.services.simulation import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pickups", tags=["pickups"])

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_confirm_body(request: Request) -> ConfirmPickupRequest:
    """Accept a JSON or form body; anything unreadable means "no fields"."""
    payload = None
    if request.headers.get("content-type", "").startswith(FORM_TYPES):
        payload = dict(await request.form())
    elif await request.body():
        try:
            payload = await request.json()
        except ValueError:
            payload = None
    if not isinstance(payload, dict):
        payload = {}
    return ConfirmPickupRequest.model_validate(payload)


def _whole(value: float) -> float | int:
    return int(value) if float(value).is_integer() else value


@router.post("/{pickup_id}/confirm", response_model=MessageResponse)
def confirm_pickup(
    pickup_id: str,
    request: ConfirmPickupRequest = Depends(read_confirm_body),
) -> MessageResponse:
    """Mark a pickup done and credit its user.

    Confirming an already ``done`` pickup awards the points again.
    """
    weight = _whole(request.weightKg or 0)
    points = _whole(request.points or get_settings().default_points)

    store = get_store()
    with store.lock:
        pickup = store.get("pickups", pickup_id)
        if not pickup:
            raise NotFoundError("Pickup not found")

        user_id = pickup.get("userId")
        user = store.get("users", user_id) if user_id is not None else None

        # everything that can fail is built before the first write
        entry = None
        total = None
        if user:
            total = _whole((number_or_none(user.get("totalPoints")) or 0) + points)
            entry = PointsHistoryEntry(
                id=store.next_id("pointsHistory"),
                userId=user["id"],
                source=POINTS_SOURCE_PICKUP,
                points=points,
                date=utc_now_iso(),
            ).model_dump()

        store.update(
            "pickups",
            pickup["id"],
            {
                "status": PICKUP_DONE,
                "picker_weight_kg": weight,
                "user_weight_kg": weight,
                "weight_verified": True,
            },
        )
        if entry is not None:
            store.update("users", user["id"], {"totalPoints": total})
            store.insert("pointsHistory", entry)
            logger.info("Pickup %s confirmed: user %s +%s points (total %s)", pickup["id"], user["id"], points, total)
        else:
            logger.info("Pickup %s confirmed: no user %s to credit", pickup["id"], user_id)

    return MessageResponse(message="Pickup confirmed and points updated")
