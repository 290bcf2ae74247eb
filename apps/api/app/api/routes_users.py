from __future__ import annotations

"""User-scoped read endpoints: pickups, bins and points history."""

from fastapi import APIRouter

from app.services.document_store import get_store, same_id

router = APIRouter(prefix="/users", tags=["users"])


def _parse_user_id(raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        return None


@router.get("/{user_id}/pickups")
def user_pickups(user_id: str) -> list:
    uid = _parse_user_id(user_id)
    if uid is None:
        return []
    return get_store().find("pickups", userId=uid)


@router.get("/{user_id}/bins")
def user_bins(user_id: str) -> list:
    """Bins listed in the user's ``bins`` ids (bins do not point back)."""
    uid = _parse_user_id(user_id)
    store = get_store()
    user = store.get("users", uid) if uid is not None else None
    if not user or not user.get("bins"):
        return []
    owned = user["bins"]
    return [b for b in store.list("bins") if any(same_id(b.get("id"), bin_id) for bin_id in owned)]


@router.get("/{user_id}/pointsHistory")
def user_points_history(user_id: str) -> list:
    uid = _parse_user_id(user_id)
    if uid is None:
        return []
    return get_store().find("pointsHistory", userId=uid)
