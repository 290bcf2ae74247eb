from __future__ import annotations

"""Database endpoint: serve the whole persisted document."""

from fastapi import APIRouter

from app.services.document_store import get_store

router = APIRouter()


@router.get("/db")
def db() -> dict:
    """Return every collection and object in the store."""
    return get_store().snapshot()
