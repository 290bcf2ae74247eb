from __future__ import annotations

"""Bin catalog endpoint."""

from typing import Optional

from fastapi import APIRouter, Query

from app.services.document_store import get_store

router = APIRouter(tags=["bins"])


@router.get("/bins")
def list_bins(bin_type: Optional[str] = Query(None, alias="type")) -> list:
    """All bins, or those whose ``type`` matches ignoring case."""
    bins = get_store().list("bins")
    if bin_type:
        wanted = bin_type.lower()
        bins = [b for b in bins if str(b.get("type", "")).lower() == wanted]
    return bins
