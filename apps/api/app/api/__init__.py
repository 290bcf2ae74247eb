from __future__ import annotations

from fastapi import APIRouter

from app.api import (
    routes_bins,
    routes_pickers,
    routes_pickups,
    routes_resources,
    routes_state,
    routes_users,
)

router = APIRouter()
router.include_router(routes_pickers.router)
router.include_router(routes_users.router)
router.include_router(routes_bins.router)
router.include_router(routes_pickups.router)
router.include_router(routes_state.router)
# generic CRUD must come last
router.include_router(routes_resources.router)
