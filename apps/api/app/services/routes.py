from __future__ import annotations

"""Build fixed patrol routes for pickers from their pending pickups."""

from typing import Dict, List, Sequence

import numpy as np

from app.domain.models import Coordinate
from app.services.document_store import DocumentStore


def interpolate_route(stops: Sequence[Coordinate], points_per_leg: int = 5) -> List[Coordinate]:
    """Densify ``stops`` into evenly spaced waypoints.

    Each leg contributes ``points_per_leg`` points including its start; the
    final stop is appended once so consecutive legs do not repeat a point.
    """
    if points_per_leg < 1:
        raise ValueError("points_per_leg must be >= 1")
    if len(stops) < 2:
        return [Coordinate(lat=s.lat, lng=s.lng) for s in stops]

    coords = np.array([[s.lat, s.lng] for s in stops], dtype=float)
    legs = []
    for start, end in zip(coords[:-1], coords[1:]):
        t = np.linspace(0.0, 1.0, points_per_leg, endpoint=False)[:, None]
        legs.append(start + t * (end - start))
    legs.append(coords[-1:])
    points = np.round(np.vstack(legs), 6)
    return [Coordinate(lat=float(lat), lng=float(lng)) for lat, lng in points]


def _user_home(user: dict) -> Coordinate | None:
    if user.get("lat") is None or user.get("lng") is None:
        return None
    return Coordinate(lat=user["lat"], lng=user["lng"])


def build_picker_routes(
    store: DocumentStore,
    origin: Coordinate,
    points_per_leg: int = 5,
) -> Dict[str, List[dict]]:
    """Route every picker from its position through homes with pending pickups.

    Pickups carrying a ``pickerId`` are routed to that picker only; the rest
    are visited by every picker. Users without coordinates are skipped.
    """
    users = {str(u.get("id")): u for u in store.list("users")}
    pending = [p for p in store.list("pickups") if p.get("status", "pending") == "pending"]

    routes: Dict[str, List[dict]] = {}
    for picker in store.list("pickers"):
        picker_id = str(picker.get("id"))
        if picker.get("lat") is not None and picker.get("lng") is not None:
            start = Coordinate(lat=picker["lat"], lng=picker["lng"])
        else:
            start = origin

        stops = [start]
        for pickup in pending:
            assigned = pickup.get("pickerId")
            if assigned is not None and str(assigned) != picker_id:
                continue
            home = _user_home(users.get(str(pickup.get("userId")), {}))
            if home is not None and home not in stops:
                stops.append(home)

        if len(stops) < 2:
            continue
        routes[picker_id] = [c.model_dump() for c in interpolate_route(stops, points_per_leg)]
    return routes
