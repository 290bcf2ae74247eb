from __future__ import annotations

"""Simulated picker movement: fixed-route cursors and random walks."""

import logging
import random
from datetime import datetime, timezone
from typing import Dict, List, Tuple

from app.core.config import Settings
from app.core.errors import NotFoundError, RouteResetUnsupported
from app.domain.models import Coordinate, LocationRecord, PickerLocation
from app.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

ROUTE_STEPS_KEY = "routeSteps"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_picker_id(raw: str) -> int | str:
    """Numeric ids are stored as ints; anything else is looked up verbatim."""
    try:
        return int(raw)
    except ValueError:
        return raw


def jitter(rng: random.Random, lat: float, lng: float, amplitude: float) -> Tuple[float, float]:
    """Move a point by independent uniform noise on each axis."""
    return lat + rng.uniform(-amplitude, amplitude), lng + rng.uniform(-amplitude, amplitude)


class LocationStrategy:
    """Advances a picker's simulated position on every poll."""

    name = "base"

    def advance(self, store: DocumentStore, picker_id: str) -> dict:
        raise NotImplementedError

    def reset(self, store: DocumentStore, picker_id: str) -> None:
        raise RouteResetUnsupported(self.name)


class RouteCursorStrategy(LocationStrategy):
    """Walk the picker's fixed route, one waypoint per poll, looping at the end.

    The cursor lives on the strategy instance, so it resets with the process.
    """

    name = "route"

    def __init__(self) -> None:
        self.steps: Dict[str, int] = {}

    def get_step(self, store: DocumentStore, picker_id: str) -> int:
        return self.steps.get(picker_id, 0)

    def set_step(self, store: DocumentStore, picker_id: str, step: int) -> None:
        self.steps[picker_id] = step

    def _route(self, store: DocumentStore, picker_id: str) -> List[Coordinate]:
        routes = store.get_object("pickerRoutes") or {}
        waypoints = routes.get(picker_id)
        if not waypoints:
            raise NotFoundError("Route not found for this picker", key="error")
        return [Coordinate.model_validate(point) for point in waypoints]

    def advance(self, store: DocumentStore, picker_id: str) -> dict:
        with store.lock:
            route = self._route(store, picker_id)
            step = self.get_step(store, picker_id) % len(route)
            point = route[step]
            logger.info(
                "Picker %s - step %d/%d - position %s, %s",
                picker_id,
                step,
                len(route) - 1,
                point.lat,
                point.lng,
            )
            self.set_step(store, picker_id, (step + 1) % len(route))

            now = utc_now_iso()
            location = PickerLocation(
                lat=point.lat,
                lng=point.lng,
                label=f"Moving to user - Step {step + 1}/{len(route)}",
                lastUpdated=now,
            )
            store.update("pickers", parse_picker_id(picker_id), {"pickerLocation": location.model_dump()})

        record = LocationRecord(pickerId=picker_id, lat=point.lat, lng=point.lng, updatedAt=now)
        return record.model_dump(exclude_none=True)

    def reset(self, store: DocumentStore, picker_id: str) -> None:
        with store.lock:
            self.set_step(store, picker_id, 0)
        logger.info("Reset route for picker %s", picker_id)


class PersistedRouteCursorStrategy(RouteCursorStrategy):
    """Same walk as ``RouteCursorStrategy`` with the cursor kept in ``meta``."""

    name = "route_persisted"

    def _steps(self, store: DocumentStore) -> Tuple[dict, dict]:
        meta = store.get_object("meta") or {}
        steps = meta.get(ROUTE_STEPS_KEY)
        return meta, (steps if isinstance(steps, dict) else {})

    def get_step(self, store: DocumentStore, picker_id: str) -> int:
        _, steps = self._steps(store)
        step = steps.get(picker_id, 0)
        return step if isinstance(step, int) and step >= 0 else 0

    def set_step(self, store: DocumentStore, picker_id: str, step: int) -> None:
        with store.lock:
            meta, steps = self._steps(store)
            steps[picker_id] = step
            meta[ROUTE_STEPS_KEY] = steps
            store.set_object("meta", meta)


class RandomWalkStrategy(LocationStrategy):
    """Jitter the picker's raw ``lat``/``lng`` in place, starting from the origin."""

    name = "random_walk"

    def __init__(self, origin: Tuple[float, float], amplitude: float, seed: int | None = None) -> None:
        self.origin = origin
        self.amplitude = amplitude
        self.rng = random.Random(seed)

    def _picker(self, store: DocumentStore, picker_id: str) -> dict:
        picker = store.get("pickers", parse_picker_id(picker_id))
        if not picker:
            raise NotFoundError("Picker not found")
        return picker

    def advance(self, store: DocumentStore, picker_id: str) -> dict:
        with store.lock:
            picker = self._picker(store, picker_id)
            lat = picker.get("lat")
            lng = picker.get("lng")
            if lat is None or lng is None:
                lat, lng = self.origin
            lat, lng = jitter(self.rng, lat, lng, self.amplitude)
            now = utc_now_iso()
            store.update("pickers", picker["id"], {"lat": lat, "lng": lng, "updatedAt": now})
        return LocationRecord(id=picker["id"], pickerId=picker["id"], lat=lat, lng=lng, updatedAt=now).model_dump()


class RandomWalkHistoryStrategy(RandomWalkStrategy):
    """Random walk that appends every position to the picker's ``locations``."""

    name = "random_walk_history"

    def advance(self, store: DocumentStore, picker_id: str) -> dict:
        with store.lock:
            picker = self._picker(store, picker_id)
            locations = picker.get("locations") or []
            if locations:
                last = Coordinate.model_validate(locations[-1])
                lat, lng = last.lat, last.lng
            else:
                lat, lng = self.origin
            lat, lng = jitter(self.rng, lat, lng, self.amplitude)
            ids = [loc.get("id") for loc in locations if isinstance(loc.get("id"), int)]
            record = LocationRecord(
                id=max(ids, default=0) + 1,
                pickerId=picker["id"],
                lat=lat,
                lng=lng,
                updatedAt=utc_now_iso(),
            ).model_dump()
            locations.append(record)
            store.update("pickers", picker["id"], {"locations": locations})
        logger.info("Picker %s moved to %s, %s (%d points)", picker_id, lat, lng, len(locations))
        return record


STRATEGIES = (
    RouteCursorStrategy.name,
    PersistedRouteCursorStrategy.name,
    RandomWalkHistoryStrategy.name,
    RandomWalkStrategy.name,
)


def build_location_strategy(settings: Settings, seed: int | None = None) -> LocationStrategy:
    """Instantiate the strategy named by ``settings.location_strategy``."""
    name = settings.location_strategy
    origin = (settings.origin_lat, settings.origin_lng)
    if name == RouteCursorStrategy.name:
        return RouteCursorStrategy()
    if name == PersistedRouteCursorStrategy.name:
        return PersistedRouteCursorStrategy()
    if name == RandomWalkHistoryStrategy.name:
        return RandomWalkHistoryStrategy(origin, settings.jitter_degrees, seed=seed)
    if name == RandomWalkStrategy.name:
        return RandomWalkStrategy(origin, settings.jitter_degrees, seed=seed)
    raise ValueError(f"Unknown LOCATION_STRATEGY {name!r}; expected one of {', '.join(STRATEGIES)}")
