from __future__ import annotations

"""Generate pickerRoutes for a database from pickers, users and pending pickups."""

import argparse

from app.core.config import get_settings
from app.domain.models import Coordinate
from app.services.document_store import get_store
from app.services.routes import build_picker_routes


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--db", default=settings.db_path)
    parser.add_argument("--points-per-leg", type=int, default=5)
    parser.add_argument("--dry-run", action="store_true", help="print routes without saving")
    args = parser.parse_args()

    store = get_store()
    store.load(args.db)
    origin = Coordinate(lat=settings.origin_lat, lng=settings.origin_lng)
    routes = build_picker_routes(store, origin, points_per_leg=args.points_per_leg)

    for picker_id, waypoints in routes.items():
        print(f"Picker {picker_id}: {len(waypoints)} waypoints")
    if not routes:
        print("No routes built (no pending pickups with located users).")
        return
    if args.dry_run:
        return

    existing = store.get_object("pickerRoutes") or {}
    existing.update(routes)
    store.set_object("pickerRoutes", existing)
    print(f"Saved {len(routes)} route(s) to {store.path}")


if __name__ == "__main__":
    main()
