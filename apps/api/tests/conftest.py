import json

import pytest

from app.main import app
from app.services.document_store import get_store
from app.services.simulation import RouteCursorStrategy

DATASET = {
    "pickers": [
        {"id": 1, "name": "Picker One", "locations": []},
        {"id": 2, "name": "Picker Two", "lat": 36.75, "lng": 3.05},
        {"id": 3, "name": "No Route"},
    ],
    "users": [
        {"id": 7, "totalPoints": 0, "bins": [1, 3]},
        {"id": 8, "totalPoints": 5, "bins": []},
    ],
    "bins": [
        {"id": 1, "type": "Recyclable"},
        {"id": 2, "type": "Organic"},
        {"id": 3, "type": "recyclable"},
        {"id": 4, "type": "RECYCLABLE"},
    ],
    "pickups": [
        {"id": 42, "userId": 7, "status": "pending", "weight_verified": False},
        {"id": 43, "userId": 8, "status": "pending", "weight_verified": False},
        {"id": 44, "userId": 99, "status": "pending", "weight_verified": False},
    ],
    "pointsHistory": [
        {"id": 1, "userId": 8, "source": "pickup_completed", "points": 5, "date": "2026-10-01T00:00:00.000Z"},
    ],
    "pickerRoutes": {
        "1": [{"lat": 36.70, "lng": 3.05}, {"lat": 36.71, "lng": 3.06}],
        "2": [{"lat": 36.75, "lng": 3.05}, {"lat": 36.76, "lng": 3.06}, {"lat": 36.77, "lng": 3.07}],
    },
    "meta": {},
}


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "db.json"
    path.write_text(json.dumps(DATASET))
    return path


@pytest.fixture
def store(db_path):
    """Point the shared store at a fresh copy of the dataset."""
    store = get_store()
    store.load(db_path)
    yield store
    store.reset()
    store.path = None


@pytest.fixture(autouse=True)
def route_strategy():
    app.state.location_strategy = RouteCursorStrategy()
    return app.state.location_strategy
