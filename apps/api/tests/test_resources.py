import json

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_db_returns_whole_document(store):
    body = client.get("/db").json()
    assert set(body) >= {"pickers", "users", "bins", "pickups", "pointsHistory", "pickerRoutes", "meta"}


def test_list_and_get(store):
    resp = client.get("/pickups?userId=7")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [42]

    assert client.get("/users/7").json()["bins"] == [1, 3]
    assert client.get("/users/700").status_code == 404
    assert client.get("/unknown").status_code == 404


def test_pagination_header(store):
    resp = client.get("/pickups?_page=1&_limit=2")
    assert [p["id"] for p in resp.json()] == [42, 43]
    assert resp.headers["X-Total-Count"] == "3"


def test_singular_objects(store):
    routes = client.get("/pickerRoutes").json()
    assert set(routes) == {"1", "2"}

    resp = client.patch("/meta", json={"season": "autumn"})
    assert resp.status_code == 200
    assert client.get("/meta").json() == {"season": "autumn"}

    client.put("/meta", json={"version": 2})
    assert client.get("/meta").json() == {"version": 2}


def test_create_update_delete_persist(store, db_path):
    resp = client.post("/bins", json={"type": "Glass"})
    assert resp.status_code == 201
    created = resp.json()
    assert created == {"type": "Glass", "id": 5}

    resp = client.patch("/bins/5", json={"type": "Paper", "id": 77})
    assert resp.json() == {"type": "Paper", "id": 5}

    resp = client.put("/bins/5", json={"type": "Metal"})
    assert resp.json() == {"type": "Metal", "id": 5}

    saved = json.loads(db_path.read_text())
    assert saved["bins"][-1] == {"type": "Metal", "id": 5}

    assert client.delete("/bins/5").json() == {}
    assert client.delete("/bins/5").status_code == 404
    assert all(b["id"] != 5 for b in json.loads(db_path.read_text())["bins"])


def test_create_with_duplicate_id(store):
    resp = client.post("/bins", json={"id": 1, "type": "Glass"})
    assert resp.status_code == 409
    assert len(client.get("/bins").json()) == 4


def test_dedicated_bins_route_wins(store):
    # /bins is served by the catalog endpoint, which ignores field filters
    assert len(client.get("/bins?id=1").json()) == 4


def test_operator_filters_over_http(store):
    assert [p["id"] for p in client.get("/pickups?id_ne=42").json()] == [43, 44]
    assert [p["id"] for p in client.get("/pickups?id_gte=43&id_lte=43").json()] == [43]
    assert [u["id"] for u in client.get("/users?totalPoints_gte=1").json()] == [8]


def test_embed_and_expand(store):
    user = client.get("/users/7?_embed=pickups").json()
    assert [p["id"] for p in user["pickups"]] == [42]

    users = client.get("/users?_embed=pickups,pointsHistory").json()
    assert [h["points"] for h in users[1]["pointsHistory"]] == [5]

    pickups = client.get("/pickups?_expand=user").json()
    assert pickups[0]["user"]["id"] == 7
    assert "user" not in pickups[2]


def test_pagination_link_header(store):
    resp = client.get("/pickups?_page=2&_limit=1")
    links = resp.headers["Link"]
    assert '_page=1' in links and 'rel="first"' in links and 'rel="prev"' in links
    assert '_page=3' in links and 'rel="next"' in links and 'rel="last"' in links
    assert "Link" in resp.headers["Access-Control-Expose-Headers"]

    last = client.get("/pickups?_page=3&_limit=1")
    assert 'rel="next"' not in last.headers["Link"]
    assert 'rel="prev"' in last.headers["Link"]
