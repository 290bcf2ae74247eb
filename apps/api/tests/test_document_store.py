import json

from app.services.document_store import DocumentStore


def test_load_creates_missing_file(tmp_path):
    path = tmp_path / "nested" / "db.json"
    store = DocumentStore()
    store.load(path)

    assert path.exists()
    saved = json.loads(path.read_text())
    assert saved["pickers"] == []
    assert saved["pickerRoutes"] == {}


def test_load_fills_missing_collections(tmp_path):
    path = tmp_path / "db.json"
    path.write_text(json.dumps({"users": [{"id": 1}]}))
    store = DocumentStore()
    store.load(path)

    assert store.list("users") == [{"id": 1}]
    assert store.list("pointsHistory") == []
    assert store.get_object("meta") == {}


def test_writes_are_persisted(store, db_path):
    store.update("users", 7, {"totalPoints": 12})
    created = store.insert("bins", {"type": "Glass"})

    saved = json.loads(db_path.read_text())
    assert next(u for u in saved["users"] if u["id"] == 7)["totalPoints"] == 12
    assert created["id"] == 5
    assert saved["bins"][-1] == {"type": "Glass", "id": 5}


def test_ids_match_across_types(store):
    assert store.get("users", "7")["id"] == 7
    assert store.get("users", 7)["id"] == 7
    assert store.get("users", "nope") is None


def test_reads_are_copies(store):
    user = store.get("users", 7)
    user["totalPoints"] = 1000
    assert store.get("users", 7)["totalPoints"] == 0


def test_replace_keeps_id_and_delete(store):
    replaced = store.replace("bins", 2, {"id": 99, "type": "Paper"})
    assert replaced == {"id": 2, "type": "Paper"}

    assert store.delete("bins", 2) is True
    assert store.delete("bins", 2) is False
    assert store.get("bins", 2) is None


def test_next_id_ignores_non_numeric(tmp_path):
    path = tmp_path / "db.json"
    path.write_text(json.dumps({"notes": [{"id": "abc"}, {"id": 4}, {"id": True}]}))
    store = DocumentStore()
    store.load(path)
    assert store.next_id("notes") == 5


def test_set_object_merge(store):
    store.set_object("meta", {"a": 1})
    merged = store.set_object("meta", {"b": 2}, merge=True)
    assert merged == {"a": 1, "b": 2}
