from app.services.query import apply_query, embed, expand

RECORDS = [
    {"id": 1, "userId": 7, "status": "done", "weight": 3.0, "address": {"city": "Algiers"}},
    {"id": 2, "userId": 8, "status": "pending", "weight": 1.5, "address": {"city": "Oran"}},
    {"id": 3, "userId": 7, "status": "pending", "weight": None, "address": {"city": "Blida"}},
    {"id": 4, "userId": 9, "status": "pending", "weight": 7.0, "verified": True},
]


def ids(result):
    return [r["id"] for r in result.items]


def test_field_filters_compare_as_text():
    result = apply_query(RECORDS, [("userId", "7")])
    assert ids(result) == [1, 3]
    assert not result.sliced

    assert ids(apply_query(RECORDS, [("userId", "7"), ("status", "pending")])) == [3]
    assert ids(apply_query(RECORDS, [("userId", "8"), ("userId", "9")])) == [2, 4]
    assert ids(apply_query(RECORDS, [("verified", "true")])) == [4]


def test_nested_filter_and_full_text():
    assert ids(apply_query(RECORDS, [("address.city", "Oran")])) == [2]
    assert ids(apply_query(RECORDS, [("q", "bli")])) == [3]


def test_reserved_params_are_not_filters():
    assert ids(apply_query(RECORDS, [("callback", "cb"), ("_", "123")])) == [1, 2, 3, 4]


def test_sort_orders_and_missing_values_last():
    assert ids(apply_query(RECORDS, [("_sort", "weight")])) == [2, 1, 4, 3]
    assert ids(apply_query(RECORDS, [("_sort", "userId,id"), ("_order", "desc,asc")])) == [4, 2, 1, 3]


def test_slicing_reports_total():
    result = apply_query(RECORDS, [("_start", "1"), ("_end", "3")])
    assert ids(result) == [2, 3]
    assert result.total == 4
    assert result.sliced

    assert ids(apply_query(RECORDS, [("_start", "2"), ("_limit", "1")])) == [3]
    assert ids(apply_query(RECORDS, [("_page", "2"), ("_limit", "3")])) == [4]


def test_operator_filters():
    assert ids(apply_query(RECORDS, [("id_ne", "2")])) == [1, 3, 4]
    assert ids(apply_query(RECORDS, [("weight_gte", "3")])) == [1, 4]
    assert ids(apply_query(RECORDS, [("weight_lte", "3"), ("userId", "7")])) == [1]
    assert ids(apply_query(RECORDS, [("id_gte", "2"), ("id_lte", "3")])) == [2, 3]
    assert ids(apply_query(RECORDS, [("status_like", "^PEND")])) == [2, 3, 4]
    assert ids(apply_query(RECORDS, [("address.city_like", "o")])) == [2]
    # an invalid pattern is matched literally
    assert ids(apply_query(RECORDS, [("status_like", "(")])) == []


def test_page_bounds():
    result = apply_query(RECORDS, [("_page", "2"), ("_limit", "3")])
    assert (result.page, result.last_page) == (2, 2)


def test_embed_children_and_expand_parent():
    users = [{"id": 7}, {"id": 8}]
    collections = {"users": users, "pickups": [dict(r) for r in RECORDS]}

    embedded = embed([dict(u) for u in users], "users", ["pickups"], collections.get)
    assert [p["id"] for p in embedded[0]["pickups"]] == [1, 3]
    assert [p["id"] for p in embedded[1]["pickups"]] == [2]

    expanded = expand([dict(r) for r in RECORDS], ["user", "bin"], collections.get)
    assert expanded[0]["user"] == {"id": 7}
    assert "user" not in expanded[3]
    assert "bin" not in expanded[0]
