from __future__ import annotations

"""Filtering, search, sorting, pagination and relations over collection records."""

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Tuple

from app.services.document_store import same_id

RESERVED_PARAMS = {"q", "callback"}
OPERATORS = ("_gte", "_lte", "_ne", "_like")


@dataclass
class QueryResult:
    items: List[dict]
    total: int
    sliced: bool
    page: int | None = None
    last_page: int | None = None


def _to_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _matches_text(value: Any, needle: str) -> bool:
    if isinstance(value, dict):
        return any(_matches_text(v, needle) for v in value.values())
    if isinstance(value, list):
        return any(_matches_text(v, needle) for v in value)
    if value is None or isinstance(value, bool):
        return False
    return needle in str(value).lower()


def _field_value(record: dict, path: str) -> Any:
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _sort_key(value: Any) -> Tuple[int, Any]:
    # missing values last, numbers before strings
    if value is None:
        return (2, "")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    return (1, _as_text(value))


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _compare(value: Any, wanted: str) -> int:
    """Sign of ``value - wanted``: numerically when both are numbers, else as text."""
    left, right = _as_number(value), _as_number(wanted)
    if left is None or right is None:
        left, right = _as_text(value), wanted
    return (left > right) - (left < right)


def _like(value: Any, pattern: str) -> bool:
    try:
        regex = re.compile(pattern, re.IGNORECASE)
    except re.error:
        regex = re.compile(re.escape(pattern), re.IGNORECASE)
    return regex.search(_as_text(value)) is not None


def _split_operator(key: str) -> Tuple[str, str]:
    for op in OPERATORS:
        if key.endswith(op) and len(key) > len(op):
            return key[: -len(op)], op
    return key, ""


def _matches(record: dict, field: str, op: str, values: List[str]) -> bool:
    """A record matches when any of the values satisfies the operator."""
    value = _field_value(record, field)
    if op == "_ne":
        return value is None or any(_as_text(value) != v for v in values)
    if value is None:
        return False
    if op == "_gte":
        return any(_compare(value, v) >= 0 for v in values)
    if op == "_lte":
        return any(_compare(value, v) <= 0 for v in values)
    if op == "_like":
        return any(_like(value, v) for v in values)
    return _as_text(value) in values


def apply_query(records: List[dict], params: Iterable[Tuple[str, str]]) -> QueryResult:
    """Apply json-server style query parameters to ``records``.

    ``field=value`` filters by string equality; ``field_ne``, ``field_gte``,
    ``field_lte`` and ``field_like`` (case-insensitive regex) compare instead.
    A repeated key matches any of its values and dotted names reach into
    nested objects. ``q`` is a case-insensitive full-text search,
    ``_sort``/``_order`` sort (comma-separated for several keys), and
    ``_start``/``_end``/``_limit`` or ``_page``/``_limit`` slice. Other
    ``_``-prefixed params are left to the caller.
    """
    filters: Dict[Tuple[str, str], List[str]] = {}
    options: dict[str, str] = {}
    text: str | None = None
    for key, value in params:
        if key == "q":
            text = value.lower()
        elif key.startswith("_"):
            options[key] = value
        elif key not in RESERVED_PARAMS:
            filters.setdefault(_split_operator(key), []).append(value)

    items = [
        r
        for r in records
        if all(_matches(r, field, op, values) for (field, op), values in filters.items())
    ]
    if text:
        items = [r for r in items if _matches_text(r, text)]

    sort_fields = [f for f in options.get("_sort", "").split(",") if f]
    orders = [o.lower() for o in options.get("_order", "").split(",")]
    # stable sort applied from the least significant key
    for idx in reversed(range(len(sort_fields))):
        descending = idx < len(orders) and orders[idx] == "desc"
        items.sort(key=lambda r, f=sort_fields[idx]: _sort_key(_field_value(r, f)), reverse=descending)

    total = len(items)
    start = _to_int(options.get("_start"))
    end = _to_int(options.get("_end"))
    limit = _to_int(options.get("_limit"))
    page = _to_int(options.get("_page"))

    if page is not None:
        per_page = limit if limit and limit > 0 else 10
        page = max(page, 1)
        last_page = max(1, math.ceil(total / per_page))
        return QueryResult(items[(page - 1) * per_page : page * per_page], total, True, page, last_page)
    if start is not None or end is not None or limit is not None:
        lo = start or 0
        if end is not None:
            hi = end
        elif limit is not None:
            hi = lo + limit
        else:
            hi = total
        return QueryResult(items[lo:hi], total, True)
    return QueryResult(items, total, False)


def singular(name: str) -> str:
    return name[:-1] if name.endswith("s") else name


def embed(
    records: List[dict],
    name: str,
    children: Iterable[str],
    lookup: Callable[[str], List[dict] | None],
) -> List[dict]:
    """Attach child collections pointing back through ``<singular>Id``.

    ``_embed=pickups`` on ``users`` adds each user's pickups (``userId``).
    Unknown collections are skipped.
    """
    foreign_key = f"{singular(name)}Id"
    for child in children:
        rows = lookup(child)
        if rows is None:
            continue
        for record in records:
            record[child] = [row for row in rows if same_id(row.get(foreign_key), record.get("id"))]
    return records


def expand(
    records: List[dict],
    parents: Iterable[str],
    lookup: Callable[[str], List[dict] | None],
) -> List[dict]:
    """Attach the parent record referenced by ``<parent>Id``.

    ``_expand=user`` on ``pickups`` adds ``user`` from ``users``. Records whose
    parent is missing are left without the key.
    """
    for parent in parents:
        rows = lookup(f"{parent}s")
        if rows is None:
            rows = lookup(parent)
        if rows is None:
            continue
        for record in records:
            ref = record.get(f"{parent}Id")
            match = next((row for row in rows if same_id(row.get("id"), ref)), None)
            if match is not None:
                record[parent] = match
    return records
