from __future__ import annotations

"""Generic CRUD over every top-level key of the document, json-server style.

Included last so the dedicated endpoints take precedence.
"""

from typing import List

from fastapi import APIRouter, Body, Request, Response
from fastapi.responses import JSONResponse

from app.services.document_store import DocumentStore, get_store
from app.services.query import QueryResult, apply_query, embed, expand

router = APIRouter(tags=["resources"])


def _not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={})


def _body(payload: dict | None) -> dict:
    return payload if isinstance(payload, dict) else {}


def _with_relations(store: DocumentStore, name: str, records: List[dict], request: Request) -> List[dict]:
    """Apply ``_embed`` / ``_expand`` (repeatable, or comma-separated)."""

    def lookup(collection: str) -> List[dict] | None:
        return store.list(collection) if store.is_collection(collection) else None

    def names(param: str) -> List[str]:
        return [n for raw in request.query_params.getlist(param) for n in raw.split(",") if n]

    embed(records, name, names("_embed"), lookup)
    expand(records, names("_expand"), lookup)
    return records


def _page_links(request: Request, result: QueryResult) -> str:
    """RFC 8288 ``Link`` header with first/prev/next/last pages."""
    pages = {}
    if result.page > 1:
        pages["first"] = 1
        pages["prev"] = min(result.page - 1, result.last_page)
    if result.page < result.last_page:
        pages["next"] = result.page + 1
        pages["last"] = result.last_page
    return ", ".join(
        f'<{request.url.include_query_params(_page=page)}>; rel="{rel}"' for rel, page in pages.items()
    )


@router.get("/{name}")
def list_resource(name: str, request: Request, response: Response):
    store = get_store()
    if not store.has(name):
        return _not_found()
    if not store.is_collection(name):
        return store.get_object(name)

    result = apply_query(store.list(name), request.query_params.multi_items())
    if result.sliced:
        response.headers["X-Total-Count"] = str(result.total)
        exposed = ["X-Total-Count"]
        if result.page is not None:
            links = _page_links(request, result)
            if links:
                response.headers["Link"] = links
                exposed.append("Link")
        response.headers["Access-Control-Expose-Headers"] = ", ".join(exposed)
    return _with_relations(store, name, result.items, request)


@router.get("/{name}/{item_id}")
def get_resource(name: str, item_id: str, request: Request):
    store = get_store()
    item = store.get(name, item_id)
    if item is None:
        return _not_found()
    return _with_relations(store, name, [item], request)[0]


@router.post("/{name}", status_code=201)
def create_resource(name: str, payload: dict | None = Body(default=None)):
    store = get_store()
    if not store.has(name):
        return _not_found()
    if not store.is_collection(name):
        return store.set_object(name, _body(payload))
    body = _body(payload)
    with store.lock:
        if body.get("id") is not None and store.get(name, body["id"]) is not None:
            return JSONResponse(status_code=409, content={"message": f"Insert failed, duplicate id {body['id']}"})
        return store.insert(name, body)


@router.put("/{name}")
def replace_object(name: str, payload: dict | None = Body(default=None)):
    store = get_store()
    if not store.has(name) or store.is_collection(name):
        return _not_found()
    return store.set_object(name, _body(payload))


@router.patch("/{name}")
def patch_object(name: str, payload: dict | None = Body(default=None)):
    store = get_store()
    if not store.has(name) or store.is_collection(name):
        return _not_found()
    return store.set_object(name, _body(payload), merge=True)


@router.put("/{name}/{item_id}")
def replace_resource(name: str, item_id: str, payload: dict | None = Body(default=None)):
    store = get_store()
    if not store.is_collection(name):
        return _not_found()
    item = store.replace(name, item_id, _body(payload))
    return item if item is not None else _not_found()


@router.patch("/{name}/{item_id}")
def patch_resource(name: str, item_id: str, payload: dict | None = Body(default=None)):
    store = get_store()
    if not store.is_collection(name):
        return _not_found()
    changes = {k: v for k, v in _body(payload).items() if k != "id"}
    item = store.update(name, item_id, changes)
    return item if item is not None else _not_found()


@router.delete("/{name}/{item_id}")
def delete_resource(name: str, item_id: str):
    store = get_store()
    if not store.is_collection(name) or not store.delete(name, item_id):
        return _not_found()
    return {}
