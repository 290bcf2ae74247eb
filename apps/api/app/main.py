from __future__ import annotations

import logging
import re

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router as api_router
from app.core.config import get_settings
from app.core.errors import NotFoundError, RouteResetUnsupported
from app.core.logging import setup_logging
from app.services.document_store import get_store
from app.services.simulation import build_location_strategy

logger = logging.getLogger(__name__)

_CALLBACK_UNSAFE = re.compile(r"[^\[\]\w$.]")


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={exc.key: exc.message})


async def reset_unsupported_handler(request: Request, exc: RouteResetUnsupported) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": str(exc)})


async def jsonp(request: Request, call_next):
    """Wrap JSON responses in ``callback(...)`` when ``?callback=`` is given."""
    response = await call_next(request)
    callback = _CALLBACK_UNSAFE.sub("", request.query_params.get("callback", ""))
    if not callback or not response.headers.get("content-type", "").startswith("application/json"):
        return response

    body = b"".join([chunk async for chunk in response.body_iterator])
    headers = {
        k: v for k, v in response.headers.items() if k.lower() not in ("content-length", "content-type")
    }
    headers["X-Content-Type-Options"] = "nosniff"
    script = f"/**/ typeof {callback} === 'function' && {callback}({body.decode('utf-8')});"
    return Response(
        content=script,
        status_code=response.status_code,
        headers=headers,
        media_type="text/javascript; charset=utf-8",
    )


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(title="Pickup Tracker Mock API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(jsonp)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(RouteResetUnsupported, reset_unsupported_handler)

    get_store().load(settings.db_path)
    app.state.location_strategy = build_location_strategy(settings)
    logger.info("Location strategy: %s", app.state.location_strategy.name)

    app.include_router(api_router)
    return app


app = create_app()
