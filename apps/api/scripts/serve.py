from __future__ import annotations

"""Run the mock API with uvicorn on $PORT (default 10000)."""

import argparse

import uvicorn

from app.core.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    print(f"Pickup tracker mock API on http://{args.host}:{args.port} (db: {settings.db_path})")
    uvicorn.run("app.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
