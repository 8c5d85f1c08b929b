#!/usr/bin/env python3
"""Launch the news gateway API with uvicorn."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Sequence

import uvicorn

ROOT_DIR = Path(__file__).resolve().parents[1]
UVICORN_APP = "src.news_gateway.api.server:app"


def check_env_vars() -> list[str]:
    """Return required environment variables that are not set."""
    required = ["GUARDIAN_API_KEY"]
    return [var for var in required if not os.environ.get(var)]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: %(default)s)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: %(default)s)")
    parser.add_argument("--reload", action="store_true", help="Reload on source changes")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    missing = check_env_vars()
    if missing:
        print(f"[env] Missing environment variables: {', '.join(missing)}")
        print("[env] Upstream calls will fail until they are set (see .env).")

    # uvicorn resolves "src.news_gateway..." relative to the project root
    sys.path.insert(0, str(ROOT_DIR))
    os.chdir(ROOT_DIR)
    print(f"[api] Starting {UVICORN_APP} on http://{args.host}:{args.port}")
    uvicorn.run(UVICORN_APP, host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
