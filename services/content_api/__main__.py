"""Run the Content API with uvicorn.

Usage:
    python -m services.content_api [--host HOST] [--port PORT]
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

import uvicorn

from app.config import PORT


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the Studio Backend content API")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument(
        "--port",
        type=int,
        default=PORT,
        help=f"Listening port (default: PORT env or {PORT})",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    uvicorn.run("services.content_api.main:app", host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
