"""
Run the rental backend under uvicorn.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import uvicorn

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Console rental backend")
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Interface to bind",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=8000,
        help="Port to listen on",
    )
    parser.add_argument(
        "--interval-seconds",
        type=float,
        default=None,
        help="Override the booking lifecycle sweep interval",
    )
    parser.add_argument(
        "--no-lifecycle",
        action="store_true",
        help="Do not start the booking lifecycle timer",
    )
    parser.add_argument(
        "--in-memory",
        action="store_true",
        help="Use in-memory auth, profile store, storage and notifications",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    # Settings are read on import of the app module, so overrides go first.
    if args.interval_seconds is not None:
        os.environ["RENTAL_LIFECYCLE_INTERVAL_SECONDS"] = str(args.interval_seconds)
    if args.no_lifecycle:
        os.environ["RENTAL_LIFECYCLE_ENABLED"] = "false"
    if args.in_memory:
        os.environ["RENTAL_USE_IN_MEMORY_BACKENDS"] = "true"

    logger.info("Serving on %s:%d", args.host, args.port)
    uvicorn.run("rental_backend.app:app", host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
