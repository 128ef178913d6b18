"""
Run the deck asset API under uvicorn.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from deck_api.config import get_settings

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Deck asset API server")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument(
        "--port", type=int, default=settings.port, help="Port to listen on"
    )
    parser.add_argument(
        "--reload", action="store_true", help="Reload on source changes"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Server running at http://localhost:%d", args.port)
    uvicorn.run(
        "deck_api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
