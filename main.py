#!/usr/bin/env python3
"""
Zela API -- registration, token login and platform statistics over HTTP.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 127.0.0.1 --reload

Environment variables:
  DATABASE_URL          Required. SQLAlchemy URL, e.g. postgresql://user:pw@host/db
                        (postgres:// is accepted and rewritten).
  JWT_SECRET            Required. At least 32 characters. Signs every token.
  PORT                  Listening port. Default 3001.
  HOST                  Listening interface. Default 0.0.0.0.
  TOKEN_EXPIRE_SECONDS  Token lifetime. Default 86400 (24 hours).
  LOG_LEVEL             Root log level. Default INFO.
"""

import argparse
import logging
import sys

import uvicorn
from pydantic import ValidationError

from core.config import get_settings

logger = logging.getLogger("zela.main")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Zela API server.")
    parser.add_argument("--host", help="Interface to bind (overrides HOST).")
    parser.add_argument("--port", type=int, help="Port to listen on (overrides PORT).")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only).")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s %(message)s")

    # Validate configuration before uvicorn starts so a missing secret fails
    # with a readable message instead of a lifespan traceback.
    try:
        settings = get_settings()
    except ValidationError as exc:
        for err in exc.errors():
            logger.error("Configuration error: %s", err["msg"])
        return 1

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Zela API listening on port %d", port)
    uvicorn.run("api.main:app", host=host, port=port, reload=args.reload, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
