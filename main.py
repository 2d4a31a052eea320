#!/usr/bin/env python3
"""
Chirpy -- users, sessions and short messages over HTTP.

Usage:
  python main.py
  python main.py --host 0.0.0.0 --port 8080
  python main.py --reload

Environment variables (see core/config.py for the full list):
  SECRET_KEY   Required unless DEBUG=true. At least 32 characters.
  PLATFORM     "dev" enables POST /admin/reset.
  POLKA_KEY    Shared key for the Polka upgrade webhook.
  DATABASE_URL SQLAlchemy URL. Defaults to ./chirpy.db.
"""

import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Chirpy API server.")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8080, help="Port (default: 8080)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development only)")
    args = parser.parse_args()

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
