"""
Command line entry point: ``python -m life_tracker``.

Starts the development server (debugger and reloader disabled), or the
terminal front end with ``--console``.
"""

from __future__ import annotations

import argparse
import logging
import os
import socket
import sys

from . import config
from .console import run_console
from .routes import create_app

logger = logging.getLogger(__name__)


def _find_free_port() -> int:
    env_port = os.environ.get("PORT")
    if env_port:
        try:
            port = int(env_port)
            if 0 <= port <= 65535:
                return port
        except ValueError:
            logger.warning("Ignoring invalid PORT %r", env_port)
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Personal health and finance tracker.")
    parser.add_argument(
        "--database",
        help="SQLAlchemy database URL to use (defaults to TRACKER_DATABASE_URL or sqlite:///tracker.db).",
    )
    parser.add_argument(
        "--host",
        help="Host interface for the development server. Defaults to HOST env var or 127.0.0.1.",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port for the development server. Defaults to PORT env var or an ephemeral port.",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Use the interactive terminal front end instead of the web server.",
    )
    parser.add_argument(
        "--user",
        help="User id for the terminal front end (needed for bank accounts and bills).",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (defaults to TRACKER_LOG_LEVEL or INFO).",
    )

    args = parser.parse_args(argv)
    config.setup_logging(args.log_level)
    app = create_app(db_url=args.database)

    if args.console:
        store = app.config["_STORE"]
        try:
            run_console(store, args.user, tz=config.resolve_timezone(config.TIMEZONE))
        finally:
            store.close()
        return

    host = args.host or os.environ.get("HOST", "127.0.0.1")
    port = args.port if args.port is not None else _find_free_port()

    try:
        print(f"Starting server on http://{host}:{port}")
        app.run(host=host, port=port, debug=False, use_reloader=False, threaded=False)
    except SystemExit:
        print(
            "\n[!] Server failed to start (SystemExit). This environment may block sockets or the port is unavailable."
        )
        print("    - Try setting a custom port: PORT=5000 python -m life_tracker")
        print("    - Or use the terminal front end: python -m life_tracker --console")
        sys.exit(0)


if __name__ == "__main__":
    main()
