"""CLI entrypoint for running the whoami API."""

from __future__ import annotations

import argparse
import logging
import socket
import sys

import uvicorn

from whoami_api.config import settings

APP_IMPORT_PATH = "whoami_api.main:app"

logger = logging.getLogger("whoami_api")


def _port_is_free(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_port(host: str, start_port: int, attempts: int) -> int | None:
    """Return the first bindable port in ``[start_port, start_port + attempts)``."""
    for offset in range(max(1, attempts)):
        port = start_port + offset
        if _port_is_free(host, port):
            return port
        logger.warning(f"Port {port} in use, trying {port + 1}...")
    return None


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the whoami API with uvicorn.")
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Host interface to bind (default: {settings.host!r}).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"First port to try (default: {settings.port}).",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level.lower(),
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Uvicorn log level.",
    )
    args = parser.parse_args()

    port = find_port(args.host, args.port, settings.port_attempts)
    if port is None:
        logger.error(f"Port {args.port} in use and max attempts reached. Exiting.")
        sys.exit(1)

    uvicorn.run(APP_IMPORT_PATH, host=args.host, port=port, log_level=args.log_level)


if __name__ == "__main__":
    main()
