from __future__ import annotations

import argparse
import logging

from werkzeug.serving import make_server

from .config import SERVER_DEBUG, SERVER_HOST, SERVER_PORT
from .web import create_app


def _setup_logging(debug: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if debug else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Terminus activities web server")
    parser.add_argument("--host", default=SERVER_HOST, help="Interface to bind")
    parser.add_argument("--port", type=int, default=SERVER_PORT, help="Port to bind")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=SERVER_DEBUG,
        help="Enable debug logging",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    _setup_logging(args.debug)
    app = create_app()
    # One thread per request; the activity cache handles concurrent access.
    server = make_server(args.host, args.port, app, threaded=True)
    logging.info("Server started at http://%s:%s", args.host, args.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logging.info("Shutting down")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
