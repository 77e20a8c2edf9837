"""``armorpage dev``: development server command.

Builds the dev app from the command-line options and serves it until
interrupted.
"""

import argparse
import logging
import sys

from armorpage.config import AppConfig
from armorpage.errors import ArmorPageError


def configure_logging(level: str) -> None:
    """Send library logs to stderr at *level*."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run_dev(args: argparse.Namespace) -> None:
    """Start the dev server described by *args*.

    Configuration problems (for example a missing pounce install) are
    reported on stderr and exit with status 1.
    """
    from armorpage.server.dev import create_dev_app, run_dev_server

    configure_logging(args.log_level)

    try:
        config = AppConfig(
            host=args.host,
            port=args.port,
            public_dir=args.public,
            public_url=args.public_mount,
            log_level=args.log_level,
        )
        app = create_dev_app(args.routes, config=config, watch=args.watch)
        run_dev_server(app, config.host, config.port)
    except ArmorPageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        pass
