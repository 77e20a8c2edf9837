"""ArmorPage CLI: the file-routed pages dev server.

Entry point registered as ``armorpage`` in ``pyproject.toml``::

    [project.scripts]
    armorpage = "armorpage.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``armorpage`` command."""
    parser = argparse.ArgumentParser(
        prog="armorpage",
        description="ArmorPage: file-routed HTML pages with SPA navigation.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- armorpage dev ----------------------------------------------------
    dev_parser = subparsers.add_parser("dev", help="Start the development server")
    dev_parser.add_argument("--routes", default="./routes", help="Routes directory")
    dev_parser.add_argument("--host", default="localhost", help="Bind host address")
    dev_parser.add_argument("--port", type=int, default=3000, help="Bind port number")
    dev_parser.add_argument("--public", default="./public", help="Static files directory")
    dev_parser.add_argument(
        "--public-mount",
        default="/public",
        help="URL prefix for static files",
    )
    dev_parser.add_argument(
        "--no-watch",
        dest="watch",
        action="store_false",
        help="Disable rescanning routes on file changes",
    )
    dev_parser.add_argument(
        "--log-level",
        default="info",
        choices=("debug", "info", "warning", "error"),
        help="Logging level",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "dev":
        from armorpage.cli._dev import run_dev

        run_dev(args)
