"""Mikrob CLI — mikrob dev / mikrob serve / mikrob routes.

Entry point for the ``mikrob`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the mikrob CLI."""
    parser = argparse.ArgumentParser(
        prog="mikrob",
        description="File-based page server: descriptors + views, served by Chirp.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # mikrob dev
    dev_parser = subparsers.add_parser(
        "dev",
        help="Start a development server that rebuilds on changes",
    )
    dev_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    dev_parser.add_argument("--host", default=None, help="Bind address")
    dev_parser.add_argument("--port", type=int, default=None, help="Bind port")

    # mikrob serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the production server",
    )
    serve_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument("--workers", type=int, default=None, help="Worker count (0=auto)")

    # mikrob routes
    routes_parser = subparsers.add_parser(
        "routes",
        help="List the routes the site registers, in order",
    )
    routes_parser.add_argument("root", nargs="?", default=".", help="Site root directory")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from mikrob import __version__

    return __version__


def _print_routes(root: str) -> None:
    from mikrob.app import list_routes

    router = list_routes(root)
    for route in router.routes:
        target = f"-> {route.page.redirect}" if route.page.redirect else str(route.page.view)
        print(f"{route.pattern}\t{route.page.file}\t{target}")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from mikrob._errors import ConfigError
    from mikrob.app import dev, serve

    try:
        if args.command == "dev":
            dev(root=args.root, host=args.host, port=args.port)
        elif args.command == "serve":
            serve(root=args.root, host=args.host, port=args.port, workers=args.workers)
        elif args.command == "routes":
            _print_routes(args.root)
    except ConfigError as exc:
        print(f"mikrob: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
