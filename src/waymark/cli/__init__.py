"""Waymark CLI — inspect a routing table from the command line.

Entry point registered as ``waymark`` in ``pyproject.toml``::

    [project.scripts]
    waymark = "waymark.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``waymark`` command."""
    parser = argparse.ArgumentParser(
        prog="waymark",
        description="Waymark — URL routing with typed converters and reverse building.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log routing decisions to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- waymark routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List rules in match order")
    routes_parser.add_argument("router", help="Import string (e.g. myapp:router)")

    # -- waymark match ----------------------------------------------------
    match_parser = subparsers.add_parser("match", help="Match a path against the rules")
    match_parser.add_argument("router", help="Import string (e.g. myapp:router)")
    match_parser.add_argument("path", help="Request path (e.g. /users/42)")
    match_parser.add_argument("--method", default="GET", help="Request method (default: GET)")

    # -- waymark build ----------------------------------------------------
    build_parser = subparsers.add_parser("build", help="Build a URL for an endpoint")
    build_parser.add_argument("router", help="Import string (e.g. myapp:router)")
    build_parser.add_argument("endpoint", help="Endpoint name (e.g. users.show)")
    build_parser.add_argument(
        "args",
        nargs="*",
        metavar="KEY=VALUE",
        help="Arguments; integer-looking values are passed as int",
    )
    build_parser.add_argument("--method", default="GET", help="Target method (default: GET)")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from waymark.cli._routes import run_routes

        run_routes(args)
    elif args.command == "match":
        from waymark.cli._match import run_match

        run_match(args)
    elif args.command == "build":
        from waymark.cli._match import run_build

        run_build(args)
