"""``waymark match`` and ``waymark build`` — exercise a router by hand."""

import argparse
import sys
from typing import Any

from waymark.cli._resolve import load_router
from waymark.errors import HTTPError


def parse_pairs(pairs: list[str]) -> dict[str, Any]:
    """Parse ``key=value`` pairs; all-digit values become ints."""
    rv: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"expected KEY=VALUE, got {pair!r}"
            raise ValueError(msg)
        rv[key] = int(value) if value.isascii() and value.isdigit() else value
    return rv


def run_match(args: argparse.Namespace) -> None:
    router = load_router(args.router)
    adapter = router.bind(args.method, "http", "localhost", args.path)
    try:
        match = adapter.match()
    except HTTPError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"{match.rule.endpoint or '-'}  {match.rule.template}")
    for key, value in match.args.items():
        print(f"  {key} = {value!r}")


def run_build(args: argparse.Namespace) -> None:
    router = load_router(args.router)
    try:
        values = parse_pairs(args.args)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    url = router.bind_simple("http", "localhost").build(args.endpoint, values, args.method)
    if url is None:
        print(f"Error: cannot build {args.method} {args.endpoint} from {values!r}", file=sys.stderr)
        raise SystemExit(1)
    print(url)
