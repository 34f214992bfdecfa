"""Locate the ``Router`` a CLI command operates on."""

import importlib
import sys

from waymark.routing.router import Router


def resolve_router(import_string: str) -> Router:
    """Return the router named by ``"module:attribute"``.

    The attribute defaults to ``router``. A callable is treated as a
    factory and called with no arguments.
    """
    module_path, _, attr_name = import_string.partition(":")
    obj = getattr(importlib.import_module(module_path), attr_name or "router")

    if callable(obj):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"{import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Router):
        msg = f"{import_string!r} is {type(obj).__name__}, not a waymark.Router instance"
        raise TypeError(msg)
    return obj


def load_router(import_string: str) -> Router:
    """Resolve and report failures as a CLI error (exit status 1)."""
    try:
        return resolve_router(import_string)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
