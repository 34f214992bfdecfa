"""Shared type aliases used across waymark modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Endpoint handler: user-defined function receiving decoded path arguments
Handler: TypeAlias = Callable[..., Any]
