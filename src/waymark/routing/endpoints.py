"""Endpoint registry — endpoint name to handler, resolved at startup.

Mirrors the ``Router`` + ``Rule`` pattern: ``Endpoint`` is the frozen
definition, ``EndpointRegistry`` collects them during setup and checks
them against a router once, in ``freeze()``. After that, dispatch is a
dict lookup.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from waymark._internal.types import Handler
from waymark.errors import ConfigurationError, HTTPError

if TYPE_CHECKING:
    from waymark.routing.adapter import Adapter
    from waymark.routing.router import Router
    from waymark.routing.rule import Rule

logger = logging.getLogger("waymark.routing")


@dataclass(frozen=True, slots=True)
class Endpoint:
    """A frozen endpoint definition."""

    name: str
    handler: Handler


class EndpointRegistry:
    """Maps endpoint names to handlers.

    Usage::

        endpoints = EndpointRegistry()

        @endpoints.register("users.show")
        def show_user(id: int) -> str:
            return f"user {id}"

        endpoints.freeze(router)
        endpoints.dispatch(router.bind("GET", "http", "localhost", "/users/4"))

    Handlers are called with the decoded path arguments as keyword
    arguments.
    """

    __slots__ = ("_endpoints", "_frozen")

    def __init__(self) -> None:
        self._endpoints: dict[str, Endpoint] = {}
        self._frozen = False

    def add(self, name: str, handler: Handler) -> None:
        if self._frozen:
            msg = "Cannot add endpoints after freeze."
            raise RuntimeError(msg)
        if name in self._endpoints:
            msg = f"Duplicate endpoint name: {name!r}"
            raise ConfigurationError(msg)
        self._endpoints[name] = Endpoint(name=name, handler=handler)

    def register(self, name: str):
        """Decorator form of :meth:`add`."""

        def decorator(handler: Handler) -> Handler:
            self.add(name, handler)
            return handler

        return decorator

    def freeze(self, router: "Router") -> None:
        """Compile *router* and check every endpoint it names has a handler.

        Raises ``ConfigurationError`` listing the endpoints without one.
        """
        router.compile()
        missing = sorted(router.endpoints - self._endpoints.keys())
        if missing:
            msg = f"No handler registered for endpoints: {', '.join(missing)}"
            raise ConfigurationError(msg)
        self._frozen = True

    def get(self, name: str) -> Endpoint | None:
        return self._endpoints.get(name)

    def dispatch(self, adapter: "Adapter", *, catch_http_errors: bool = False) -> Any:
        """Match *adapter* and call the endpoint's handler.

        Unexpected handler exceptions are logged and replaced by the
        router's internal error.
        """
        if not self._frozen:
            msg = "EndpointRegistry.freeze() must be called before dispatch."
            raise RuntimeError(msg)

        def view(rule: "Rule", args: dict[str, Any]) -> Any:
            handler = self._endpoints[rule.endpoint].handler
            try:
                return handler(**args)
            except HTTPError:
                raise
            except Exception as exc:
                logger.exception("endpoint %r failed", rule.endpoint)
                raise adapter.router.internal_error_handler() from exc

        return adapter.dispatch(view, catch_http_errors=catch_http_errors)

    def __len__(self) -> int:
        return len(self._endpoints)

    def __contains__(self, name: object) -> bool:
        return name in self._endpoints
