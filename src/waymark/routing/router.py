"""Rule table with specificity ordering.

Rules are registered during setup. The router keeps two orders over
them, computed lazily after every registration and frozen for good by
``compile()``:

- match order: rules without parameters first, then longer traces, then
  ascending weight.
- build order (per endpoint name): more arguments first, then more
  defaults.

Both sorts are stable, so registration order breaks any remaining tie.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from waymark import handlers
from waymark.config import RouterConfig
from waymark.errors import WaymarkError
from waymark.routing.adapter import Adapter
from waymark.routing.converters import ConverterRegistry
from waymark.routing.rule import Rule

logger = logging.getLogger("waymark.routing")


def match_order_key(rule: Rule) -> tuple[int, int, int]:
    if not rule.arguments:
        return (0, 0, 0)
    return (1, -len(rule.trace), rule.weight)


def build_order_key(rule: Rule) -> tuple[int, int]:
    return (-len(rule.arguments), -len(rule.defaults))


class Router:
    """Routing table of compiled rules.

    Usage::

        router = Router()
        router.rule("/", "index")
        router.rule("/users/<id:int>", "users.show")
        router.compile()

        adapter = router.bind("GET", "http", "example.com", "/users/42")
        match = adapter.match()           # RuleMatch(rule, {"id": 42})
        adapter.build("users.show", {"id": 7})  # "/users/7"

    Thread safety: the lazy sort mutates the router. Call ``compile()``
    before sharing a router between threads; afterwards it is read-only.
    """

    __slots__ = (
        "_build_order",
        "_compiled",
        "_dirty",
        "_match_order",
        "_names",
        "_rules",
        "config",
        "converters",
        "internal_error_handler",
        "method_not_allowed_handler",
        "not_found_handler",
        "redirect_handler",
    )

    def __init__(self, config: RouterConfig | None = None) -> None:
        self.config = config or RouterConfig()
        self.converters = ConverterRegistry(default=self.config.default_converter)
        if self.config.int_converter != "int":
            self.converters.register("int", self.converters.lookup(self.config.int_converter))

        self.redirect_handler = handlers.redirect
        self.not_found_handler = handlers.not_found
        self.method_not_allowed_handler = handlers.method_not_allowed
        self.internal_error_handler = handlers.internal_server_error

        self._rules: list[Rule] = []
        self._names: dict[str, list[Rule]] = {}
        self._match_order: tuple[Rule, ...] = ()
        self._build_order: dict[str, tuple[Rule, ...]] = {}
        self._dirty = False
        self._compiled = False

    # -- Registration --

    def rule(
        self,
        template: str,
        endpoint: str = "",
        methods: Iterable[str] | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> Rule:
        """Create, bind, and register a rule. Returns the bound rule."""
        rule = Rule(
            template,
            endpoint,
            methods or self.config.default_methods,
            defaults,
            implicit_head=self.config.implicit_head,
        )
        return self.add(rule)

    def add(self, rule: Rule) -> Rule:
        """Bind an existing rule to this router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add rules after compilation."
            raise RuntimeError(msg)

        rule.bind(self)
        self._rules.append(rule)
        self._names.setdefault(rule.endpoint, []).append(rule)
        self._dirty = True
        logger.debug("registered %r %s", rule, ",".join(rule.methods))
        return rule

    def mount(self, prefix: str, name: str, router: "Router") -> list[WaymarkError]:
        """Register every rule of *router* under *prefix*.

        Endpoint names become ``"<name>.<endpoint>"``. Returns the errors
        of the rules that could not be registered; empty on success.
        """
        errors: list[WaymarkError] = []
        for rule in router._rules:
            try:
                self.rule(
                    prefix + rule.template,
                    f"{name}.{rule.endpoint}",
                    rule.methods,
                    rule.defaults,
                )
            except WaymarkError as exc:
                errors.append(exc)
        logger.debug("mounted %d rules at %s as %s", len(router._rules) - len(errors), prefix, name)
        return errors

    def compile(self) -> None:
        """Sort once and freeze the router. No more rules can be added."""
        self._ensure_sorted()
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    # -- Ordering --

    def _invalidate(self) -> None:
        if self._compiled:
            msg = "Cannot change rules after compilation."
            raise RuntimeError(msg)
        self._dirty = True

    def _ensure_sorted(self) -> None:
        if not self._dirty:
            return

        self._match_order = tuple(sorted(self._rules, key=match_order_key))
        self._build_order = {
            name: tuple(sorted(rules, key=build_order_key)) for name, rules in self._names.items()
        }
        self._dirty = False
        logger.debug("sorted %d rules", len(self._rules))

    @property
    def rules(self) -> tuple[Rule, ...]:
        """All rules, in match order."""
        self._ensure_sorted()
        return self._match_order

    def rules_for(self, endpoint: str) -> tuple[Rule, ...]:
        """Rules registered for *endpoint*, in build order."""
        self._ensure_sorted()
        return self._build_order.get(endpoint, ())

    @property
    def endpoints(self) -> frozenset[str]:
        return frozenset(self._names)

    # -- Binding --

    def bind(self, method: str, scheme: str, host: str, path: str, query: str = "") -> Adapter:
        """Return an adapter bound to the given URL parts."""
        return Adapter(self, method.upper(), scheme, host, path, query)

    def bind_simple(self, scheme: str, host: str) -> Adapter:
        """Return an adapter suitable for building URLs outside a request."""
        return self.bind("GET", scheme, host, "")

    def bind_to_scope(self, scope: Mapping[str, Any]) -> Adapter:
        """Return an adapter bound to an ASGI HTTP scope."""
        headers = {
            bytes(key).decode("latin-1").lower(): bytes(value).decode("latin-1")
            for key, value in scope.get("headers", ())
        }
        host = headers.get("host", "")
        server = scope.get("server")
        if not host and server:
            server_host, port = server
            host = f"{server_host}:{port}" if port is not None else server_host

        return self.bind(
            scope["method"],
            scope.get("scheme", "http"),
            host,
            scope["path"],
            bytes(scope.get("query_string", b"")).decode("latin-1"),
        )

    def __repr__(self) -> str:
        lines = "".join(f"  {rule!r}\n" for rule in self.rules)
        return f"<Router rules:[\n{lines}]>"
