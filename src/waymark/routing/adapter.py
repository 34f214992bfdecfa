"""Request-scoped router binding.

An ``Adapter`` ties a router to the parts of one request URL and runs
the two routing operations against them: ``match`` (path to rule and
typed arguments) and ``build`` (endpoint name and arguments to path).
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from waymark.errors import HTTPError
from waymark.routing.builder import Builder
from waymark.routing.rule import Rule, RuleMatch

if TYPE_CHECKING:
    from waymark.routing.router import Router

logger = logging.getLogger("waymark.routing")

# View: receives the matched rule and its decoded arguments
View = Callable[[Rule, dict[str, Any]], Any]


@dataclass(frozen=True, slots=True)
class Adapter:
    """A router bound to one request's method, scheme, host, path, and query.

    Created by ``Router.bind()`` and friends. Cheap; discard after use.
    """

    router: "Router"
    method: str
    scheme: str
    host: str
    path: str
    query: str = ""

    def match(self, path: str | None = None, method: str | None = None) -> RuleMatch:
        """Match a path and method against the router's rules.

        Returns a ``RuleMatch`` on success.
        Raises ``NotFound`` if no rule matches the path.
        Raises ``MethodNotAllowed`` if rules match the path but none accepts
        the method; it carries every method those rules accept.
        """
        path = self.path if path is None else path
        method = (method or self.method).upper()
        allowed: list[str] = []

        for rule in self.router.rules:
            found = rule.pattern.fullmatch(path)
            if found is None:
                continue

            if not rule.allows(method):
                allowed.extend(m for m in rule.methods if m not in allowed)
                continue

            args = rule.convert(found)
            if args is None:
                continue

            return RuleMatch(rule=rule, args=args)

        if allowed:
            raise self.router.method_not_allowed_handler(tuple(allowed))
        raise self.router.not_found_handler()

    def dispatch(self, view: View, *, catch_http_errors: bool = False) -> Any:
        """Match, then call ``view(rule, args)`` and return its result.

        With *catch_http_errors* the ``HTTPError`` raised by matching or by
        the view is returned instead of raised.
        """
        try:
            match = self.match()
            return view(match.rule, match.args)
        except HTTPError as exc:
            if catch_http_errors:
                return exc
            raise

    def build(
        self,
        endpoint: str,
        args: Mapping[str, Any] | None = None,
        method: str | None = None,
    ) -> str | None:
        """Build a path (and query string) for *endpoint*.

        Returns ``None`` when no rule for the endpoint can be built from
        the given method and arguments. *args* is never modified.
        """
        rv = self.build_parts(endpoint, args, method)
        if rv is None:
            return None
        path, query = rv
        return f"{path}?{query}" if query else path

    def build_parts(
        self,
        endpoint: str,
        args: Mapping[str, Any] | None = None,
        method: str | None = None,
    ) -> tuple[str, str] | None:
        """Like :meth:`build` but returns ``(path, query)`` unjoined."""
        method = (method or self.method).upper()
        args = args or {}

        for rule in self.router.rules_for(endpoint):
            if not rule.buildable(method, args):
                continue
            rv = rule.build_parts(args, query_sort=self.router.config.query_sort)
            if rv is not None:
                return rv

        logger.debug("no rule for %s %s builds from %r", method, endpoint, args)
        return None

    def builder(self, endpoint: str, method: str | None = None) -> Builder:
        """Return a ``Builder`` that collects arguments for *endpoint*."""
        return Builder(self, (method or self.method).upper(), endpoint)

    def redirect(
        self,
        endpoint: str,
        args: Mapping[str, Any] | None = None,
        status: int = 303,
    ) -> HTTPError:
        """Return a redirect to *endpoint*, or an internal error if it cannot be built.

        The target is built for ``GET``, the method clients follow redirects with.
        """
        builder = self.builder(endpoint, "GET")
        for key, value in (args or {}).items():
            builder.set(key, value)

        url = builder.build()
        if url is None:
            return self.router.internal_error_handler()
        return self.router.redirect_handler(url, status)
