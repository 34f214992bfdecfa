"""Rule compilation, matching, and building.

A ``Rule`` is one path template bound to an endpoint name. Binding it to
a router compiles the template into an anchored regex, a weight used for
ordering, and a trace of literal and parameter segments used to build
URLs back from arguments.

Valid parameters are in the form::

    <var>
    <var:converter>
    <var:converter(arg1=val1,arg2=val2)>
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from waymark.errors import (
    ConversionError,
    ConverterArgumentError,
    ConverterArgumentsError,
    ConverterDelimiterError,
    DuplicateVariableError,
    EmptyVariableError,
    InvalidConverterArguments,
    LeadingSlashError,
    RuleAlreadyBound,
    RuleCompileError,
    RuleNotBound,
    VariableDelimiterError,
)
from waymark.routing.converters import Converter

if TYPE_CHECKING:
    from waymark.routing.router import Router

logger = logging.getLogger("waymark.routing")


@dataclass(frozen=True, slots=True)
class TraceSegment:
    """A compiled segment of a rule template.

    Static:  ``/users``  (is_param=False, value="users")
    Param:   ``/<id>``   (is_param=True, value="id")
    """

    value: str
    is_param: bool = False


@dataclass(frozen=True, slots=True)
class RuleMatch:
    """Result of a successful match: the rule and its decoded arguments."""

    rule: "Rule"
    args: dict[str, Any]


def split_path(path: str) -> list[str]:
    """Split a path on ``/``, dropping one leading and one trailing empty part.

    ``/a/b/`` and ``/a/b`` split identically; ``/`` yields no segments.
    """
    parts = path.split("/")
    if parts and parts[0] == "":
        parts = parts[1:]
    if parts and parts[-1] == "":
        parts = parts[:-1]
    return parts


def parse_param(template: str, segment: str) -> tuple[str, str | None, dict[str, str]]:
    """Parse ``<name:converter(args)>`` into (name, converter key, args).

    The converter key is ``None`` when the segment names no converter.
    """
    if len(segment) < 3:
        raise EmptyVariableError(template, segment)

    if segment[0] != "<" or segment[-1] != ">":
        raise VariableDelimiterError(template, segment)

    name, sep, converter = segment[1:-1].partition(":")
    if not name:
        raise EmptyVariableError(template, segment)
    if not sep:
        return name, None, {}

    key, args = parse_converter(template, segment, converter)
    return name, key, args


def parse_converter(template: str, segment: str, converter: str) -> tuple[str, dict[str, str]]:
    key, paren, more = converter.partition("(")
    if not paren:
        return key, {}

    if not more or not more.endswith(")"):
        raise ConverterDelimiterError(template, segment)

    arguments = more[:-1]
    if "(" in arguments or ")" in arguments:
        raise ConverterDelimiterError(template, segment)

    return key, parse_arguments(template, segment, arguments)


def parse_arguments(template: str, segment: str, arguments: str) -> dict[str, str]:
    """Parse ``k1=v1,k2=v2`` into a dict.

    Every piece must be exactly one non-empty key and one non-empty value.
    """
    args: dict[str, str] = {}
    if not arguments:
        return args

    for piece in arguments.split(","):
        key, sep, value = piece.partition("=")
        if not sep or not key or not value or "=" in value:
            raise ConverterArgumentsError(template, segment)
        args[key] = value

    return args


def normalize_methods(methods: Iterable[str] | None, *, implicit_head: bool = True) -> tuple[str, ...]:
    """Upper-case and de-duplicate methods, keeping first-seen order.

    Defaults to ``GET``; ``HEAD`` is appended when ``GET`` is present.
    """
    rv: list[str] = []
    for method in methods or ("GET",):
        method = method.upper()
        if method not in rv:
            rv.append(method)
    if not rv:
        rv.append("GET")
    if implicit_head and "GET" in rv and "HEAD" not in rv:
        rv.append("HEAD")
    return tuple(rv)


class Rule:
    """A path template bound to an endpoint.

    Usage::

        rule = Rule("/users/<id:int>", "users.show", ["GET"])
        router.add(rule)
        rule.match("/users/42")  # {"id": 42}
        rule.build({"id": 42})   # "/users/42"

    Compilation happens once, when the rule is bound to a router. After
    that the pattern, trace, and weight never change.
    """

    __slots__ = (
        "_pattern",
        "_router",
        "arguments",
        "converters",
        "defaults",
        "endpoint",
        "methods",
        "template",
        "trace",
        "weight",
    )

    def __init__(
        self,
        template: str,
        endpoint: str = "",
        methods: Iterable[str] | None = None,
        defaults: Mapping[str, Any] | None = None,
        *,
        implicit_head: bool = True,
    ) -> None:
        if not template or template[0] != "/":
            raise LeadingSlashError(template)

        self.template = template
        self.endpoint = endpoint
        self.methods = normalize_methods(methods, implicit_head=implicit_head)
        self.defaults: dict[str, Any] = dict(defaults or {})

        self._router: Router | None = None
        self._pattern: re.Pattern[str] | None = None
        self.arguments: tuple[str, ...] = ()
        self.converters: dict[str, Converter] = {}
        self.trace: tuple[TraceSegment, ...] = ()
        self.weight = 0

    @property
    def router(self) -> "Router | None":
        return self._router

    @property
    def pattern(self) -> re.Pattern[str]:
        if self._pattern is None:
            msg = f"{self!r} has not been compiled"
            raise RuleNotBound(msg)
        return self._pattern

    def set_defaults(self, defaults: Mapping[str, Any]) -> "Rule":
        """Replace the rule's default arguments. Returns the rule for chaining."""
        if self._router is not None:
            self._router._invalidate()
        self.defaults = dict(defaults)
        return self

    def allows(self, method: str) -> bool:
        return method.upper() in self.methods

    # -- Binding --

    def bind(self, router: "Router") -> None:
        """Bind to *router* and compile. A rule binds exactly once."""
        if self._router is not None:
            msg = f"{self!r} is already bound"
            raise RuleAlreadyBound(msg)

        self._router = router
        try:
            self.compile()
        except Exception:
            self._router = None
            raise

    def compile(self) -> None:
        if self._router is None:
            msg = f"{self!r} must be bound before compiling"
            raise RuleNotBound(msg)
        if self._pattern is not None:
            return

        registry = self._router.converters
        parts: list[str] = []
        trace: list[TraceSegment] = []
        converters: dict[str, Converter] = {}
        weight = 0

        for segment in split_path(self.template):
            if segment.startswith("<"):
                name, key, args = parse_param(self.template, segment)
                if name in converters:
                    raise DuplicateVariableError(self.template, segment)

                try:
                    converter = registry.create(key, args)
                except ConverterArgumentError as exc:
                    raise InvalidConverterArguments(self.template, segment) from exc
                if converter is None:
                    raise InvalidConverterArguments(self.template, segment)

                parts.append(f"(?P<{name}>{converter.regex})")
                trace.append(TraceSegment(name, is_param=True))
                converters[name] = converter
                weight += converter.weight
                continue

            parts.append(re.escape(segment))
            trace.append(TraceSegment(segment))
            weight -= len(segment)

        source = "^/{}$".format("/".join(parts))
        try:
            pattern = re.compile(source)
        except re.error as exc:
            msg = f"pattern {source!r} for {self.template!r} failed to compile: {exc}"
            raise RuleCompileError(msg) from exc

        self._pattern = pattern
        self.arguments = tuple(converters)
        self.converters = converters
        self.trace = tuple(trace)
        self.weight = weight
        logger.debug("compiled %s as %s (weight %d)", self.template, source, weight)

    # -- Matching --

    def convert(self, match: re.Match[str]) -> dict[str, Any] | None:
        """Decode the captures of *match*; ``None`` if any converter refuses."""
        rv: dict[str, Any] = {}
        for name, raw in match.groupdict().items():
            try:
                rv[name] = self.converters[name].to_python(raw)
            except ConversionError as exc:
                logger.debug("%s rejected %s=%r: %s", self.template, name, raw, exc)
                return None
        return rv

    def match(self, path: str) -> dict[str, Any] | None:
        """Return decoded arguments if *path* matches this rule, else ``None``."""
        match = self.pattern.fullmatch(path)
        if match is None:
            return None
        return self.convert(match)

    # -- Building --

    def buildable(self, method: str, args: Mapping[str, Any]) -> bool:
        """Whether this rule can build a URL for *method* and *args*.

        Every argument must come from *args* or the defaults, and any
        default that *args* also supplies must agree with it.
        """
        if not self.allows(method):
            return False

        for key in self.arguments:
            if key not in self.defaults and key not in args:
                return False

        for key, value in self.defaults.items():
            if key in args and args[key] != value:
                return False

        return True

    def build(self, args: Mapping[str, Any], *, query_sort: bool = True) -> str | None:
        """Render this rule's path from *args*.

        Arguments not consumed by the path are appended as a query string.
        Returns ``None`` if a converter refuses a value.
        """
        rv = self.build_parts(args, query_sort=query_sort)
        if rv is None:
            return None
        path, query = rv
        return f"{path}?{query}" if query else path

    def build_parts(
        self, args: Mapping[str, Any], *, query_sort: bool = True
    ) -> tuple[str, str] | None:
        """Like :meth:`build` but keeps the path and encoded query apart."""
        remaining = dict(args)
        parts: list[str] = []
        for segment in self.trace:
            if not segment.is_param:
                parts.append(segment.value)
                continue

            name = segment.value
            value = remaining.pop(name) if name in remaining else self.defaults.get(name)
            try:
                parts.append(self.converters[name].to_url(value))
            except ConversionError as exc:
                logger.debug("%s cannot build %s=%r: %s", self.template, name, value, exc)
                return None

        query = ""
        if remaining:
            items = sorted(remaining.items()) if query_sort else list(remaining.items())
            query = urlencode(items, doseq=True)
        return "/" + "/".join(parts), query

    def __repr__(self) -> str:
        bound = "bound" if self._router is not None else "unbound"
        return f"<Rule ({bound}) {self.template!r} -> {self.endpoint!r}>"
