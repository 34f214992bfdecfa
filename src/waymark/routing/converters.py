"""Path parameter converters.

Each converter contributes a regex sub-pattern and a weight to the rule
it appears in, and converts a captured segment to a Python value and back.
Converters are built once per parameter occurrence from the argument map
written in the template, e.g. ``<id:int(digits=4,min=1)>``.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

from waymark.errors import ConversionError, ConverterArgumentError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class Converter:
    """Base converter: identity conversion in both directions.

    Subclasses set ``regex`` and ``weight`` and override ``to_python`` /
    ``to_url`` when the value is not a plain string.
    """

    __slots__ = ("regex",)

    weight: int = 100

    def __init__(self, args: Mapping[str, str] | None = None) -> None:
        self.regex = r"[^/]+"

    def to_python(self, value: str) -> Any:
        return value

    def to_url(self, value: Any) -> str:
        if not isinstance(value, str):
            msg = f"expected str, got {type(value).__name__}"
            raise ConversionError(msg)
        return value

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.regex!r}>"


class StringConverter(Converter):
    """A single path segment with optional length limits.

    Accepted arguments: ``length`` (exact), ``minLength`` (default 1) and
    ``maxLength``. ``length`` wins over the other two.
    """

    __slots__ = ()

    weight = 100

    def __init__(self, args: Mapping[str, str] | None = None) -> None:
        args = args or {}
        for key in ("length", "minLength", "maxLength"):
            if key in args and not (args[key].isascii() and args[key].isdigit()):
                msg = f"string converter argument {key}={args[key]!r} is not a length"
                raise ConverterArgumentError(msg)

        regex = r"[^/]"
        if "length" in args:
            self.regex = f"{regex}{{{args['length']}}}"
            return

        min_length = args.get("minLength", "1")
        if "maxLength" in args:
            self.regex = f"{regex}{{{min_length},{args['maxLength']}}}"
        else:
            self.regex = f"{regex}{{{min_length},}}"


class PathConverter(Converter):
    """Like the default converter but also matches slashes.

    Takes no arguments.
    """

    __slots__ = ()

    weight = 200

    def __init__(self, args: Mapping[str, str] | None = None) -> None:
        if args:
            msg = f"path converter takes no arguments, got {sorted(args)}"
            raise ConverterArgumentError(msg)
        self.regex = r"[^/].*?"


class AnyConverter(Converter):
    """Matches one of a fixed set of literal items.

    ``items`` is a comma separated list; whitespace is ignored and every
    item must be non-empty. Template arguments are split on commas, so a
    template spells a single item and longer lists come from a registered
    factory::

        router.converters.register(
            "page", lambda args: AnyConverter({"items": "about,help,imprint"})
        )
    """

    __slots__ = ("items",)

    weight = 100

    def __init__(self, args: Mapping[str, str] | None = None) -> None:
        raw = (args or {}).get("items", "").replace(" ", "")
        items = raw.split(",")
        if any(not item for item in items):
            msg = f"any converter needs a non-empty item list, got {raw!r}"
            raise ConverterArgumentError(msg)
        self.items = tuple(items)
        self.regex = "(?:{})".format("|".join(re.escape(item) for item in items))


class IntConverter(Converter):
    """Non-negative base 10 integers.

    Accepted arguments, all integers: ``digits`` (exact width, enforced on
    parse and used as zero padding on render), ``min`` and ``max``
    (inclusive). A bound of ``0`` means the bound is unset, so ``min=0``
    cannot be expressed.
    """

    __slots__ = ("digits", "max", "min")

    weight = 50

    def __init__(self, args: Mapping[str, str] | None = None) -> None:
        parsed: dict[str, int] = {}
        for key, value in (args or {}).items():
            digits = value.removeprefix("-")
            if not (digits.isascii() and digits.isdigit()):
                msg = f"{type(self).__name__} argument {key}={value!r} is not an integer"
                raise ConverterArgumentError(msg)
            parsed[key] = int(value, 10)

        self.regex = r"\d+"
        self.digits = parsed.get("digits", 0)
        self.min = parsed.get("min", 0)
        self.max = parsed.get("max", 0)

    def to_python(self, value: str) -> int:
        if self.digits and len(value) != self.digits:
            msg = f"expected {self.digits} digits, got {value!r}"
            raise ConversionError(msg)

        if not value.isascii() or not value.isdigit():
            msg = f"not a number: {value!r}"
            raise ConversionError(msg)

        rv = int(value, 10)
        self._check_range(rv)
        return rv

    def to_url(self, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, int):
            msg = f"not a number: {value!r}"
            raise ConversionError(msg)

        rv = str(value)
        if self.digits:
            rv = rv.rjust(self.digits, "0")
        return rv

    def _check_range(self, value: int) -> None:
        if (self.min and value < self.min) or (self.max and value > self.max):
            msg = f"{value} not within range"
            raise ConversionError(msg)


class Int64Converter(IntConverter):
    """An :class:`IntConverter` restricted to signed 64-bit values."""

    __slots__ = ()

    def _check_range(self, value: int) -> None:
        if not INT64_MIN <= value <= INT64_MAX:
            msg = f"{value} overflows int64"
            raise ConversionError(msg)
        super()._check_range(value)

    def to_url(self, value: Any) -> str:
        if isinstance(value, int) and not isinstance(value, bool):
            if not INT64_MIN <= value <= INT64_MAX:
                msg = f"{value} overflows int64"
                raise ConversionError(msg)
        return super().to_url(value)


# Factory: anything that turns an argument map into a converter
ConverterFactory: TypeAlias = Callable[[Mapping[str, str]], Converter | None]


BUILTIN_CONVERTERS: dict[str, ConverterFactory] = {
    "string": StringConverter,
    "path": PathConverter,
    "any": AnyConverter,
    "int": IntConverter,
    "int64": Int64Converter,
}


class ConverterRegistry:
    """Named converter factories.

    Usage::

        registry = ConverterRegistry()
        registry.register("slug", SlugConverter)
        converter = registry.create("slug", {})

    Unknown keys resolve to the default converter.
    """

    __slots__ = ("_default", "_factories")

    def __init__(self, default: str = "string") -> None:
        self._factories: dict[str, ConverterFactory] = dict(BUILTIN_CONVERTERS)
        if default not in self._factories:
            msg = f"unknown default converter {default!r}"
            raise KeyError(msg)
        self._default = default

    @property
    def default(self) -> ConverterFactory:
        return self._factories[self._default]

    def register(self, key: str, factory: ConverterFactory) -> None:
        self._factories[key] = factory

    def lookup(self, key: str | None) -> ConverterFactory:
        if not key:
            return self.default
        return self._factories.get(key, self.default)

    def create(self, key: str | None, args: Mapping[str, str]) -> Converter | None:
        """Construct a converter, raising ``ConverterArgumentError`` on bad args.

        Custom factories may also return ``None`` to refuse their arguments.
        """
        return self.lookup(key)(args)

    def __contains__(self, key: object) -> bool:
        return key in self._factories

    def __iter__(self):
        return iter(self._factories)
