"""Waymark exception hierarchy.

Shared across the rule compiler, converters, router, and adapter so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class WaymarkError(Exception):
    """Base for all waymark-specific errors."""


class ConfigurationError(WaymarkError):
    """Raised when the routing table is configured incorrectly.

    Typically surfaced at startup, while rules are registered.
    """


# -- Template errors ------------------------------------------------------


class TemplateError(ConfigurationError):
    """A path template could not be parsed.

    Carries the offending template and, where known, the segment.
    """

    reason = "malformed path template"

    def __init__(self, template: str, segment: str | None = None) -> None:
        self.template = template
        self.segment = segment
        msg = f"{self.reason}: {template!r}"
        if segment is not None:
            msg += f" (segment {segment!r})"
        super().__init__(msg)


class LeadingSlashError(TemplateError):
    reason = "rules must begin with a leading slash"


class EmptyVariableError(TemplateError):
    reason = "variable must have a name"


class VariableDelimiterError(TemplateError):
    reason = "must surround variable with '<' and '>'"


class DuplicateVariableError(TemplateError):
    reason = "duplicate variable name"


class ConverterDelimiterError(TemplateError):
    reason = "must surround converter arguments with '(' and ')'"


class ConverterArgumentsError(TemplateError):
    reason = "malformed key/value argument pairs"


class InvalidConverterArguments(TemplateError):
    reason = "converter rejected its arguments"


# -- Binding errors -------------------------------------------------------


class BindingError(WaymarkError):
    """A rule was bound or compiled out of order. Always a programming error."""


class RuleAlreadyBound(BindingError):  # noqa: N818
    pass


class RuleNotBound(BindingError):  # noqa: N818
    pass


class RuleCompileError(WaymarkError):
    """The synthesized pattern for a rule failed to compile."""


# -- Conversion errors ----------------------------------------------------


class ConversionError(WaymarkError, ValueError):
    """A value failed a converter's parse or render contract.

    Recovered locally: during matching the candidate rule is skipped,
    during building the candidate rule is abandoned.
    """


class ConverterArgumentError(ConversionError):
    """A converter factory was given arguments it cannot accept."""


# -- HTTP errors ----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HTTPError(WaymarkError):
    """An error that maps directly to an HTTP status code.

    Raised by the adapter when matching fails. The dispatch layer catches
    these and renders the matching response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class RequestRedirect(HTTPError):  # noqa: N818
    """3xx — the client should retry at ``location``."""

    def __init__(self, location: str, status: int = 303) -> None:
        super().__init__(
            status=status,
            detail=f"Redirecting to {location}",
            headers=(("Location", location),),
        )

    @property
    def location(self) -> str:
        return dict(self.headers)["Location"]


class NotFound(HTTPError):  # noqa: N818
    """404 — no rule matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — a rule matched the path but not the HTTP method.

    Includes an ``Allow`` header listing the valid methods, in the order
    they were first seen while scanning the routing table.
    """

    def __init__(self, allowed: tuple[str, ...] | list[str], detail: str = "") -> None:
        allow_value = ", ".join(allowed)
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )

    @property
    def allowed(self) -> list[str]:
        value = dict(self.headers)["Allow"]
        return value.split(", ") if value else []


class InternalServerError(HTTPError):  # noqa: N818
    """500 — something went wrong while dispatching."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(status=500, detail=detail)
