"""Incremental URL building."""

from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlunsplit

if TYPE_CHECKING:
    from waymark.routing.adapter import Adapter

# Characters left unescaped in built paths (RFC 3986 pchar plus "/")
_PATH_SAFE = "/:@!$&'()*+,;=-._~"


class Builder:
    """Collects arguments for one endpoint, then builds an absolute URL.

    Usage::

        builder = adapter.builder("users.show")
        builder.set("id", 42)
        builder.build()  # "http://example.com/users/42"
    """

    __slots__ = ("_arguments", "adapter", "endpoint", "method")

    def __init__(self, adapter: "Adapter", method: str, endpoint: str) -> None:
        self.adapter = adapter
        self.method = method
        self.endpoint = endpoint
        self._arguments: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._arguments.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set *key* to *value*, replacing any existing value."""
        self._arguments[key] = value

    def delete(self, key: str) -> None:
        self._arguments.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._arguments

    @property
    def arguments(self) -> dict[str, Any]:
        return dict(self._arguments)

    def build(self) -> str | None:
        """Return ``scheme://host/path?query``, or ``None`` if nothing builds."""
        rv = self.adapter.build_parts(self.endpoint, self._arguments, self.method)
        if rv is None:
            return None

        path, query = rv
        return urlunsplit(
            (
                self.adapter.scheme,
                self.adapter.host,
                quote(path, safe=_PATH_SAFE),
                query,
                "",
            )
        )

    def __repr__(self) -> str:
        return f"<Builder {self.method} {self.endpoint!r} {self._arguments!r}>"
