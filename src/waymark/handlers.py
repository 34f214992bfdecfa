"""Default HTTP outcome factories used by the router.

Each factory returns an ``HTTPError`` value. ``Router`` stores them as
attributes so an application can swap in its own::

    router.not_found_handler = lambda: NotFound("Nothing here")
"""

from collections.abc import Sequence

from waymark.errors import InternalServerError, MethodNotAllowed, NotFound, RequestRedirect


def redirect(location: str, status: int = 303) -> RequestRedirect:
    return RequestRedirect(location, status)


def not_found() -> NotFound:
    return NotFound()


def method_not_allowed(allowed: Sequence[str]) -> MethodNotAllowed:
    return MethodNotAllowed(tuple(allowed))


def internal_server_error() -> InternalServerError:
    return InternalServerError()
