"""Waymark — URL routing with typed converters and reverse building.

Compiles path templates into matchers, binds request paths to named
endpoints with typed arguments, and builds URLs back from them.

Basic usage::

    from waymark import Router

    router = Router()
    router.rule("/", "index")
    router.rule("/posts/<year:int(digits=4)>/<slug>", "posts.show")
    router.compile()

    adapter = router.bind("GET", "https", "example.com", "/posts/2024/hello")
    match = adapter.match()
    match.rule.endpoint   # "posts.show"
    match.args            # {"year": 2024, "slug": "hello"}

    adapter.build("posts.show", {"year": 2025, "slug": "again"})
    # "/posts/2025/again"
"""

__version__ = "0.1.0"
__all__ = [
    "Adapter",
    "AnyConverter",
    "Builder",
    "ConfigurationError",
    "Converter",
    "ConverterRegistry",
    "EndpointRegistry",
    "HTTPError",
    "Int64Converter",
    "IntConverter",
    "MethodNotAllowed",
    "NotFound",
    "PathConverter",
    "Router",
    "RouterConfig",
    "Rule",
    "RuleMatch",
    "StringConverter",
    "TemplateError",
    "WaymarkError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waymark`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from waymark.routing.router import Router

        return Router

    if name == "RouterConfig":
        from waymark.config import RouterConfig

        return RouterConfig

    if name in ("Rule", "RuleMatch"):
        from waymark.routing import rule as _rule

        return getattr(_rule, name)

    if name == "Adapter":
        from waymark.routing.adapter import Adapter

        return Adapter

    if name == "Builder":
        from waymark.routing.builder import Builder

        return Builder

    if name == "EndpointRegistry":
        from waymark.routing.endpoints import EndpointRegistry

        return EndpointRegistry

    if name in (
        "AnyConverter",
        "Converter",
        "ConverterRegistry",
        "Int64Converter",
        "IntConverter",
        "PathConverter",
        "StringConverter",
    ):
        from waymark.routing import converters as _converters

        return getattr(_converters, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "TemplateError",
        "WaymarkError",
    ):
        from waymark import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
