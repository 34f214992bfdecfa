"""Router configuration.

One frozen dataclass holds every knob the router reads at construction
time. Rules registered later see the same values.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(default_methods=("GET", "POST"), int_converter="int64")
    """

    # Methods given to rules registered without any
    default_methods: tuple[str, ...] = ("GET",)

    # Append HEAD to rules that accept GET
    implicit_head: bool = True

    # Converter used for ``<name>`` and for unknown converter keys
    default_converter: str = "string"

    # Converter key that ``int`` resolves to ("int" or "int64")
    int_converter: str = "int"

    # Sort query string keys when building URLs
    query_sort: bool = True
