"""``waymark routes`` — list registered rules.

Resolves an import string to a Router and prints its rules in match
order with methods, template, endpoint, and weight.
"""

import argparse

from waymark.cli._resolve import load_router


def format_table(rows: list[tuple[str, ...]], headers: tuple[str, ...]) -> list[str]:
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths[:-1]) + "  {}"
    lines = [fmt.format(*headers), "-" * min(sum(widths) + 2 * (len(widths) - 1), 80)]
    lines.extend(fmt.format(*row) for row in rows)
    return lines


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of METHODS, TEMPLATE, ENDPOINT, and WEIGHT."""
    router = load_router(args.router)
    rules = router.rules
    if not rules:
        print("No rules registered.")
        return

    rows = [
        (", ".join(rule.methods), rule.template, rule.endpoint or "-", str(rule.weight))
        for rule in rules
    ]
    for line in format_table(rows, ("METHODS", "TEMPLATE", "ENDPOINT", "WEIGHT")):
        print(line)
