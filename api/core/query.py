"""
Set-membership query building.

Templates are written with `?` markers and exactly one membership predicate
`<column> IN (?)`. `resolve_membership` picks the query shape from the number
of identifiers:

- 0 identifiers: the predicate (and its WHERE) is dropped, matching every row
- 1 identifier:  `<column> = ?`
- N identifiers: `<column> IN (?, ?, ..., ?)`

and `rebind` then renumbers every marker for the target dialect.
"""

from __future__ import annotations

import itertools
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .errors import QueryConfigurationError

MEMBERSHIP_MARKER = "IN (?)"

DOLLAR = "dollar"  # PostgreSQL / asyncpg: $1, $2, ...
QMARK = "qmark"  # sqlite and friends: ?, ?, ...

_BARE_PREDICATE = re.compile(r"\s+WHERE\s+\w+\s+IN \(\?\)")


@dataclass(frozen=True)
class BoundQuery:
    sql: str
    args: tuple[Any, ...]


def rebind(sql: str, *, style: str = DOLLAR, start: int = 1) -> str:
    """
    Rewrite `?` markers into the dialect's positional syntax.

    Markers are numbered left to right starting at `start`. The template must
    not contain literal question marks.
    """
    if style == QMARK:
        return sql
    if style != DOLLAR:
        raise QueryConfigurationError(f"Unknown bind style: {style!r}")

    counter = itertools.count(start)
    return re.sub(r"\?", lambda _: f"${next(counter)}", sql)


def expand_membership(template: str, n: int) -> str:
    if n < 1:
        raise QueryConfigurationError(f"Cannot expand a membership predicate for {n} values.")
    _check_template(template)
    markers = ", ".join("?" for _ in range(n))
    return template.replace(MEMBERSHIP_MARKER, f"IN ({markers})")


def resolve_membership(template: str, values: Sequence[Any], *, style: str = DOLLAR) -> BoundQuery:
    _check_template(template)
    n = len(values)

    if n == 0:
        sql, found = _BARE_PREDICATE.subn("", template)
        if found != 1:
            raise QueryConfigurationError(
                "Unfiltered query needs a template whose WHERE holds only the membership predicate."
            )
        return BoundQuery(rebind(sql, style=style), ())

    if n == 1:
        sql = template.replace(MEMBERSHIP_MARKER, "= ?")
        return BoundQuery(rebind(sql, style=style), (values[0],))

    sql = expand_membership(template, n)
    return BoundQuery(rebind(sql, style=style), tuple(values))


def _check_template(template: str) -> None:
    count = template.count(MEMBERSHIP_MARKER)
    if count != 1:
        raise QueryConfigurationError(
            f"Query template must hold exactly one {MEMBERSHIP_MARKER!r} predicate, found {count}."
        )
