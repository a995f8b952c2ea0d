"""
Composable SQL predicates for search endpoints.

A ``Predicate`` is an immutable pair of a SQL boolean expression and
its bound parameters.  Predicates are combined with ``any_of`` (OR)
and ``all_of`` (AND); both ignore ``None`` members, which is how an
unsupplied filter contributes no constraint at all.

``FilterSpec`` describes the filterable query parameters of one
resource.  ``build_predicate`` walks a ``FilterSpec``, builds one predicate per
supplied parameter (ORing the alternatives of a parameter that maps to
several columns) and ANDs them together.

Column names are never taken from user input: they only come from the
``Filter`` declarations in the service modules.  Values are always
bound as parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

LIKE_ESCAPE = "\\"

# SQLite stores INTEGER values as signed 64-bit numbers.
SQLITE_MIN_INTEGER = -(2 ** 63)
SQLITE_MAX_INTEGER = 2 ** 63 - 1


def fits_integer(value: Any) -> bool:
    """False for Python ints SQLite cannot bind; such a value matches no row."""
    if isinstance(value, bool) or not isinstance(value, int):
        return True
    return SQLITE_MIN_INTEGER <= value <= SQLITE_MAX_INTEGER


def _escape_like(value: str) -> str:
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class Predicate:
    sql: str
    params: Tuple[Any, ...] = ()

    @classmethod
    def equals(cls, column: str, value: Any) -> "Predicate":
        if not fits_integer(value):
            return FALSE
        return cls(f"{column} = ?", (value,))

    @classmethod
    def one_of(cls, column: str, values: Sequence[Any]) -> "Predicate":
        values = [v for v in values if fits_integer(v)]
        if not values:
            return FALSE
        placeholders = ", ".join("?" for _ in values)
        return cls(f"{column} IN ({placeholders})", tuple(values))

    @classmethod
    def contains(cls, column: str, value: str) -> "Predicate":
        """Case-insensitive substring match (``%value%``).

        Both sides go through the ``casefold`` SQL function registered
        by ``db.get_connection``; SQLite's own ``LOWER`` and ``LIKE``
        only fold ASCII letters.
        """
        pattern = f"%{_escape_like(str(value).casefold())}%"
        return cls(f"casefold({column}) LIKE ? ESCAPE '{LIKE_ESCAPE}'", (pattern,))

    @classmethod
    def between(cls, column: str, start: Any, end: Any) -> "Predicate":
        return cls(f"{column} BETWEEN ? AND ?", (start, end))


# Neutral element of all_of: matches every row.
TRUE = Predicate("1 = 1")
# Matches no row.
FALSE = Predicate("1 = 0")


def _combine(operator: str, predicates: Iterable[Optional[Predicate]]) -> Optional[Predicate]:
    parts = [p for p in predicates if p is not None and p is not TRUE]
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    sql = f" {operator} ".join(f"({p.sql})" for p in parts)
    params: Tuple[Any, ...] = ()
    for p in parts:
        params += p.params
    return Predicate(sql, params)


def all_of(*predicates: Optional[Predicate]) -> Predicate:
    """AND the given predicates; ``None`` members are skipped."""
    return _combine("AND", predicates) or TRUE


def any_of(*predicates: Optional[Predicate]) -> Optional[Predicate]:
    """OR the given predicates; returns ``None`` when nothing was supplied."""
    return _combine("OR", predicates)


def is_supplied(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


@dataclass(frozen=True)
class Filter:
    """A single query parameter mapped to one or more columns.

    ``match`` is ``"contains"`` for case-insensitive substring search or
    ``"equals"`` for exact comparison.
    """

    param: str
    columns: Sequence[str]
    match: str = "contains"

    def build(self, value: Any) -> Optional[Predicate]:
        if not is_supplied(value):
            return None
        if self.match == "equals":
            return any_of(*(Predicate.equals(c, value) for c in self.columns))
        return any_of(*(Predicate.contains(c, value) for c in self.columns))


@dataclass(frozen=True)
class RangeFilter:
    """A pair of query parameters bounding one column.

    The range is only active when both bounds are supplied; a lone
    start or end bound is ignored here.  Resources that must reject a
    lone bound do so in their own validation.
    """

    start_param: str
    end_param: str
    column: str

    def build(self, start: Any, end: Any) -> Optional[Predicate]:
        if is_supplied(start) and is_supplied(end):
            return Predicate.between(self.column, start, end)
        return None


@dataclass(frozen=True)
class FilterSpec:
    filters: Sequence[Filter] = field(default_factory=tuple)
    ranges: Sequence[RangeFilter] = field(default_factory=tuple)


def build_predicate(spec: FilterSpec, params: Mapping[str, Any], base: Optional[Predicate] = None) -> Predicate:
    """Compose the predicate for ``params`` according to ``spec``.

    ``base`` is ANDed in unconditionally; services use it for the
    ownership constraint (``user_id = ?``) that no query parameter may
    lift.
    """
    parts = [base]
    parts.extend(f.build(params.get(f.param)) for f in spec.filters)
    parts.extend(r.build(params.get(r.start_param), params.get(r.end_param)) for r in spec.ranges)
    return all_of(*parts)


def where_clause(predicate: Optional[Predicate]) -> Tuple[str, Tuple[Any, ...]]:
    """Render ``predicate`` as a ``WHERE`` clause (empty for ``TRUE``)."""
    if predicate is None or predicate is TRUE:
        return "", ()
    return f" WHERE {predicate.sql}", predicate.params
