"""Query primitives for the Supabase REST (PostgREST) interface.

Only the handful of operators the application relies on are modelled:
equality, case-insensitive pattern match, its negation, and ordering.
Each renders to a PostgREST query-string parameter.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Filter:
    """A single column constraint, e.g. ``user_id=eq.<uuid>``."""

    column: str
    operator: str
    value: str
    negate: bool = False

    def to_param(self) -> tuple[str, str]:
        op = f"not.{self.operator}" if self.negate else self.operator
        return self.column, f"{op}.{self.value}"


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = False

    def to_param(self) -> tuple[str, str]:
        direction = "asc" if self.ascending else "desc"
        return "order", f"{self.column}.{direction}"


def eq(column: str, value: object) -> Filter:
    """Equality filter."""
    return Filter(column, "eq", str(value))


def _pattern(pattern: str) -> str:
    # PostgREST accepts ``*`` as the LIKE wildcard, which avoids URL-encoding ``%``.
    return pattern.replace("%", "*")


def ilike(column: str, pattern: str) -> Filter:
    """Case-insensitive pattern filter; ``%`` is the wildcard."""
    return Filter(column, "ilike", _pattern(pattern))


def not_ilike(column: str, pattern: str) -> Filter:
    """Negated case-insensitive pattern filter."""
    return Filter(column, "ilike", _pattern(pattern), negate=True)


@dataclass
class Query:
    """A select over one table."""

    filters: list[Filter] = field(default_factory=list)
    order: Order | None = None
    columns: str = "*"

    def where(self, *filters: Filter) -> "Query":
        self.filters.extend(filters)
        return self

    def order_by(self, column: str, ascending: bool = False) -> "Query":
        self.order = Order(column, ascending)
        return self

    def params(self) -> list[tuple[str, str]]:
        result = [("select", self.columns)]
        result.extend(f.to_param() for f in self.filters)
        if self.order is not None:
            result.append(self.order.to_param())
        return result

    def has_filter(self, column: str, operator: str | None = None) -> bool:
        return any(
            f.column == column and (operator is None or f.operator == operator)
            for f in self.filters
        )
