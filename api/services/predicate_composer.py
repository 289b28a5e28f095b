"""
Turns normalized search criteria into a SQL ``WHERE`` clause.

Each filter contributes an independent ``Predicate``: a SQL template whose
parameters are referenced as ``{0}``, ``{1}``, ... plus the values they bind.
``PredicateBuilder`` collects predicates in order and renders them once,
numbering placeholders globally (``:p1``, ``:p2``, ...) in insertion order, so
the parameter list always lines up with the placeholders no matter which
filters are present.

Emission order: text, category, min price, max price, brand.
"""
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from core.config import settings
from services.catalog_store import placeholder
from services.filter_normalizer import SearchCriteria

EFFECTIVE_PRICE = "COALESCE(p.sale_price, p.price)"
BRAND = "p.specs->>'brand'"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def text_config() -> str:
    """Text search configuration name, checked before it is inlined."""
    config = settings.search_text_config
    if not _IDENTIFIER.match(config):
        raise ValueError(f"Invalid text search configuration: {config!r}")
    return config


def search_document() -> str:
    """Weighted tsvector over title (A), description (B) and specs (C)."""
    config = text_config()
    return (
        f"setweight(to_tsvector('{config}', COALESCE(p.title, '')), 'A') || "
        f"setweight(to_tsvector('{config}', COALESCE(p.description, '')), 'B') || "
        f"setweight(to_tsvector('{config}', COALESCE(CAST(p.specs AS text), '')), 'C')"
    )


def search_query(marker: str = "{0}") -> str:
    return f"plainto_tsquery('{text_config()}', {marker})"


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(value: str) -> str:
    """ILIKE pattern matching ``value`` anywhere, with wildcards in ``value`` taken literally."""
    return f"%{escape_like(value)}%"


@dataclass(frozen=True)
class SqlFragment:
    """SQL template plus the values it binds, in placeholder order."""
    name: str
    sql: str
    params: Tuple[Any, ...] = ()

    def render(self, start: int) -> str:
        """SQL with ``{i}`` replaced by the global placeholder ``start + i``."""
        markers = [placeholder(start + i) for i in range(len(self.params))]
        return self.sql.format(*markers)


@dataclass(frozen=True)
class Predicate(SqlFragment):
    """One boolean condition; predicates only ever combine with AND."""


def render_fragments(fragments: Sequence[SqlFragment], start: int) -> Tuple[List[str], List[Any]]:
    """Render a run of fragments, numbering placeholders from ``start``."""
    rendered: List[str] = []
    params: List[Any] = []
    for fragment in fragments:
        rendered.append(fragment.render(start + len(params)))
        params.extend(fragment.params)
    return rendered, params


@dataclass(frozen=True)
class ComposedFilter:
    """Rendered ``WHERE`` clause shared by the page and count queries."""
    where: str
    params: Tuple[Any, ...]
    predicates: Tuple[Predicate, ...] = ()

    @property
    def next_index(self) -> int:
        """First free placeholder position after the filter's own parameters."""
        return len(self.params) + 1


@dataclass
class PredicateBuilder:
    predicates: List[Predicate] = field(default_factory=list)

    def add(self, predicate: Optional[Predicate]) -> "PredicateBuilder":
        if predicate is not None:
            self.predicates.append(predicate)
        return self

    def build(self) -> ComposedFilter:
        clauses, params = render_fragments(self.predicates, start=1)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return ComposedFilter(where=where, params=tuple(params), predicates=tuple(self.predicates))


def text_predicate(query: str) -> Optional[Predicate]:
    # Full-text match, or a literal title hit that full-text would miss
    if not query:
        return None
    return Predicate(
        name="text",
        sql=f"({search_document()} @@ {search_query('{0}')} OR p.title ILIKE {{1}})",
        params=(query, contains_pattern(query)),
    )


def category_predicate(category: Optional[str]) -> Optional[Predicate]:
    if not category:
        return None
    return Predicate(name="category", sql="c.name ILIKE {0}", params=(contains_pattern(category),))


def min_price_predicate(min_price: Optional[float]) -> Optional[Predicate]:
    if min_price is None:
        return None
    return Predicate(name="min_price", sql=f"{EFFECTIVE_PRICE} >= {{0}}", params=(min_price,))


def max_price_predicate(max_price: Optional[float]) -> Optional[Predicate]:
    if max_price is None:
        return None
    return Predicate(name="max_price", sql=f"{EFFECTIVE_PRICE} <= {{0}}", params=(max_price,))


def brand_predicate(brand: Optional[str]) -> Optional[Predicate]:
    if not brand:
        return None
    return Predicate(name="brand", sql=f"{BRAND} ILIKE {{0}}", params=(contains_pattern(brand),))


def compose_filter(criteria: SearchCriteria) -> ComposedFilter:
    """AND of every filter present in ``criteria``; empty when none are."""
    return (
        PredicateBuilder()
        .add(text_predicate(criteria.query))
        .add(category_predicate(criteria.category))
        .add(min_price_predicate(criteria.min_price))
        .add(max_price_predicate(criteria.max_price))
        .add(brand_predicate(criteria.brand))
        .build()
    )
