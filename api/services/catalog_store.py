"""
Read-only access to the product catalog.

The search core talks to storage only through ``CatalogStore``. Statements use
positional binds rendered as ``:p1``, ``:p2``, ... and the parameter values are
passed as an ordered sequence, so the n-th value always feeds ``:p<n>``.
"""
from typing import Any, Dict, List, Protocol, Sequence

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

PARAM_PREFIX = "p"


def placeholder(position: int) -> str:
    """Bind marker for the 1-based parameter ``position``."""
    return f":{PARAM_PREFIX}{position}"


def positional_binds(params: Sequence[Any]) -> Dict[str, Any]:
    """Map an ordered parameter list onto the ``:p<n>`` bind names."""
    return {f"{PARAM_PREFIX}{i}": value for i, value in enumerate(params, start=1)}


class CatalogStore(Protocol):
    async def fetch_all(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]: ...

    async def fetch_scalar(self, sql: str, params: Sequence[Any]) -> Any: ...


class SqlCatalogStore:
    """CatalogStore over a SQLAlchemy async engine.

    Every read checks out its own pooled connection, so two reads started
    together with ``asyncio.gather`` run in parallel instead of queueing on a
    single session.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def fetch_all(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        async with self.engine.connect() as conn:
            result = await conn.execute(text(sql), positional_binds(params))
            return [dict(row) for row in result.mappings().all()]

    async def fetch_scalar(self, sql: str, params: Sequence[Any]) -> Any:
        async with self.engine.connect() as conn:
            result = await conn.execute(text(sql), positional_binds(params))
            return result.scalar()
