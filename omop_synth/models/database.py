from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy import Engine, create_engine, func, inspect, select, text
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from omop_synth.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def create_store_engine(url: str | None = None) -> Engine:
    """
    Create an engine for a brand-new CDM store.

    In-memory SQLite databases live and die with their connection, so they
    are pinned to one shared connection via StaticPool.
    """
    url = url or settings.CDM_DATABASE_URL
    if url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, pool_pre_ping=True)


class CDMDatabase:
    """Caller-owned handle to a populated CDM store."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._closed = False

    def __enter__(self) -> CDMDatabase:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def connect(self):
        return self.engine.connect()

    def table_names(self) -> list[str]:
        return sorted(inspect(self.engine).get_table_names())

    def has_tables(self, names: Iterable[str]) -> bool:
        present = set(self.table_names())
        return all(name in present for name in names)

    def query(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Run a textual SQL query and return the rows as dicts."""
        with self.engine.connect() as conn:
            result = conn.execute(text(sql), params or {})
            return [dict(row) for row in result.mappings()]

    def _table(self, name: str):
        table = Base.metadata.tables.get(name)
        if table is None or name not in self.table_names():
            raise ValueError(f"Unknown CDM table: {name}")
        return table

    def count(self, name: str) -> int:
        table = self._table(name)
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(table)).scalar_one()

    def read_table(self, name: str) -> list[dict[str, Any]]:
        """All rows of a CDM table, ordered by primary key."""
        table = self._table(name)
        with self.engine.connect() as conn:
            result = conn.execute(select(table).order_by(*table.primary_key.columns))
            return [dict(row) for row in result.mappings()]

    def close(self) -> None:
        if self._closed:
            return
        self.engine.dispose()
        self._closed = True
        logger.debug("Closed CDM store %s", self.engine.url)
