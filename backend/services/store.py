"""Relational quote store.

Owns the single query the service needs: N random quotes. No cache
awareness. Query, connection and row-mapping failures all surface as
StoreUnavailableError so callers handle them the same way.
"""

import logging

from sqlalchemy import (
    Column,
    DateTime,
    Engine,
    Integer,
    MetaData,
    Table,
    Text,
    create_engine,
    func,
    make_url,
    select,
    text,
)
from sqlalchemy.exc import SQLAlchemyError

from errors import StoreUnavailableError
from models import Quote

logger = logging.getLogger(__name__)

metadata = MetaData()

quotes_table = Table(
    "quotes",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("quote", Text, nullable=False),
    Column("author", Text, nullable=False),
    Column("created_at", DateTime, nullable=False),
)


def _connect_args(database_url: str, timeout_seconds: int) -> dict:
    """Driver timeouts so a hung query cannot hold a request thread forever."""
    if make_url(database_url).get_backend_name() == "mysql":
        return {
            "connect_timeout": timeout_seconds,
            "read_timeout": timeout_seconds,
            "write_timeout": timeout_seconds,
        }
    return {}


def create_store_engine(database_url: str, timeout_seconds: int = 5) -> Engine:
    """Create the SQLAlchemy engine with the service's pool settings."""
    return create_engine(
        database_url,
        connect_args=_connect_args(database_url, timeout_seconds),
        pool_pre_ping=True,
        pool_size=25,
        max_overflow=0,
        pool_recycle=300,
    )


class QuoteStore:
    def __init__(self, engine: Engine):
        self._engine = engine

    def _random_order(self):
        # MySQL spells it RAND(); SQLite and Postgres use RANDOM().
        if self._engine.dialect.name == "mysql":
            return func.rand()
        return func.random()

    def fetch_random_batch(self, n: int) -> list[Quote]:
        """Return up to ``n`` distinct quotes chosen at random."""
        if n < 1:
            raise ValueError(f"Batch size must be at least 1, got {n}")

        stmt = (
            select(
                quotes_table.c.id,
                quotes_table.c.quote,
                quotes_table.c.author,
                quotes_table.c.created_at,
            )
            .order_by(self._random_order())
            .limit(n)
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).all()
            return [
                Quote(id=row.id, text=row.quote, attribution=row.author, created_at=row.created_at)
                for row in rows
            ]
        except (SQLAlchemyError, ValueError) as e:
            logger.error("Random quote query failed: %s", e)
            raise StoreUnavailableError() from e

    def check_connection(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Quote store ping failed: %s", e)
            return False

    def close(self) -> None:
        self._engine.dispose()
