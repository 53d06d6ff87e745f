"""
core/database.py -- Engine factory shared by every store.

One Engine (and therefore one connection pool) per process. UserStore and
StatsStore both receive it at construction so registration, login and the
statistics queries all draw from the same pool. Pool sizing, reconnects and
exhaustion handling are left to SQLAlchemy's defaults.

Usage:
    engine = create_db_engine("postgresql://user:pw@host/db")
    users = UserStore(engine)
    stats = StatsStore(engine)
    engine.dispose()
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_db_engine(db_url: str) -> Engine:
    """Build an Engine for db_url with SQLite-specific connection tweaks applied."""
    connect_args: dict = {}
    is_sqlite = db_url.startswith("sqlite")
    if is_sqlite:
        # Route handlers run in FastAPI's threadpool, so a pooled connection
        # may be used from a different thread than the one that opened it.
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args, pool_pre_ping=not is_sqlite)
    if is_sqlite and ":memory:" not in db_url and "mode=memory" not in db_url:
        event.listen(engine, "connect", _set_wal_mode)
    return engine
