"""
stats/store.py -- SQLAlchemy-backed queries behind GET /estatisticas.

Uses SQLAlchemy Core (not ORM). Each public count/average method is a single
scalar query with no ordering dependency on the others, so stats/report.py
can run them concurrently on separate pooled connections.

The appointments, payments and ratings tables belong to the wider Zela
platform; this service only reads them. The minimal definitions below are
created if missing so a fresh database (and the test suite) has something to
count. The add_* helpers exist for seeding.

The users table is owned by auth/store.py and is counted through raw SQL so
this package stays independent of auth/.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = StatsStore(engine)
    store.add_rating(appointment_id=1, score=5)
    store.average_rating()   # Decimal("5") or None when there are no ratings
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, Numeric, String, Table, Text, func, select, text
from sqlalchemy.engine import Engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

appointments = Table(
    "appointments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("client_id", Integer, nullable=False),
    Column("professional_id", Integer, nullable=False),
    Column("scheduled_at", String(32), nullable=False),
    Column("status", String(30), nullable=False, server_default="scheduled"),
)

payments = Table(
    "payments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("appointment_id", Integer, nullable=False),
    Column("amount", Numeric(10, 2), nullable=False),
    Column("paid_at", String(32), nullable=False),
)

ratings = Table(
    "ratings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("appointment_id", Integer, nullable=False),
    Column("score", Integer, nullable=False),
    Column("comment", Text),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class StatsStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def count_users(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(text("SELECT COUNT(*) FROM users")).scalar()
        return int(result or 0)

    def count_appointments(self) -> int:
        return self._count(appointments)

    def count_payments(self) -> int:
        return self._count(payments)

    def average_rating(self) -> Optional[Decimal]:
        """Return the mean rating score, or None when no ratings exist.

        PostgreSQL returns AVG() as Decimal and SQLite as float; both are
        normalised to Decimal via str() so no binary float digits leak in.
        """
        with self.engine.connect() as conn:
            result = conn.execute(select(func.avg(ratings.c.score))).scalar()
        if result is None:
            return None
        return Decimal(str(result))

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def _count(self, table: Table) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(table)).scalar()
        return int(result or 0)

    # ------------------------------------------------------------------
    # Seeding helpers
    # ------------------------------------------------------------------

    def add_appointment(
        self,
        client_id: int,
        professional_id: int,
        scheduled_at: Optional[str] = None,
        status: str = "scheduled",
    ) -> int:
        """Insert an appointment and return its assigned database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                appointments.insert().values(
                    client_id=client_id,
                    professional_id=professional_id,
                    scheduled_at=scheduled_at or _now_iso(),
                    status=status,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def add_payment(self, appointment_id: int, amount: Decimal) -> int:
        """Insert a payment and return its assigned database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                payments.insert().values(appointment_id=appointment_id, amount=amount, paid_at=_now_iso())
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def add_rating(self, appointment_id: int, score: int, comment: Optional[str] = None) -> int:
        """Insert a rating and return its assigned database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                ratings.insert().values(appointment_id=appointment_id, score=score, comment=comment)
            )
            conn.commit()
            return result.inserted_primary_key[0]
