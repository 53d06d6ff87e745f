"""
stats/report.py -- Assemble the aggregate report from four independent queries.

The four StatsStore calls are blocking SQLAlchemy queries, so each one runs
in a worker thread via asyncio.to_thread and asyncio.gather joins them. The
report completes only when all four have returned. If any query raises, the
exception propagates out of gather and the other results are discarded --
there are no partial reports and nothing is retried.
"""

import asyncio
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from stats.models import AggregateReport
from stats.store import StatsStore

logger = logging.getLogger("zela.stats")

_TWO_PLACES = Decimal("0.01")


def round_rating(value: Optional[Decimal]) -> Decimal:
    """Round a mean rating to two decimal places; missing means 0.00."""
    if value is None:
        return Decimal("0").quantize(_TWO_PLACES)
    return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


async def build_report(store: StatsStore) -> AggregateReport:
    """Run the user/appointment/payment counts and the rating average concurrently."""
    total_users, total_appointments, total_payments, avg_rating = await asyncio.gather(
        asyncio.to_thread(store.count_users),
        asyncio.to_thread(store.count_appointments),
        asyncio.to_thread(store.count_payments),
        asyncio.to_thread(store.average_rating),
    )
    report = AggregateReport(
        total_users=total_users,
        total_appointments=total_appointments,
        total_payments=total_payments,
        avg_rating=round_rating(avg_rating),
    )
    logger.debug("Built aggregate report: %s", report)
    return report
