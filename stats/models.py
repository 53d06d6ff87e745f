"""
stats/models.py -- Domain dataclass for the aggregate report.

Pure data container. StatsStore produces the raw scalars and
stats/report.py assembles them into an AggregateReport.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class AggregateReport:
    """Counts and mean rating computed fresh for one request.

    avg_rating is already rounded to two places (Decimal("0.00") when no
    ratings exist) so str(avg_rating) is the display form.
    """

    total_users: int
    total_appointments: int
    total_payments: int
    avg_rating: Decimal
