"""
api/routes/stats.py -- Aggregate statistics endpoint.

Returns one payload with the total number of users, appointments and
payments plus the mean rating. Read-only; computed fresh on every call.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from api.models import StatsResponse
from auth.dependencies import require_identity
from stats.report import build_report
from stats.store import StatsStore

logger = logging.getLogger("zela.api")

# Auth policy:
# - GET /estatisticas: requires a valid bearer token
# Router-level dependency enforces auth; the single handler does not repeat it.
router = APIRouter(dependencies=[Depends(require_identity)])


@router.get("/estatisticas", response_model=StatsResponse)
async def get_statistics(request: Request) -> StatsResponse:
    """Return platform-wide totals.

    Response:
      totalUsers         -- registered accounts
      totalAppointments  -- appointment records
      totalPayments      -- payment records
      avgRating          -- mean rating score, two decimals, "0.00" if none
    """
    store: StatsStore = request.app.state.stats_store
    try:
        report = await build_report(store)
    except SQLAlchemyError as exc:
        logger.exception("Statistics query failed")
        raise HTTPException(status_code=500, detail="internal error") from exc
    return StatsResponse.from_report(report)
