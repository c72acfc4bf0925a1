"""
Wait-time API endpoints
"""

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from seating.api.errors import to_http_exception
from seating.api.schemas import WaitEstimate, WaitingStats
from seating.core.database import get_session
from seating.core.exceptions import SeatingError
from seating.services.booking_queue import BookingQueue
from seating.services.table_registry import TableRegistry
from seating.services.wait_time import WaitTimeEstimator

router = APIRouter()


def get_estimator(session: Session = Depends(get_session)) -> WaitTimeEstimator:
    return WaitTimeEstimator(TableRegistry(session), BookingQueue(session))


@router.get("/waiting-time", response_model=WaitingStats)
async def waiting_stats(estimator: WaitTimeEstimator = Depends(get_estimator)):
    """Average wait plus current queue and occupancy counts"""
    return await run_in_threadpool(estimator.stats)


@router.get("/waiting-time/{party_size}", response_model=WaitEstimate)
async def estimate_wait(party_size: int, estimator: WaitTimeEstimator = Depends(get_estimator)):
    """Estimated wait for a party arriving now"""
    try:
        minutes = await run_in_threadpool(estimator.estimate, party_size)
    except SeatingError as e:
        raise to_http_exception(e)
    return WaitEstimate(party_size=party_size, estimated_wait_time=minutes)
