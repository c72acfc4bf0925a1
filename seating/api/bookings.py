"""
Bookings API endpoints: the waiting queue and seating transitions
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session
from typing import List, Optional
from datetime import datetime
import structlog

from seating.api.errors import to_http_exception
from seating.api.schemas import BookingCreate, BookingRead
from seating.core.database import get_session
from seating.core.events import event_bus
from seating.core.exceptions import SeatingError
from seating.models.booking import Booking
from seating.services.allocation import AllocationCoordinator
from seating.services.booking_queue import BookingQueue

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/book", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(booking_data: BookingCreate, session: Session = Depends(get_session)):
    """Add a party to the waiting queue"""
    queue = BookingQueue(session)
    try:
        booking = await run_in_threadpool(queue.create, Booking(
            customer_name=booking_data.customer_name,
            customer_phone=booking_data.customer_phone,
            party_size=booking_data.party_size,
            booking_time=booking_data.booking_time,
            special_requests=booking_data.special_requests,
        ))
    except SeatingError as e:
        logger.info(f"Rejected booking for {booking_data.customer_name!r}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        session.rollback()
        logger.error(f"Error creating booking: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create booking"
        )

    logger.info(
        f"Booking {booking.id} created for party of {booking.party_size}, "
        f"estimated wait {booking.estimated_wait_time} min"
    )
    for event in queue.drain_events():
        await event_bus.publish(event)
    return booking


@router.get("/bookings", response_model=List[BookingRead])
async def list_bookings(
    phone: Optional[str] = Query(None, description="Filter by customer phone"),
    start: Optional[datetime] = Query(None, description="Earliest booking time"),
    end: Optional[datetime] = Query(None, description="Latest booking time"),
    session: Session = Depends(get_session)
):
    """List bookings, optionally by phone or booking-time range"""
    queue = BookingQueue(session)
    try:
        if phone:
            return await run_in_threadpool(queue.list_by_phone, phone)
        if start is not None or end is not None:
            if start is None or end is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Both start and end are required for a time range"
                )
            return await run_in_threadpool(queue.list_between, start, end)
        return await run_in_threadpool(queue.list_all)
    except SeatingError as e:
        raise to_http_exception(e)


@router.get("/bookings/waiting", response_model=List[BookingRead])
async def list_waiting_bookings(session: Session = Depends(get_session)):
    """List waiting bookings, first come first served"""
    return await run_in_threadpool(BookingQueue(session).list_waiting)


@router.get("/bookings/{booking_id}", response_model=BookingRead)
async def get_booking(booking_id: int, session: Session = Depends(get_session)):
    """Get booking by ID"""
    try:
        return await run_in_threadpool(BookingQueue(session).get, booking_id)
    except SeatingError as e:
        raise to_http_exception(e)


@router.put("/bookings/{booking_id}/seat/{table_id}", response_model=BookingRead)
async def seat_booking(
    booking_id: int,
    table_id: int,
    version: Optional[int] = Query(None, description="Expected booking version"),
    session: Session = Depends(get_session)
):
    """Seat a waiting party at a table"""
    coordinator = AllocationCoordinator(session)
    try:
        booking = await run_in_threadpool(
            coordinator.seat, booking_id, table_id, expected_version=version
        )
    except SeatingError as e:
        logger.info(f"Could not seat booking {booking_id} at table {table_id}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        session.rollback()
        logger.error(f"Error seating booking: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to seat booking"
        )

    logger.info(f"Booking {booking_id} seated at table {table_id}")
    for event in coordinator.drain_events():
        await event_bus.publish(event)
    return booking


@router.put("/bookings/{booking_id}/complete", response_model=BookingRead)
async def complete_booking(
    booking_id: int,
    version: Optional[int] = Query(None, description="Expected booking version"),
    session: Session = Depends(get_session)
):
    """Check a party out and free its table"""
    coordinator = AllocationCoordinator(session)
    try:
        booking = await run_in_threadpool(coordinator.complete, booking_id, expected_version=version)
    except SeatingError as e:
        logger.info(f"Could not complete booking {booking_id}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        session.rollback()
        logger.error(f"Error completing booking: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to complete booking"
        )

    logger.info(f"Booking {booking_id} completed, table {booking.table_id} released")
    for event in coordinator.drain_events():
        await event_bus.publish(event)
    return booking


@router.delete("/bookings/{booking_id}", response_model=BookingRead)
async def cancel_booking(
    booking_id: int,
    version: Optional[int] = Query(None, description="Expected booking version"),
    session: Session = Depends(get_session)
):
    """Cancel a booking"""
    queue = BookingQueue(session)
    try:
        booking = await run_in_threadpool(queue.cancel, booking_id, expected_version=version)
    except SeatingError as e:
        logger.info(f"Could not cancel booking {booking_id}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        session.rollback()
        logger.error(f"Error cancelling booking: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to cancel booking"
        )

    logger.info(f"Booking {booking_id} cancelled")
    for event in queue.drain_events():
        await event_bus.publish(event)
    return booking
