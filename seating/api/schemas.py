"""
API schemas for tables, bookings and wait-time statistics
"""

from pydantic import ConfigDict
from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional

from seating.models.booking import BookingStatus
from seating.models.table import TableStatus


# ============================================================================
# Table Schemas
# ============================================================================

class TableCreate(SQLModel):
    table_number: int
    capacity: int
    status: TableStatus = TableStatus.AVAILABLE
    location_description: Optional[str] = Field(default=None, max_length=255)


class TableRead(SQLModel):
    id: int
    table_number: int
    capacity: int
    status: TableStatus
    location_description: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Booking Schemas
# ============================================================================

class BookingCreate(SQLModel):
    customer_name: str
    customer_phone: str
    party_size: int
    booking_time: Optional[datetime] = None
    special_requests: Optional[str] = Field(default=None, max_length=1000)


class BookingRead(SQLModel):
    id: int
    customer_name: str
    customer_phone: str
    party_size: int
    booking_time: datetime
    table_id: Optional[int] = None
    status: BookingStatus
    estimated_wait_time: Optional[int] = None
    actual_seat_time: Optional[datetime] = None
    checkout_time: Optional[datetime] = None
    special_requests: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Wait-time Schemas
# ============================================================================

class WaitEstimate(SQLModel):
    party_size: int
    estimated_wait_time: int


class WaitingStats(SQLModel):
    average_wait: float
    waiting_count: int
    available_table_count: int
    occupied_table_count: int
