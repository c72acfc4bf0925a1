"""
Table model for restaurant seating
"""

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum

from seating.core.clock import utcnow


class TableStatus(str, Enum):
    """Status of a physical table"""
    AVAILABLE = "AVAILABLE"         # Free to seat a party
    OCCUPIED = "OCCUPIED"           # A party is seated
    RESERVED = "RESERVED"           # Held by staff for an upcoming party
    OUT_OF_ORDER = "OUT_OF_ORDER"   # Not usable


class Table(SQLModel, table=True):
    """Physical table in the dining room"""

    __tablename__ = "restaurant_tables"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Table details
    table_number: int = Field(
        unique=True,
        index=True,
        description="Number painted on the table, unique across the room"
    )
    capacity: int = Field(description="Number of seats")
    location_description: Optional[str] = Field(
        default=None,
        max_length=255,
        nullable=True,
        description="Free-text note, e.g. 'window, near bar'"
    )

    # Status
    status: TableStatus = Field(default=TableStatus.AVAILABLE, index=True)

    # Optimistic concurrency control
    version: int = Field(
        default=1,
        description="Version number for optimistic concurrency control"
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    def is_available(self) -> bool:
        """Check if the table is free to seat a party"""
        return self.status == TableStatus.AVAILABLE

    def mark(self, status: TableStatus) -> None:
        """Overwrite the status and bump the version"""
        self.status = status
        self.updated_at = utcnow()
        self.version += 1
