"""
Error taxonomy for the seating engine

Services raise these; the request layer maps them to HTTP responses.
"""

from typing import Optional


class SeatingError(Exception):
    """Base class for every error raised by the seating engine"""


class ValidationError(SeatingError, ValueError):
    """Malformed input, rejected before any state is mutated"""


class NotFoundError(SeatingError, LookupError):
    """A booking or table id that does not exist"""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} {entity_id} not found")


class InvalidTransitionError(SeatingError, ValueError):
    """The requested lifecycle move is not allowed from the current status"""


class TableOccupiedError(SeatingError):
    """The table already holds a seated booking"""

    def __init__(self, table_id: int, booking_id: int):
        self.table_id = table_id
        self.booking_id = booking_id
        super().__init__(f"Table {table_id} is already occupied by booking {booking_id}")


class ConcurrencyConflict(SeatingError):
    """The row was modified by someone else; the caller should refresh and retry"""

    def __init__(self, entity: str, entity_id, expected: Optional[int], actual: int):
        self.entity = entity
        self.entity_id = entity_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{entity.capitalize()} {entity_id} was modified by another request "
            f"(expected version {expected}, found {actual})"
        )
