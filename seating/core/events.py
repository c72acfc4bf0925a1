"""
Domain events system

Seating events are published after a transition commits so that outside
collaborators (pagers, dashboards) can react without the engine knowing
about them.
"""

from typing import Any, Callable, Dict, List, Optional
import uuid
import structlog

from seating.core.clock import utcnow

logger = structlog.get_logger(__name__)


class DomainEvent:
    """Base class for domain events"""

    def __init__(self, event_id: uuid.UUID = None):
        self.event_id = event_id or uuid.uuid4()
        self.occurred_at = utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary"""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "event_type": self.__class__.__name__
        }


class BookingCreated(DomainEvent):
    """Event fired when a party joins the waiting queue"""

    def __init__(
        self,
        booking_id: int,
        party_size: int,
        estimated_wait_time: int,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.booking_id = booking_id
        self.party_size = party_size
        self.estimated_wait_time = estimated_wait_time

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "booking_id": self.booking_id,
            "party_size": self.party_size,
            "estimated_wait_time": self.estimated_wait_time
        })
        return data


class BookingSeated(DomainEvent):
    """Event fired when a waiting party is seated at a table"""

    def __init__(self, booking_id: int, table_id: int, event_id: uuid.UUID = None):
        super().__init__(event_id)
        self.booking_id = booking_id
        self.table_id = table_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "booking_id": self.booking_id,
            "table_id": self.table_id
        })
        return data


class BookingCompleted(DomainEvent):
    """Event fired when a party checks out"""

    def __init__(
        self,
        booking_id: int,
        released_table_id: Optional[int] = None,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.booking_id = booking_id
        self.released_table_id = released_table_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "booking_id": self.booking_id,
            "released_table_id": self.released_table_id
        })
        return data


class BookingCancelled(DomainEvent):
    """Event fired when a booking is cancelled"""

    def __init__(
        self,
        booking_id: int,
        previous_status: str,
        held_table_id: Optional[int] = None,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.booking_id = booking_id
        self.previous_status = previous_status
        self.held_table_id = held_table_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "booking_id": self.booking_id,
            "previous_status": self.previous_status,
            "held_table_id": self.held_table_id
        })
        return data


class TableStatusChanged(DomainEvent):
    """Event fired when staff overwrite a table's status"""

    def __init__(
        self,
        table_id: int,
        status: str,
        previous_status: Optional[str] = None,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.table_id = table_id
        self.status = status
        self.previous_status = previous_status

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "table_id": self.table_id,
            "status": self.status,
            "previous_status": self.previous_status
        })
        return data


class EventBus:
    """Simple in-memory event bus for publishing domain events"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, handler: Callable):
        """Subscribe to a specific event type"""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)
        logger.debug(f"Subscribed handler to event type: {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable):
        """Unsubscribe from an event type"""
        if event_type in self._subscribers:
            self._subscribers[event_type].remove(handler)
            logger.debug(f"Unsubscribed handler from event type: {event_type}")

    async def publish(self, event: DomainEvent):
        """Publish an event to all subscribers"""
        event_type = event.__class__.__name__
        handlers = self._subscribers.get(event_type, [])

        if not handlers:
            logger.debug(f"No subscribers for event type: {event_type}")
            return

        logger.info(f"Publishing event {event_type}: {event.event_id}")

        for handler in handlers:
            # A failing subscriber must not undo a committed transition
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event_type}: {e}", exc_info=True)

    def clear_subscribers(self):
        """Clear all subscribers (useful for testing)"""
        self._subscribers.clear()
        logger.debug("Cleared all event subscribers")


# Global event bus instance
event_bus = EventBus()
