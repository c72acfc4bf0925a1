"""
Shared plumbing for session-bound services
"""

from typing import List, Optional, Type

from sqlmodel import SQLModel, Session, select

from seating.core.events import DomainEvent
from seating.core.exceptions import ConcurrencyConflict, NotFoundError
from seating.core.locking import RowLockRegistry, row_locks


class SessionService:
    """Base for services that work inside one database session

    Events describing committed changes are queued on the service and handed
    to the caller through ``drain_events``.
    """

    def __init__(self, session: Session, locks: Optional[RowLockRegistry] = None):
        self.session = session
        self.locks = locks or row_locks
        self._events: List[DomainEvent] = []

    def drain_events(self) -> List[DomainEvent]:
        """Return and forget the events recorded since the last drain"""
        events, self._events = self._events, []
        return events

    def _record(self, event: DomainEvent) -> None:
        self._events.append(event)

    def _fetch(self, model: Type[SQLModel], entity: str, row_id: int):
        """Plain lookup, raises NotFoundError when the row is missing"""
        row = self.session.get(model, row_id)
        if row is None:
            raise NotFoundError(entity, row_id)
        return row

    def _fetch_for_update(self, model: Type[SQLModel], entity: str, row_id: int):
        """Re-read a row under SELECT ... FOR UPDATE"""
        row = self.session.exec(
            select(model)
            .where(model.id == row_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()
        if row is None:
            raise NotFoundError(entity, row_id)
        return row

    @staticmethod
    def _check_version(row, entity: str, expected_version: Optional[int]) -> None:
        if expected_version is not None and row.version != expected_version:
            raise ConcurrencyConflict(entity, row.id, expected_version, row.version)

    def _commit(self, *rows) -> None:
        """Persist ``rows`` in one transaction, rolling back on any failure"""
        try:
            for row in rows:
                self.session.add(row)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        for row in rows:
            self.session.refresh(row)
