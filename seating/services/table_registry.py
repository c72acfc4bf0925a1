"""
Table registry: the authoritative set of physical tables and their status
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import func, select

from seating.core.clock import utcnow
from seating.core.events import TableStatusChanged
from seating.core.exceptions import NotFoundError, ValidationError
from seating.core.locking import TABLE
from seating.models.table import Table, TableStatus
from seating.services.base import SessionService


class TableRegistry(SessionService):
    """Stores tables and answers availability queries"""

    def list_all(self) -> List[Table]:
        return list(self.session.exec(select(Table).order_by(Table.table_number)).all())

    def list_available(self, min_capacity: Optional[int] = None) -> List[Table]:
        """AVAILABLE tables; with ``min_capacity`` the smallest adequate table comes first"""
        query = select(Table).where(Table.status == TableStatus.AVAILABLE)
        if min_capacity is None:
            query = query.order_by(Table.table_number)
        else:
            query = (
                query.where(Table.capacity >= min_capacity)
                .order_by(Table.capacity, Table.table_number)
            )
        return list(self.session.exec(query).all())

    def list_by_min_capacity(self, min_capacity: int) -> List[Table]:
        """Tables of any status seating at least ``min_capacity``"""
        return list(self.session.exec(
            select(Table)
            .where(Table.capacity >= min_capacity)
            .order_by(Table.capacity, Table.table_number)
        ).all())

    def get(self, table_id: int) -> Table:
        return self._fetch(Table, TABLE, table_id)

    def get_by_number(self, table_number: int) -> Table:
        table = self.session.exec(
            select(Table).where(Table.table_number == table_number)
        ).first()
        if table is None:
            raise NotFoundError("table number", table_number)
        return table

    def count_by_status(self, status: TableStatus) -> int:
        return self.session.exec(
            select(func.count()).select_from(Table).where(Table.status == status)
        ).one()

    def create(self, table: Table) -> Table:
        """Register a new table

        Raises ValidationError for a non-positive capacity or a missing or
        duplicate table number. Nothing is stored on failure.
        """
        if table.capacity is None or table.capacity < 1:
            raise ValidationError("Capacity must be at least 1")
        if table.table_number is None or table.table_number < 1:
            raise ValidationError("Table number is required and must be positive")

        existing = self.session.exec(
            select(Table.id).where(Table.table_number == table.table_number)
        ).first()
        if existing is not None:
            raise ValidationError(f"Table number {table.table_number} already exists")

        table.id = None
        table.version = 1
        table.created_at = utcnow()
        table.updated_at = None
        try:
            self._commit(table)
        except IntegrityError:
            # Lost a race with a concurrent create of the same number
            raise ValidationError(f"Table number {table.table_number} already exists")
        return table

    def set_status(
        self,
        table_id: int,
        new_status: TableStatus,
        expected_version: Optional[int] = None,
    ) -> Table:
        """Overwrite a table's status

        Any status may follow any other; staff use this to reserve tables,
        take them out of service and correct mistakes.
        """
        try:
            new_status = TableStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown table status: {new_status}")

        with self.locks.hold((TABLE, table_id)):
            try:
                table = self._fetch_for_update(Table, TABLE, table_id)
                self._check_version(table, TABLE, expected_version)
            except Exception:
                self.session.rollback()
                raise
            previous = table.status
            table.mark(new_status)
            self._commit(table)

        self._record(TableStatusChanged(
            table_id=table.id,
            status=table.status.value,
            previous_status=previous.value,
        ))
        return table
