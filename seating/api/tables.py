"""
Tables API endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session
from typing import List, Optional
import structlog

from seating.api.errors import to_http_exception
from seating.api.schemas import TableCreate, TableRead
from seating.core.database import get_session
from seating.core.events import event_bus
from seating.core.exceptions import SeatingError
from seating.models.table import Table, TableStatus
from seating.services.table_registry import TableRegistry

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/", response_model=List[TableRead])
async def list_tables(session: Session = Depends(get_session)):
    """List all tables"""
    return await run_in_threadpool(TableRegistry(session).list_all)


@router.get("/available", response_model=List[TableRead])
async def list_available_tables(
    min_capacity: Optional[int] = Query(None, ge=1, description="Only tables seating at least this many"),
    session: Session = Depends(get_session)
):
    """List available tables, smallest adequate table first when a capacity is given"""
    return await run_in_threadpool(TableRegistry(session).list_available, min_capacity)


@router.get("/available/{capacity}", response_model=List[TableRead])
async def list_available_tables_by_capacity(
    capacity: int,
    session: Session = Depends(get_session)
):
    """List available tables seating at least ``capacity`` guests"""
    return await run_in_threadpool(TableRegistry(session).list_available, capacity)


@router.get("/{table_id}", response_model=TableRead)
async def get_table(table_id: int, session: Session = Depends(get_session)):
    """Get table by ID"""
    try:
        return await run_in_threadpool(TableRegistry(session).get, table_id)
    except SeatingError as e:
        raise to_http_exception(e)


@router.post("/", response_model=TableRead, status_code=status.HTTP_201_CREATED)
async def create_table(table_data: TableCreate, session: Session = Depends(get_session)):
    """Create a new table"""
    try:
        table = await run_in_threadpool(TableRegistry(session).create, Table(
            table_number=table_data.table_number,
            capacity=table_data.capacity,
            status=table_data.status,
            location_description=table_data.location_description,
        ))
    except SeatingError as e:
        logger.info(f"Rejected table {table_data.table_number}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        session.rollback()
        logger.error(f"Error creating table: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create table"
        )

    logger.info(f"Table created: {table.id} (number {table.table_number}, {table.capacity} seats)")
    return table


@router.put("/{table_id}/status", response_model=TableRead)
async def update_table_status(
    table_id: int,
    status_value: TableStatus = Query(..., alias="status"),
    version: Optional[int] = Query(None, description="Expected version for optimistic concurrency"),
    session: Session = Depends(get_session)
):
    """Overwrite a table's status"""
    registry = TableRegistry(session)
    try:
        table = await run_in_threadpool(
            registry.set_status, table_id, status_value, expected_version=version
        )
    except SeatingError as e:
        raise to_http_exception(e)
    except Exception as e:
        session.rollback()
        logger.error(f"Error updating table status: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update table status"
        )

    logger.info(f"Table {table_id} status set to {table.status.value}")
    for event in registry.drain_events():
        await event_bus.publish(event)
    return table
