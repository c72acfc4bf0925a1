"""
Restaurant Seating - Main Application Entry Point
Table availability, waiting queue and seating transitions
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import sys
import structlog

from seating.core.config import get_settings
from seating.core.database import init_db
from seating.api import bookings, tables, waiting_time

settings = get_settings()


def configure_logging(level: str = "INFO", json_logs: bool = True):
    """Configure structured logging"""
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level.upper())
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Initializing seating service")
    if settings.AUTO_CREATE_TABLES:
        init_db()
    else:
        logger.info("Database managed by Alembic migrations")

    yield

    # Shutdown
    logger.info("Shutting down seating service")


# Create FastAPI application
app = FastAPI(
    title="Restaurant Seating API",
    description="Table availability, waiting queue and wait-time estimates",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Booking and wait-time routes share the tables prefix and must be matched
# before the /{table_id} route
tables_prefix = f"{settings.API_V1_PREFIX}/tables"
app.include_router(waiting_time.router, prefix=tables_prefix, tags=["waiting-time"])
app.include_router(bookings.router, prefix=tables_prefix, tags=["bookings"])
app.include_router(tables.router, prefix=tables_prefix, tags=["tables"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "restaurant-seating-api"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "seating.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
