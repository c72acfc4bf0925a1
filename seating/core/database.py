"""
Database configuration and session management
"""

from sqlmodel import SQLModel, Session, create_engine
import structlog

from seating.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()


def build_engine(database_url: str, echo: bool = False):
    """Create an engine for the given URL"""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are opened from the dependency threadpool
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def init_db(bind=None):
    """Initialize database tables"""
    # Entities must be imported so their tables are registered on the metadata
    import seating.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables created")


def get_session():
    """Dependency to get database session"""
    with Session(engine) as session:
        yield session
