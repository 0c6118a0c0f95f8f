"""
Database engine and session handling.

WHAT: SQLite storage for deal agreements, safe zones and the privacy log
WHY: Both parties' wizards read and write the same agreement row concurrently
HOW: SQLAlchemy sync engine, WAL journal + enforced foreign keys per connection
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, event, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings
from ..utils.logger import get_logger

logger = get_logger(__name__)

SQLITE_PREFIX = "sqlite:///"


def sqlite_path(url: str) -> Optional[Path]:
    """File path of a sqlite URL, or None for other backends and in-memory DBs."""
    if not url.startswith(SQLITE_PREFIX):
        return None
    location = url[len(SQLITE_PREFIX):]
    if not location or location == ":memory:":
        return None
    return Path(location)


def build_engine(url: str) -> Engine:
    """
    Create the engine for the agreement store.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine with sqlite pragmas applied on every new connection
    """
    path = sqlite_path(url)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)

    is_sqlite = url.startswith("sqlite")
    new_engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        echo=settings.DEBUG,
    )

    if is_sqlite:
        @event.listens_for(new_engine, "connect")
        def apply_pragmas(dbapi_conn, connection_record):
            # safe_zone_id SET NULL and privacy log CASCADE depend on foreign_keys
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
Base = declarative_base()


@contextmanager
def get_db():
    """
    Unit of work around one agreement operation.

    Commits when the block exits normally, rolls back and re-raises otherwise.

    Yields:
        Session: SQLAlchemy session
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def ping_database() -> dict:
    """
    Check the agreement store for the health endpoint.

    Returns:
        Dict with availability, journal mode, row counts and error
    """
    from .models import DealAgreement, SafeZone

    try:
        with engine.connect() as conn:
            journal_mode = conn.execute(text("PRAGMA journal_mode")).scalar() if engine.dialect.name == "sqlite" else None
            safe_zones = conn.execute(select(func.count()).select_from(SafeZone.__table__)).scalar_one()
            agreements = conn.execute(select(func.count()).select_from(DealAgreement.__table__)).scalar_one()
    except Exception as e:
        logger.error(f"Database ping failed: {e}")
        return {"available": False, "journal_mode": None, "safe_zones": None, "deal_agreements": None, "error": str(e)}

    return {
        "available": True,
        "journal_mode": journal_mode,
        "safe_zones": safe_zones,
        "deal_agreements": agreements,
        "error": None,
    }


def init_db() -> list[str]:
    """
    Create missing tables.

    Returns:
        Table names known to the schema
    """
    from . import models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(bind=engine)
    tables = sorted(Base.metadata.tables)
    logger.info(f"Database ready at {settings.DATABASE_URL} (tables: {', '.join(tables)})")
    return tables


def reset_db() -> None:
    """Drop and recreate every table. Used by tests and local resets."""
    from . import models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.warning("Database reset: all agreements and safe zones removed")


def close_db():
    engine.dispose()
    logger.info("Database connections closed")
