from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import settings


def build_engine(url: str) -> Engine:
    """
    Create an engine for the given URL.

    SQLite needs check_same_thread=False: sessions are opened from the
    FastAPI threadpool and from the day scanner workers.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    sqlite_engine = create_engine(url, connect_args={"check_same_thread": False})

    @event.listens_for(sqlite_engine, "connect")
    def enable_sqlite_fk(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine = build_engine(settings.resolved_database_url)

# SessionLocal: one short-lived session per read
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

