import logging
import os
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from utils.config import DATABASE_URL, DATABASE_ECHO

logger = logging.getLogger(__name__)


def build_engine(url: str):
    """
    Creates the SQLAlchemy engine for the given URL.

    SQLite connections are shared across the request threads FastAPI uses for
    sync endpoints, and in-memory databases are pinned to a single connection so
    every session sees the same schema.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=DATABASE_ECHO, pool_pre_ping=True)

    kwargs = {"echo": DATABASE_ECHO, "connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    else:
        db_path = url.replace("sqlite:///", "", 1)
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    sqlite_engine = create_engine(url, **kwargs)

    # SQLite only enforces ON DELETE CASCADE with foreign keys switched on
    @event.listens_for(sqlite_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def check_connection() -> bool:
    """
    Runs a trivial query against the database.

    Returns:
        bool: True when the database answered, False otherwise.
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False


def get_db_session():
    """
    Provides a database session for a single request and makes sure it
    gets closed once the request is done.

    Yields:
        Session: A database session.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
