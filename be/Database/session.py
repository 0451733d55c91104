"""
Database Session Configuration

This module handles the SQLAlchemy database connection and session management
for the project planning API. It sets up the database engine, session factory,
the declarative base used by every model, and the transaction scope used by
the write paths.

Key Components:
1. Database Engine: SQLAlchemy engine with connection pooling
2. Session Factory: Creates database sessions for transactions
3. Base Model: Declarative base class for all ORM models
4. transaction(): commit-or-rollback scope around one unit of work
5. wait_for_database(): bounded startup retry while the database comes up

Environment Variables:
- DATABASE_URL: Complete database connection string. When absent it is built
  from DB_HOST, DB_PORT, DB_USER, DB_PASSWORD, DB_NAME and DB_SSLMODE.
  Without DB_HOST a local SQLite file is used.
- SQL_ECHO: "true" enables SQL query logging
- DB_CONNECT_TIMEOUT, DB_CONNECT_ATTEMPTS, DB_CONNECT_RETRY_DELAY

Usage:
    from Database.session import Session, transaction

    db = Session()
    try:
        with transaction(db):
            db.add(model)
    finally:
        db.close()
"""

import logging
import os
import sqlite3
import time
from contextlib import contextmanager
from urllib.parse import quote_plus

from dotenv import load_dotenv
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, declarative_base

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = int(os.getenv("DB_CONNECT_TIMEOUT", "2"))
CONNECT_ATTEMPTS = int(os.getenv("DB_CONNECT_ATTEMPTS", "10"))
CONNECT_RETRY_DELAY = float(os.getenv("DB_CONNECT_RETRY_DELAY", "1"))


def build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    host = os.getenv("DB_HOST")
    if not host:
        return "sqlite:///./planning.db"

    port = os.getenv("DB_PORT", "5432")
    user = quote_plus(os.getenv("DB_USER", "postgres"))
    password = quote_plus(os.getenv("DB_PASSWORD", ""))
    name = os.getenv("DB_NAME", "postgres")
    sslmode = os.getenv("DB_SSLMODE", "disable")
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}?sslmode={sslmode}"


def engine_connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    if url.startswith("postgresql"):
        return {"connect_timeout": CONNECT_TIMEOUT}
    return {}


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


db_url = build_database_url()

# Create SQLAlchemy engine
engine = create_engine(
    db_url,
    echo=os.getenv("SQL_ECHO", "false").lower() == "true",
    pool_pre_ping=True,
    connect_args=engine_connect_args(db_url),
)

# autoflush=False: Manual control over when changes are flushed to database
# autocommit=False: Manual control over transaction commits
Session = sessionmaker(autoflush=False, autocommit=False, bind=engine)

# All ORM models inherit from this Base class
Base = declarative_base()


@contextmanager
def transaction(db):
    """Commit the session when the block succeeds, roll it back on any error."""
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise


def wait_for_database(bind=None, attempts: int = CONNECT_ATTEMPTS, delay: float = CONNECT_RETRY_DELAY):
    """Ping the database until it answers, at most `attempts` times."""
    bind = bind or engine
    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            with bind.connect() as connection:
                connection.execute(text("SELECT 1"))
            if attempt > 1:
                logger.info("Database reachable after %d attempts", attempt)
            return
        except OperationalError as e:
            last_error = e
            logger.warning("Database not reachable (attempt %d/%d): %s", attempt, attempts, e)
            if attempt < attempts:
                time.sleep(delay)
    raise last_error
