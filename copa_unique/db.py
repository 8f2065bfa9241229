# copa_unique/db.py
"""
Database Connection Management

Version: 1.0.0
Features:
- Singleton pattern with thread-safe double-checked locking
- Connection pooling with auto-reconnect
- Health check utilities
- Query execution helpers
- Paginated fetch that always returns the complete result set
"""

import pandas as pd
from sqlalchemy import create_engine, text
from sqlalchemy.pool import QueuePool
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from urllib.parse import quote_plus
import logging
import threading
from typing import Tuple, Optional, Dict, Any, List
from contextlib import contextmanager

from .config import config

logger = logging.getLogger(__name__)


class RecordFetchError(Exception):
    """Raised when the record store cannot deliver a complete result set."""


# ==================== SINGLETON ENGINE ====================

_engine = None
_engine_lock = threading.Lock()


def get_db_engine():
    """
    Get SQLAlchemy database engine (singleton pattern)

    Thread-safe implementation using double-checked locking.
    Reuses the same engine across all calls to prevent
    connection pool exhaustion.

    Returns:
        SQLAlchemy Engine instance
    """
    global _engine

    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = _create_engine()

    return _engine


def set_db_engine(engine) -> None:
    """Install an externally built engine (tests, scripts)."""
    global _engine

    with _engine_lock:
        _engine = engine


def _create_engine():
    """Create new database engine with configured settings"""
    db_config = config.get_db_config()
    app_config = config.app_config

    driver = db_config["driver"]
    user = db_config["user"]
    password = quote_plus(str(db_config["password"]))
    host = db_config["host"]
    port = db_config["port"]
    database = db_config["database"]

    url = f"{driver}://{user}:{password}@{host}:{port}/{database}"

    logger.info(f"🔌 Creating database engine: {driver}://{user}:***@{host}:{port}/{database}")

    pool_size = app_config.get("DB_POOL_SIZE", 5)
    pool_recycle = app_config.get("DB_POOL_RECYCLE", 3600)

    engine = create_engine(
        url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,  # Auto-reconnect on stale connections
        echo=False
    )

    logger.info(f"✅ Database engine created (pool_size={pool_size}, recycle={pool_recycle}s)")

    return engine


# ==================== CONNECTION MANAGEMENT ====================

def check_db_connection() -> Tuple[bool, Optional[str]]:
    """
    Check if database connection is healthy

    Returns:
        Tuple of (is_connected: bool, error_message: str or None)
    """
    try:
        engine = get_db_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, None
    except OperationalError as e:
        error_msg = "Cannot connect to database. Please check your network connection."
        logger.error(f"❌ Database connection failed: {e}")
        return False, error_msg
    except Exception as e:
        error_msg = f"Database error: {str(e)}"
        logger.error(f"❌ Database error: {e}")
        return False, error_msg


def reset_db_engine():
    """
    Reset the database engine (force new connection)

    Call this after persistent connection errors or
    when you need to reconnect with different settings.
    """
    global _engine

    with _engine_lock:
        if _engine is not None:
            try:
                _engine.dispose()
                logger.info("🔄 Database engine disposed")
            except Exception as e:
                logger.error(f"Error disposing engine: {e}")
            _engine = None

    logger.info("🔄 Database engine reset - will reconnect on next query")


@contextmanager
def get_connection():
    """
    Context manager for database connections

    Usage:
        with get_connection() as conn:
            result = conn.execute(text("SELECT * FROM table"))
    """
    engine = get_db_engine()
    conn = engine.connect()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


# ==================== QUERY HELPERS ====================

def execute_query(query: str, params: Dict = None) -> List[Dict]:
    """
    Execute SELECT query and return results as list of dicts
    """
    engine = get_db_engine()

    with engine.connect() as conn:
        result = conn.execute(text(query), params or {})
        return [dict(row._mapping) for row in result]


def execute_query_df(query: str, params: Dict = None) -> pd.DataFrame:
    """
    Execute SELECT query and return results as DataFrame
    """
    engine = get_db_engine()
    return pd.read_sql(text(query), engine, params=params or {})


def fetch_all_paginated(
    query: str,
    params: Dict = None,
    page_size: int = None,
    label: str = "query"
) -> pd.DataFrame:
    """
    Fetch every row of a SELECT by paging with LIMIT/OFFSET.

    The store caps responses, so a single SELECT could silently truncate.
    Pages are requested until one comes back shorter than page_size.
    The query must carry a deterministic ORDER BY.

    Args:
        query: SQL query string without LIMIT/OFFSET
        params: Query parameters
        page_size: Rows per page (defaults to FETCH_PAGE_SIZE)
        label: Name used in log lines

    Returns:
        DataFrame with the complete result set

    Raises:
        RecordFetchError: on any store error; partial pages are discarded
    """
    if page_size is None:
        page_size = config.get_app_setting("FETCH_PAGE_SIZE", 1000)
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")

    paged_query = text(f"{query} LIMIT :_limit OFFSET :_offset")
    base_params = dict(params or {})
    pages = []
    offset = 0

    try:
        engine = get_db_engine()
        with engine.connect() as conn:
            while True:
                page_params = {**base_params, '_limit': page_size, '_offset': offset}
                page = pd.read_sql(paged_query, conn, params=page_params)
                pages.append(page)

                if len(page) < page_size:
                    break
                offset += page_size
    except (SQLAlchemyError, pd.errors.DatabaseError) as e:
        logger.error(f"❌ Error fetching {label} (offset={offset}): {e}")
        raise RecordFetchError(f"Could not load {label}") from e

    df = pd.concat(pages, ignore_index=True) if len(pages) > 1 else pages[0]
    logger.info(f"Fetched {label}: {len(df)} rows in {len(pages)} page(s)")
    return df


# ==================== EXPORTS ====================

__all__ = [
    'RecordFetchError',
    'get_db_engine',
    'set_db_engine',
    'check_db_connection',
    'reset_db_engine',
    'get_connection',
    'execute_query',
    'execute_query_df',
    'fetch_all_paginated',
]
