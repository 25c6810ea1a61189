import logging
from contextlib import contextmanager

from application.core.config import get_settings

logger = logging.getLogger(__name__)


@contextmanager
def get_sql_db_connection():
    """Context manager that opens and closes the SQL connection safely."""
    # Imported here so the ODBC driver manager is only needed once a connection is opened.
    import pyodbc

    settings = get_settings()
    try:
        conn = pyodbc.connect(settings.sql_url, timeout=settings.sql_timeout, readonly=True)
    except pyodbc.Error as e:
        logger.error(f"Database connection error: {e}")
        raise
    try:
        yield conn
    finally:
        conn.close()


def get_db_connection():
    """FastAPI dependency: one read-only connection per request."""
    with get_sql_db_connection() as conn:
        yield conn
