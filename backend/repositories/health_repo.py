"""Repository helpers for health checks."""

from extensions import db_connection


def check_database_connection() -> bool:
    """Ping the database and confirm the entries table is reachable."""
    conn = db_connection()
    try:
        conn.execute("SELECT COUNT(*) FROM lifestyle_entries").scalar()
    finally:
        conn.close()
    return True
