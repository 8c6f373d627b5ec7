"""Repository coordinating lifestyle entry storage and retrieval."""

from datetime import datetime
from typing import Any, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from db_utils import from_db_timestamp, to_db_timestamp
from extensions import db_connection, db_transaction


class RepositoryError(Exception):
    """Raised when the store cannot complete a read or write."""


_ENTRY_COLUMNS = "id, user_id, type, value, timestamp"


def _row_to_entry(row: Mapping[str, Any]) -> dict:
    return {
        "id": int(row["id"]),
        "user_id": int(row["user_id"]),
        "type": row["type"],
        "value": float(row["value"]),
        "timestamp": from_db_timestamp(row["timestamp"]),
    }


def insert_entry(user_id: int, entry_type: str, value: float, timestamp: datetime) -> dict:
    """Insert one entry and return it with the id assigned by the database."""
    try:
        with db_transaction() as conn:
            row = conn.execute(
                f"""
                INSERT INTO lifestyle_entries (user_id, type, value, timestamp)
                VALUES (?, ?, ?, ?)
                RETURNING {_ENTRY_COLUMNS}
                """,
                (user_id, entry_type, float(value), to_db_timestamp(timestamp)),
            ).fetchone()
    except SQLAlchemyError as exc:
        raise RepositoryError(f"Failed to insert lifestyle entry: {exc}") from exc
    if row is None:
        raise RepositoryError("Insert returned no row")
    return _row_to_entry(row)


def find_by_id(entry_id: int) -> Optional[dict]:
    conn = db_connection()
    try:
        row = conn.execute(
            f"SELECT {_ENTRY_COLUMNS} FROM lifestyle_entries WHERE id = ?",
            (entry_id,),
        ).fetchone()
    except SQLAlchemyError as exc:
        raise RepositoryError(f"Failed to load lifestyle entry {entry_id}: {exc}") from exc
    finally:
        conn.close()
    return _row_to_entry(row) if row else None


def find_by_user_id(
    user_id: int,
    *,
    entry_type: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[dict]:
    """List a user's entries in insertion order, optionally narrowed by type and time range."""
    clauses = ["user_id = ?"]
    params: List[Any] = [user_id]
    if entry_type:
        clauses.append("type = ?")
        params.append(entry_type)
    if start is not None:
        clauses.append("timestamp >= ?")
        params.append(to_db_timestamp(start))
    if end is not None:
        clauses.append("timestamp <= ?")
        params.append(to_db_timestamp(end))

    conn = db_connection()
    try:
        rows = conn.execute(
            f"""
            SELECT {_ENTRY_COLUMNS}
            FROM lifestyle_entries
            WHERE {" AND ".join(clauses)}
            ORDER BY id ASC
            """,
            params,
        ).fetchall()
    except SQLAlchemyError as exc:
        raise RepositoryError(f"Failed to list lifestyle entries: {exc}") from exc
    finally:
        conn.close()
    return [_row_to_entry(row) for row in rows]
