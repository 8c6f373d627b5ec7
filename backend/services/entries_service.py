"""
Lifestyle entries service.

Creates entries after request-shape and business validation and maps stored
rows onto the wire-facing response shape. Independent of Flask request
handling; failures are raised as ``validation.ServiceError`` subclasses.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from repositories import entries_repo
from validation import BusinessRuleViolation, EntryNotFound, validate_entry_payload

from .entry_validator import parse_lifestyle_type, validate_entry

RESPONSE_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

logger = structlog.get_logger("lifestyle.entries")


def to_response(entry: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": entry["id"],
        "userId": entry["user_id"],
        "type": entry["type"],
        "value": float(entry["value"]),
        "timestamp": entry["timestamp"].strftime(RESPONSE_TIMESTAMP_FORMAT),
    }


def create_entry(payload: Any, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now()
    request = validate_entry_payload(payload, now=now)

    try:
        entry_type, value, timestamp = validate_entry(
            request.type, request.value, request.parsed_timestamp, now
        )
    except BusinessRuleViolation as exc:
        logger.warning(
            "entry.rejected",
            user_id=request.userId,
            reason=type(exc).__name__,
            message=exc.message,
        )
        raise

    stored = entries_repo.insert_entry(request.userId, entry_type.value, value, timestamp)
    logger.info(
        "entry.created",
        entry_id=stored["id"],
        user_id=stored["user_id"],
        type=stored["type"],
    )
    return to_response(stored)


def list_entries_by_user(
    user_id: int,
    *,
    entry_type: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    type_filter = parse_lifestyle_type(entry_type).value if entry_type else None
    rows = entries_repo.find_by_user_id(user_id, entry_type=type_filter, start=start, end=end)
    return [to_response(row) for row in rows]


def get_entry_by_id(entry_id: int) -> Dict[str, Any]:
    entry = entries_repo.find_by_id(entry_id)
    if entry is None:
        raise EntryNotFound(entry_id)
    return to_response(entry)
