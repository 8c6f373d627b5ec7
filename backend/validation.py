from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import jsonify
from pydantic import ValidationError as PydanticValidationError

from schemas import EntryListQuery, LifestyleEntryPayload

ERROR_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
SHAPE_INVALID_MESSAGE = "Input validation failed. Please check the provided data."
GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

# pydantic error types raised when a field carries the wrong JSON type.
MALFORMED_ERROR_TYPES = {
    "int_parsing",
    "int_type",
    "int_from_float",
    "float_parsing",
    "float_type",
    "string_type",
    "datetime_parsing",
    "finite_number",
}


class ServiceError(Exception):
    """Failure that maps onto the uniform error body."""

    status = 400
    error = "Bad Request"

    def __init__(self, message: str, *, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = list(details or [])


class RequestShapeInvalid(ServiceError):
    error = "Validation Failed"

    def __init__(self, details: List[str], message: str = SHAPE_INVALID_MESSAGE):
        super().__init__(message, details=details)


class MalformedPayload(ServiceError):
    error = "Invalid Request"


class BusinessRuleViolation(ServiceError):
    error = "Bad Request"


class EmptyType(BusinessRuleViolation):
    pass


class UnknownType(BusinessRuleViolation):
    pass


class TimestampTooOld(BusinessRuleViolation):
    pass


class ValueOutOfRange(BusinessRuleViolation):
    pass


class EntryNotFound(BusinessRuleViolation):
    def __init__(self, entry_id: int):
        super().__init__(f"Entry not found with id: {entry_id}")
        self.entry_id = entry_id


def error_response(
    status: int,
    error: str,
    message: str,
    details: Optional[List[str]] = None,
):
    payload = {
        "status": status,
        "error": error,
        "message": message,
        "details": list(details or []),
        "timestamp": datetime.now().strftime(ERROR_TIMESTAMP_FORMAT),
    }
    return jsonify(payload), status


def _clean_message(message: str) -> str:
    if message.startswith("Value error, "):
        return message.split(", ", 1)[1]
    return message


def _field_details(exc: PydanticValidationError) -> List[str]:
    details = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()))
        details.append(f"{field}: {_clean_message(err.get('msg') or '')}")
    return details


def validate_entry_payload(
    payload: Any, *, now: Optional[datetime] = None
) -> LifestyleEntryPayload:
    if not isinstance(payload, dict):
        raise MalformedPayload("Invalid JSON format or data type")

    try:
        return LifestyleEntryPayload.model_validate(
            payload, context={"now": now or datetime.now()}
        )
    except PydanticValidationError as exc:
        if any(err.get("type") in MALFORMED_ERROR_TYPES for err in exc.errors()):
            raise MalformedPayload(
                "Invalid data format. Please check field types and values."
            )
        raise RequestShapeInvalid(_field_details(exc))


def validate_list_query(args: Dict[str, Any]) -> EntryListQuery:
    try:
        return EntryListQuery.model_validate(dict(args))
    except PydanticValidationError as exc:
        raise RequestShapeInvalid(_field_details(exc))
