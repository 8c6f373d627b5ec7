import math
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

MAX_ENTRY_VALUE = 1_000_000
MAX_USER_ID = 2**63 - 1  # BIGINT


def parse_local_datetime(value: str) -> datetime:
    """Parse an ISO-8601 date-time into a naive local datetime at second precision."""
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed.replace(microsecond=0)


class LifestyleEntryPayload(BaseModel):
    """Request shape for creating a lifestyle entry.

    Fields default to ``None`` and are validated anyway so that an absent key
    and an explicit ``null`` both report the same "is required" message.
    Blank ``type`` strings pass through; the entry validator rejects them.
    """

    userId: Optional[int] = Field(default=None, validate_default=True, strict=True)
    type: Optional[str] = Field(default=None, validate_default=True)
    value: Optional[float] = Field(default=None, validate_default=True, allow_inf_nan=False)
    timestamp: Optional[str] = Field(default=None, validate_default=True)

    model_config = ConfigDict(extra="ignore")

    @field_validator("userId")
    @classmethod
    def validate_user_id(cls, value: Optional[int]) -> int:
        if value is None:
            raise ValueError("User ID is required")
        if value <= 0:
            raise ValueError("User ID must be positive")
        if value > MAX_USER_ID:
            raise ValueError("User ID is too large")
        return value

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("Type is required")
        return value

    @field_validator("value", mode="before")
    @classmethod
    def reject_boolean_value(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise PydanticCustomError("float_type", "Input should be a valid number")
        return value

    @field_validator("value")
    @classmethod
    def validate_value(cls, value: Optional[float]) -> float:
        if value is None:
            raise ValueError("Value is required")
        if not math.isfinite(value):
            raise PydanticCustomError("finite_number", "Input should be a finite number")
        if value <= 0:
            raise ValueError("Value must be positive")
        if value > MAX_ENTRY_VALUE:
            raise ValueError("Value is too large")
        return value

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, value: Optional[str], info: ValidationInfo) -> str:
        if value is None:
            raise ValueError("Timestamp is required")
        try:
            parsed = parse_local_datetime(value)
        except ValueError:
            raise PydanticCustomError(
                "datetime_parsing", "Timestamp must be an ISO-8601 local date-time"
            )
        now = (info.context or {}).get("now") or datetime.now()
        if parsed > now:
            raise ValueError("Timestamp cannot be in the future")
        return parsed.isoformat()

    @property
    def parsed_timestamp(self) -> datetime:
        return datetime.fromisoformat(self.timestamp)


class EntryListQuery(BaseModel):
    userId: Optional[int] = Field(default=None, validate_default=True)
    type: Optional[str] = None
    start: Optional[str] = Field(default=None, alias="from")
    end: Optional[str] = Field(default=None, alias="to")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("userId")
    @classmethod
    def validate_user_id(cls, value: Optional[int]) -> int:
        if value is None:
            raise ValueError("User ID is required")
        if value <= 0:
            raise ValueError("User ID must be positive")
        if value > MAX_USER_ID:
            raise ValueError("User ID is too large")
        return value

    @field_validator("type", "start", "end", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("start", "end")
    @classmethod
    def validate_bound(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        try:
            return parse_local_datetime(value).isoformat()
        except ValueError:
            raise ValueError("must be an ISO-8601 local date-time")

    @property
    def start_at(self) -> Optional[datetime]:
        return datetime.fromisoformat(self.start) if self.start else None

    @property
    def end_at(self) -> Optional[datetime]:
        return datetime.fromisoformat(self.end) if self.end else None
