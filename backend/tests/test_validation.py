from datetime import datetime, timedelta

import pytest
from validation import (
    MalformedPayload,
    RequestShapeInvalid,
    validate_entry_payload,
    validate_list_query,
)

NOW = datetime(2025, 6, 15, 12, 0, 0)


def _payload(**overrides):
    payload = {
        "userId": 1,
        "type": "STEPS",
        "value": 8000,
        "timestamp": "2025-06-15T11:00:00",
    }
    payload.update(overrides)
    return payload


def test_validate_entry_payload_success():
    data = validate_entry_payload(_payload(value="8000.5"), now=NOW)
    assert data.userId == 1
    assert data.type == "STEPS"
    assert data.value == 8000.5
    assert data.parsed_timestamp == datetime(2025, 6, 15, 11, 0, 0)


def test_validate_entry_payload_missing_fields_lists_each_field():
    with pytest.raises(RequestShapeInvalid) as err:
        validate_entry_payload({}, now=NOW)
    assert err.value.error == "Validation Failed"
    assert err.value.message == "Input validation failed. Please check the provided data."
    assert sorted(err.value.details) == [
        "timestamp: Timestamp is required",
        "type: Type is required",
        "userId: User ID is required",
        "value: Value is required",
    ]


def test_validate_entry_payload_null_is_treated_as_missing():
    with pytest.raises(RequestShapeInvalid) as err:
        validate_entry_payload(_payload(userId=None), now=NOW)
    assert err.value.details == ["userId: User ID is required"]


@pytest.mark.parametrize(
    "overrides, detail",
    [
        ({"userId": 0}, "userId: User ID must be positive"),
        ({"userId": -4}, "userId: User ID must be positive"),
        ({"userId": 2**63}, "userId: User ID is too large"),
        ({"value": 0}, "value: Value must be positive"),
        ({"value": -1.5}, "value: Value must be positive"),
        ({"value": 1_000_001}, "value: Value is too large"),
        ({"timestamp": "2025-06-15T12:00:01"}, "timestamp: Timestamp cannot be in the future"),
    ],
)
def test_validate_entry_payload_field_bounds(overrides, detail):
    with pytest.raises(RequestShapeInvalid) as err:
        validate_entry_payload(_payload(**overrides), now=NOW)
    assert err.value.details == [detail]


def test_validate_entry_payload_accepts_upper_clamp_and_now():
    data = validate_entry_payload(
        _payload(value=1_000_000, timestamp="2025-06-15T12:00:00"), now=NOW
    )
    assert data.value == 1_000_000
    assert data.parsed_timestamp == NOW


def test_validate_entry_payload_leaves_blank_type_to_business_rules():
    data = validate_entry_payload(_payload(type="  "), now=NOW)
    assert data.type == "  "


def test_validate_entry_payload_drops_fractional_seconds():
    data = validate_entry_payload(_payload(timestamp="2025-06-15T11:00:00.987"), now=NOW)
    assert data.parsed_timestamp == datetime(2025, 6, 15, 11, 0, 0)


def test_validate_entry_payload_converts_aware_timestamp_to_local():
    raw = "2025-06-10T08:00:00+00:00"
    expected = datetime.fromisoformat(raw).astimezone().replace(tzinfo=None)
    data = validate_entry_payload(_payload(timestamp=raw), now=NOW)
    assert data.parsed_timestamp == expected


@pytest.mark.parametrize(
    "overrides",
    [
        {"value": "lots"},
        {"userId": "abc"},
        {"userId": 1.5},
        {"userId": True},
        {"userId": "7"},
        {"value": True},
        {"value": float("nan")},
        {"value": float("inf")},
        {"value": "-Infinity"},
        {"timestamp": "yesterday"},
        {"timestamp": 1700000000},
        {"type": 7},
    ],
)
def test_validate_entry_payload_wrong_types_are_malformed(overrides):
    with pytest.raises(MalformedPayload) as err:
        validate_entry_payload(_payload(**overrides), now=NOW)
    assert err.value.error == "Invalid Request"
    assert err.value.message == "Invalid data format. Please check field types and values."


@pytest.mark.parametrize("payload", [None, [], "text", 5])
def test_validate_entry_payload_requires_object(payload):
    with pytest.raises(MalformedPayload) as err:
        validate_entry_payload(payload, now=NOW)
    assert err.value.message == "Invalid JSON format or data type"


def test_validate_entry_payload_ignores_unknown_fields():
    data = validate_entry_payload(_payload(note="morning walk"), now=NOW)
    assert data.type == "STEPS"


def test_validate_list_query_requires_user_id():
    with pytest.raises(RequestShapeInvalid) as err:
        validate_list_query({})
    assert err.value.details == ["userId: User ID is required"]


def test_validate_list_query_rejects_non_positive_user_id():
    with pytest.raises(RequestShapeInvalid) as err:
        validate_list_query({"userId": "0"})
    assert err.value.details == ["userId: User ID must be positive"]


def test_validate_list_query_parses_filters():
    query = validate_list_query(
        {"userId": "7", "type": " water ", "from": "2025-01-01T00:00:00", "to": ""}
    )
    assert query.userId == 7
    assert query.type == " water "
    assert query.start_at == datetime(2025, 1, 1)
    assert query.end_at is None


def test_validate_list_query_rejects_bad_range():
    with pytest.raises(RequestShapeInvalid) as err:
        validate_list_query({"userId": "7", "to": "soon"})
    assert err.value.details == ["to: must be an ISO-8601 local date-time"]


def test_future_check_uses_supplied_clock():
    later = NOW + timedelta(hours=2)
    data = validate_entry_payload(_payload(timestamp="2025-06-15T13:00:00"), now=later)
    assert data.parsed_timestamp == datetime(2025, 6, 15, 13, 0, 0)


def test_validate_entry_payload_accepts_64_bit_user_id():
    data = validate_entry_payload(_payload(userId=2**63 - 1), now=NOW)
    assert data.userId == 2**63 - 1
