import os
import sys
from collections import defaultdict
from datetime import datetime, timezone
from threading import Lock, Thread
from time import perf_counter, sleep, time
from typing import DefaultDict, Dict, List, Optional, Tuple, TypedDict

import structlog

logger = structlog.get_logger("lifestyle.metrics")


class EndpointSnapshot(TypedDict):
    method: str
    endpoint: str
    count: int
    avg_latency_ms: float
    total_latency_ms: float
    errors_4xx: int
    errors_5xx: int


class MetricsSnapshot(TypedDict):
    requests_total: int
    total_latency_ms: float
    avg_latency_ms: float
    errors_total: Dict[str, int]
    status_counts: Dict[str, int]
    endpoints: List[EndpointSnapshot]
    last_updated: Optional[str]


class EndpointBucket(TypedDict):
    count: int
    total_latency_ms: float
    errors_4xx: int
    errors_5xx: int


def _new_bucket() -> EndpointBucket:
    return EndpointBucket(count=0, total_latency_ms=0.0, errors_4xx=0, errors_5xx=0)


class _MetricsState:
    def __init__(self) -> None:
        self.requests_total = 0
        self.latency_total_ms = 0.0
        self.errors_4xx = 0
        self.errors_5xx = 0
        self.status_counts: DefaultDict[int, int] = defaultdict(int)
        self.per_endpoint: DefaultDict[Tuple[str, str], EndpointBucket] = defaultdict(
            _new_bucket
        )
        self.last_updated: Optional[float] = None


_state = _MetricsState()
_lock = Lock()
_logger_thread: Optional[Thread] = None
SERVER_START_TIME = time()
_LOG_INTERVAL_SECONDS = int(os.environ.get("METRICS_LOG_INTERVAL_SECONDS", "60"))


def record_request_metrics(
    method: str,
    endpoint: str,
    status_code: int,
    duration_ms: float,
) -> None:
    key = ((method or "GET").upper(), endpoint or "<unmatched>")
    client_error = 400 <= status_code < 500
    server_error = status_code >= 500

    with _lock:
        bucket = _state.per_endpoint[key]
        bucket["count"] += 1
        bucket["total_latency_ms"] += duration_ms
        _state.requests_total += 1
        _state.latency_total_ms += duration_ms
        _state.status_counts[status_code] += 1
        if client_error:
            bucket["errors_4xx"] += 1
            _state.errors_4xx += 1
        if server_error:
            bucket["errors_5xx"] += 1
            _state.errors_5xx += 1
        _state.last_updated = time()


def now_perf_counter() -> float:
    """Indirection so tests can monkeypatch perf_counter reliably."""
    return getattr(sys.modules[__name__], "perf_counter")()


def reset_metrics_state() -> None:
    """Reset the in-memory metrics store. Intended for use in tests."""
    global _state
    with _lock:
        _state = _MetricsState()


def _format_timestamp(ts: Optional[float]) -> Optional[str]:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def get_metrics_json() -> MetricsSnapshot:
    with _lock:
        total = _state.requests_total
        endpoints = [
            EndpointSnapshot(
                method=method,
                endpoint=endpoint,
                count=bucket["count"],
                avg_latency_ms=round(
                    bucket["total_latency_ms"] / bucket["count"] if bucket["count"] else 0.0,
                    2,
                ),
                total_latency_ms=round(bucket["total_latency_ms"], 2),
                errors_4xx=bucket["errors_4xx"],
                errors_5xx=bucket["errors_5xx"],
            )
            for (method, endpoint), bucket in _state.per_endpoint.items()
        ]
        endpoints.sort(key=lambda item: (item["endpoint"], item["method"]))
        return MetricsSnapshot(
            requests_total=total,
            total_latency_ms=round(_state.latency_total_ms, 2),
            avg_latency_ms=round(_state.latency_total_ms / total if total else 0.0, 2),
            errors_total={"4xx": _state.errors_4xx, "5xx": _state.errors_5xx},
            status_counts={str(code): count for code, count in _state.status_counts.items()},
            endpoints=endpoints,
            last_updated=_format_timestamp(_state.last_updated),
        )


def get_metrics_text() -> str:
    snapshot = get_metrics_json()
    lines = [
        "# HELP lifestyle_requests_total Total HTTP requests processed by the lifestyle service",
        "# TYPE lifestyle_requests_total counter",
    ]
    for entry in snapshot["endpoints"]:
        lines.append(
            f'lifestyle_requests_total{{method="{entry["method"]}",endpoint="{entry["endpoint"]}"}} '
            f'{entry["count"]}'
        )
    lines.extend(
        [
            "# HELP lifestyle_request_latency_ms_total Cumulative request latency in milliseconds",
            "# TYPE lifestyle_request_latency_ms_total counter",
        ]
    )
    for entry in snapshot["endpoints"]:
        lines.append(
            f'lifestyle_request_latency_ms_total{{method="{entry["method"]}",endpoint="{entry["endpoint"]}"}} '
            f'{entry["total_latency_ms"]}'
        )
    lines.extend(
        [
            "# HELP lifestyle_requests_errors_total Request error counts grouped by class",
            "# TYPE lifestyle_requests_errors_total counter",
        ]
    )
    for error_class, value in snapshot["errors_total"].items():
        lines.append(f'lifestyle_requests_errors_total{{type="{error_class}"}} {value}')
    return "\n".join(lines) + "\n"


def _metrics_logger_loop() -> None:
    while True:
        sleep(_LOG_INTERVAL_SECONDS)
        logger.info("metrics.snapshot", metrics=get_metrics_json())


def ensure_metrics_logger_started() -> None:
    global _logger_thread
    if _logger_thread and _logger_thread.is_alive():
        return
    thread = Thread(target=_metrics_logger_loop, daemon=True, name="metrics-logger")
    thread.start()
    _logger_thread = thread
