import time
from typing import Dict, Tuple

from infra import metrics_manager
from repositories import health_repo


def check_db_connection() -> bool:
    try:
        return health_repo.check_database_connection()
    except Exception as exc:
        metrics_manager.logger.warning("health.db_check_failed", error=str(exc))
        return False


def build_health_summary(server_start_time: float) -> Tuple[Dict[str, object], bool]:
    snapshot = metrics_manager.get_metrics_json()
    uptime_s = round(max(0.0, time.time() - server_start_time), 2)
    requests_total = snapshot["requests_total"]
    uptime_minutes = uptime_s / 60
    req_per_min = requests_total / uptime_minutes if uptime_minutes > 0 else float(requests_total)
    error_total = snapshot["errors_total"]["4xx"] + snapshot["errors_total"]["5xx"]
    db_ok = check_db_connection()
    summary = {
        "uptime_s": uptime_s,
        "db_ok": db_ok,
        "req_per_min": round(req_per_min, 2),
        "error_rate": round(error_total / requests_total, 4) if requests_total else 0.0,
        "last_metrics_update": snapshot.get("last_updated"),
    }
    return summary, db_ok
