from app import app, reset_metrics_state
from repositories import health_repo


def _assert_health_payload(payload: dict) -> None:
    for key in ("uptime_s", "db_ok", "req_per_min", "error_rate", "last_metrics_update"):
        assert key in payload


def test_health_endpoint_ok(client):
    reset_metrics_state()
    assert client.get("/").status_code == 200

    response = client.get("/health")
    assert response.status_code == 200
    payload = response.get_json()
    _assert_health_payload(payload)
    assert payload["db_ok"] is True
    assert payload["last_metrics_update"] is not None
    assert payload["error_rate"] == 0


def test_health_endpoint_unhealthy_on_db_failure(client, monkeypatch):
    def broken_ping():
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(health_repo, "check_database_connection", broken_ping)

    response = client.get("/health")
    assert response.status_code == 503
    payload = response.get_json()
    _assert_health_payload(payload)
    assert payload["db_ok"] is False


def test_health_cli_output(client):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["health"])
    assert result.exit_code == 0
    assert "db_ok: True" in result.output
    assert "Status: HEALTHY" in result.output


def test_init_db_cli_is_idempotent(client):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["init-db"])
    assert result.exit_code == 0
    assert "Database tables created." in result.output
