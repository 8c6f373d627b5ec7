import os
import tempfile

# The app resolves its database URI at import time.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="lifestyle-tests-")
os.environ["DATABASE_URL"] = (
    os.environ.get("TEST_DATABASE_URL")
    or f"sqlite:///{os.path.join(_TEST_DB_DIR, 'lifestyle_test.db')}"
)

import pytest  # noqa: E402
from app import app, reset_metrics_state  # noqa: E402
from extensions import db  # noqa: E402


@pytest.fixture()
def client():
    app.config.update({"TESTING": True})

    try:
        with app.app_context():
            db.session.remove()
            db.drop_all()
            db.create_all()
    except Exception as exc:  # pragma: no cover - skip if database unavailable
        pytest.skip(f"Database not available: {exc}")

    reset_metrics_state()

    with app.test_client() as client:
        yield client

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
