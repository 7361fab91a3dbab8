import os
import tempfile
from pathlib import Path

import pytest

# The tracker package reads its settings at import time.
TEST_DB = Path(tempfile.gettempdir()) / "tracker_test_app.sqlite3"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB}"
os.environ["CLEANUP_SECRET"] = "test-cleanup-secret"

from tracker.database import engine, init_db  # noqa: E402


@pytest.fixture
def app_db():
    """Fresh schema in the file database the app's engine points at."""
    if TEST_DB.exists():
        TEST_DB.unlink()
    init_db()
    yield TEST_DB
    engine.dispose()
    if TEST_DB.exists():
        TEST_DB.unlink()
