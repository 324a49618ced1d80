import os
import tempfile

import pytest

_TMP_DIR = tempfile.mkdtemp(prefix="overhead-tests-")
os.environ.setdefault("OVERHEAD_DB_URL", f"sqlite:///{_TMP_DIR}/overhead.db")
os.environ.setdefault("OVERHEAD_RETENTION_STATE_FILE", f"{_TMP_DIR}/cleanup_state")


@pytest.fixture(autouse=True, scope="session")
def _database():
    from overhead.db import init_db

    init_db()
    yield


@pytest.fixture
def anyio_backend():
    return "asyncio"
