"""
Test configuration: repo root on sys.path and a fresh seeded in-memory store per test.
"""

import os
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

os.environ.setdefault("STORAGE_BACKEND", "memory")

import database  # noqa: E402
from seed import COLLECTIONS as SEED_DATA  # noqa: E402


@pytest.fixture(autouse=True)
def memory_store():
    store = database.MemoryStore(SEED_DATA)
    database.set_store(store)
    yield store
    database.set_store(None)


@pytest.fixture
def client(memory_store):
    from fastapi.testclient import TestClient

    import main

    main.day_cache.invalidate()
    return TestClient(main.app)


@pytest.fixture
def manager():
    return {"X-Role": "manager"}
