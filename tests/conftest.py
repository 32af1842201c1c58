from __future__ import annotations

import pytest

from loserpool.persistence import PoolStore
from loserpool.season import SeasonService

from tests.helpers import SEASON_START


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "LOSERPOOL_DB_PATH",
        "LOSERPOOL_SEASON_START",
        "LOSERPOOL_FEED_URL",
        "LOSERPOOL_FEED_TIMEOUT",
        "LOSERPOOL_FEED_RETRIES",
        "LOSERPOOL_DEFAULT_PICK_POLICY",
        "LOSERPOOL_SYNC_BUDGET",
        "LOSERPOOL_CRON_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store(tmp_path) -> PoolStore:
    return PoolStore(tmp_path / "pool.sqlite")


@pytest.fixture
def season(store) -> SeasonService:
    return SeasonService(store, season_start=SEASON_START)
