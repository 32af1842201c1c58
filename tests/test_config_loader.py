from datetime import date
from pathlib import Path

from loserpool.config_loader import DEFAULT_FEED_URL, PoolSettings


def test_defaults_without_environment():
    settings = PoolSettings.from_env()
    assert settings.db_path == Path("loserpool.sqlite")
    assert settings.season_start is None
    assert settings.feed_base_url == DEFAULT_FEED_URL
    assert settings.default_pick_policy == "favorite"
    assert settings.cron_token is None


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("LOSERPOOL_DB_PATH", str(tmp_path / "env.sqlite"))
    monkeypatch.setenv("LOSERPOOL_SEASON_START", "2025-08-04")
    monkeypatch.setenv("LOSERPOOL_FEED_TIMEOUT", "500")
    monkeypatch.setenv("LOSERPOOL_FEED_RETRIES", "4")
    monkeypatch.setenv("LOSERPOOL_DEFAULT_PICK_POLICY", "UNDERDOG")
    monkeypatch.setenv("LOSERPOOL_SYNC_BUDGET", "45")
    monkeypatch.setenv("LOSERPOOL_CRON_TOKEN", "s3cret")

    settings = PoolSettings.from_env()

    assert settings.db_path == tmp_path / "env.sqlite"
    assert settings.season_start == date(2025, 8, 4)
    assert settings.feed_timeout == 120.0
    assert settings.feed_retries == 4
    assert settings.default_pick_policy == "underdog"
    assert settings.sync_budget_seconds == 45.0
    assert settings.cron_token == "s3cret"


def test_bad_values_fall_back_with_warning(monkeypatch, caplog):
    monkeypatch.setenv("LOSERPOOL_FEED_TIMEOUT", "soon")
    monkeypatch.setenv("LOSERPOOL_FEED_RETRIES", "many")
    monkeypatch.setenv("LOSERPOOL_SEASON_START", "next tuesday")
    monkeypatch.setenv("LOSERPOOL_DEFAULT_PICK_POLICY", "random")

    with caplog.at_level("WARNING", logger="uvicorn.error"):
        settings = PoolSettings.from_env()

    assert settings.feed_timeout == 10.0
    assert settings.feed_retries == 2
    assert settings.season_start is None
    assert settings.default_pick_policy == "favorite"
    assert "LOSERPOOL_FEED_TIMEOUT" in caplog.text


def test_out_of_range_values_are_clamped_with_warning(monkeypatch, caplog):
    monkeypatch.setenv("LOSERPOOL_FEED_TIMEOUT", "0.1")
    monkeypatch.setenv("LOSERPOOL_FEED_RETRIES", "-3")
    monkeypatch.setenv("LOSERPOOL_SYNC_BUDGET", "0")

    with caplog.at_level("WARNING", logger="uvicorn.error"):
        settings = PoolSettings.from_env(PoolSettings(sync_budget_seconds=30.0))

    assert settings.feed_timeout == 0.5
    assert settings.feed_retries == 0
    assert settings.sync_budget_seconds is None
    assert "LOSERPOOL_FEED_RETRIES=-3 is below 0" in caplog.text


def test_profile_save_and_load(tmp_path):
    path = tmp_path / "pool.json"
    PoolSettings(
        db_path=tmp_path / "pool.sqlite",
        season_start=date(2025, 8, 4),
        default_pick_policy="underdog",
        sync_budget_seconds=30.0,
    ).save(path)

    loaded = PoolSettings.load(path)

    assert loaded.db_path == tmp_path / "pool.sqlite"
    assert loaded.season_start == date(2025, 8, 4)
    assert loaded.default_pick_policy == "underdog"
    assert loaded.sync_budget_seconds == 30.0


def test_environment_overlays_a_profile(monkeypatch, tmp_path):
    base = PoolSettings(season_start=date(2025, 8, 4), feed_retries=5)
    monkeypatch.setenv("LOSERPOOL_CRON_TOKEN", "tok")
    settings = PoolSettings.from_env(base)
    assert settings.season_start == date(2025, 8, 4)
    assert settings.feed_retries == 5
    assert settings.cron_token == "tok"
