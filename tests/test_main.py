"""Tests for settings and the daemon entry point."""
from pathlib import Path

import pytest

from taskcron.config import Settings
from taskcron.main import demo_admin, main
from taskcron.scheduler import NotFound, seed_tasks


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("TASKCRON_DB_PATH", str(tmp_path / "x.db"))
    monkeypatch.setenv("TASKCRON_TIMEZONE", "UTC")
    monkeypatch.setenv("TASKCRON_SEED_EXAMPLES", "false")
    monkeypatch.setenv("TASKCRON_DEMO", "1")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.db_path == tmp_path / "x.db"
    assert settings.timezone == "UTC"
    assert settings.seed_examples is False
    assert settings.demo is True
    assert settings.log_level == "DEBUG"


def test_settings_defaults(monkeypatch):
    for name in ("TASKCRON_DB_PATH", "TASKCRON_TIMEZONE", "TASKCRON_SEED_EXAMPLES", "TASKCRON_DEMO", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.db_path == Path.home() / ".taskcron" / "tasks.db"
    assert settings.timezone == "Asia/Shanghai"
    assert settings.seed_examples is True
    assert settings.demo is False
    assert settings.log_level == "INFO"


@pytest.mark.asyncio
async def test_main_exits_on_unknown_timezone(tmp_path):
    config = Settings(db_path=tmp_path / "tasks.db", timezone="Nowhere/Special")

    assert await main(config) == 1
    # Seeding ran before the coordinator was built
    assert (tmp_path / "tasks.db").exists()


@pytest.mark.asyncio
async def test_demo_adds_test_task_and_removes_first_task(store, coordinator):
    await seed_tasks(store)
    await coordinator.start_all()

    await demo_admin(coordinator, delay_seconds=0)

    names = [t.name for t in await store.list_all()]
    assert names == ["HourlyCheck", "BiMinuteReport", "TestTask"]
    with pytest.raises(NotFound):
        await store.get(1)
    assert len(await coordinator.scheduled_task_ids()) == 3


@pytest.mark.asyncio
async def test_demo_logs_failures(coordinator):
    await coordinator.start_all()

    # Task 1 is the demo's own TestTask here, so the removal succeeds
    await demo_admin(coordinator, delay_seconds=0)
    assert await coordinator.scheduled_task_ids() == []

    # Second run: TestTask gets ID 2, removing task 1 fails and is only logged
    await demo_admin(coordinator, delay_seconds=0)
    assert await coordinator.scheduled_task_ids() == [2]
