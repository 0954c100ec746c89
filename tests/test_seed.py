"""Tests for first-boot seeding."""
import pytest

from taskcron.scheduler import DEFAULT_TASKS, Task, seed_tasks, validate_cron_expression


@pytest.mark.asyncio
async def test_seeding_is_idempotent(store):
    assert await seed_tasks(store) == 3
    assert await seed_tasks(store) == 0

    tasks = await store.list_all()
    assert [t.name for t in tasks] == ["DailyBackup", "HourlyCheck", "BiMinuteReport"]
    assert [t.cron for t in tasks] == ["0 0 0 * * *", "0 0 * * * *", "0 */2 * * * *"]


@pytest.mark.asyncio
async def test_existing_names_are_skipped(store):
    await store.create(Task(name="HourlyCheck", program="custom", cron="0 30 * * * *"))

    assert await seed_tasks(store) == 2

    hourly = [t for t in await store.list_all() if t.name == "HourlyCheck"]
    assert len(hourly) == 1
    assert hourly[0].program == "custom"


@pytest.mark.asyncio
async def test_seeding_does_not_mutate_templates(store):
    await seed_tasks(store)

    assert all(t.id is None for t in DEFAULT_TASKS)


@pytest.mark.parametrize("task", DEFAULT_TASKS, ids=lambda t: t.name)
def test_default_expressions_are_valid(task):
    validate_cron_expression(task.cron)
