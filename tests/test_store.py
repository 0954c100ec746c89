"""Tests for the SQLite task store."""
import pytest

from taskcron.scheduler import NotFound, StoreUnavailable, Task, TaskStore


@pytest.mark.asyncio
async def test_create_assigns_increasing_ids(store):
    first = Task(name="a", program="pa", cron="0 * * * * *")
    second = Task(name="b", program="pb", cron="0 0 * * * *")

    first_id = await store.create(first)
    second_id = await store.create(second)

    assert second_id > first_id
    assert first.id == first_id
    assert await store.count() == 2


@pytest.mark.asyncio
async def test_get_returns_stored_fields(store):
    task = Task(name="backup", program="backup.sh", cron="0 0 0 * * *", created_at_ms=1234)
    task_id = await store.create(task)

    loaded = await store.get(task_id)

    assert loaded == Task(id=task_id, name="backup", program="backup.sh", cron="0 0 0 * * *", created_at_ms=1234)


@pytest.mark.asyncio
async def test_list_all_is_ordered_by_id(store):
    ids = [await store.create(Task(name=n, program="p", cron="0 * * * * *")) for n in "cab"]

    tasks = await store.list_all()

    assert [t.id for t in tasks] == ids
    assert [t.name for t in tasks] == ["c", "a", "b"]


@pytest.mark.asyncio
async def test_missing_task_raises_not_found(store):
    with pytest.raises(NotFound):
        await store.get(42)
    with pytest.raises(NotFound):
        await store.delete(42)


@pytest.mark.asyncio
async def test_delete(store):
    task_id = await store.create(Task(name="a", program="p", cron="0 * * * * *"))

    await store.delete(task_id)

    assert await store.list_all() == []


@pytest.mark.asyncio
async def test_exists_by_name(store):
    await store.create(Task(name="HourlyCheck", program="p", cron="0 0 * * * *"))

    assert await store.exists_by_name("HourlyCheck")
    assert not await store.exists_by_name("hourlycheck")


@pytest.mark.asyncio
async def test_tasks_survive_reopen(tmp_path):
    path = tmp_path / "nested" / "tasks.db"
    store = TaskStore(path)
    await store.initialize()
    task_id = await store.create(Task(name="a", program="p", cron="0 * * * * *"))
    await store.close()

    reopened = TaskStore(path)
    await reopened.initialize()
    try:
        assert [t.id for t in await reopened.list_all()] == [task_id]
    finally:
        await reopened.close()


@pytest.mark.asyncio
async def test_in_memory_database():
    store = TaskStore(":memory:")
    await store.initialize()
    try:
        await store.create(Task(name="a", program="p", cron="0 * * * * *"))
        assert await store.count() == 1
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_uninitialized_store_is_unavailable(tmp_path):
    store = TaskStore(tmp_path / "tasks.db")

    with pytest.raises(StoreUnavailable):
        await store.list_all()
    with pytest.raises(StoreUnavailable):
        await store.create(Task(name="a"))


@pytest.mark.asyncio
async def test_close_is_idempotent(store):
    await store.close()
    await store.close()

    with pytest.raises(StoreUnavailable):
        await store.count()


def test_task_dict_round_trip():
    task = Task(id=7, name="n", program="p", cron="* * * * * *", created_at_ms=1)

    assert Task.from_dict(task.to_dict()) == task
