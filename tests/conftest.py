"""Shared fixtures and fakes for the coordinator tests."""
from pathlib import Path

import pytest_asyncio

from taskcron.scheduler import (
    ClockConfig,
    InvalidExpression,
    SchedulingCoordinator,
    Task,
    TaskStore,
    TriggerEngine,
)

TEST_TIMEZONE = "UTC"


class RecordingExecutor:
    """Executor that remembers every task it was asked to run."""

    def __init__(self):
        self.executed: list[Task] = []

    async def execute(self, task: Task) -> None:
        self.executed.append(task)


class CapturingEngine(TriggerEngine):
    """Real engine that also keeps each registered callback for manual firing."""

    def __init__(self):
        super().__init__(TEST_TIMEZONE)
        self.callbacks: dict[str, list] = {}

    def register(self, expression, callback, *, label=""):
        handle = super().register(expression, callback, label=label)
        self.callbacks.setdefault(label, []).append(callback)
        return handle


class FailingEngine(TriggerEngine):
    """Engine that accepts expressions during validation but refuses to register them."""

    def __init__(self):
        super().__init__(TEST_TIMEZONE)

    def register(self, expression, callback, *, label=""):
        raise InvalidExpression(expression, "rejected by engine")


class BrokenDeleteStore(TaskStore):
    """Store whose deletes always fail."""

    async def delete(self, task_id: int) -> None:
        raise RuntimeError("disk I/O error")


@pytest_asyncio.fixture
async def store(tmp_path: Path):
    store = TaskStore(tmp_path / "tasks.db")
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def broken_store(tmp_path: Path):
    store = BrokenDeleteStore(tmp_path / "broken.db")
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest_asyncio.fixture
async def coordinator(store: TaskStore, executor: RecordingExecutor):
    coordinator = SchedulingCoordinator(
        store,
        ClockConfig(timezone=TEST_TIMEZONE),
        executor=executor,
    )
    yield coordinator
    await coordinator.stop()
