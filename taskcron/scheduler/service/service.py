"""Scheduling coordinator.

Keeps durable task records and live trigger registrations consistent:
- loads every persisted task and registers one trigger per task on startup
- adds and removes tasks in the store and the trigger engine together
- guards the task ID -> trigger handle mapping with a single lock
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Awaitable, Callable

from loguru import logger

from ..errors import (
    CompensationFailure,
    NotFound,
    PartialRegistrationFailure,
    SchedulerError,
    StoreError,
    StoreUnavailable,
)
from ..executor import LoggingExecutor, ProgramExecutor
from ..models import Task
from ..types import ClockConfig, CoordinatorStatus, StartResult, TriggerHandle
from .engine import TriggerEngine, resolve_timezone
from .events import EventEmitter, EventTypes, emit_task_event
from .state import CoordinatorState
from .store import TaskStore

logger = logger.bind(module="scheduler.service")


class SchedulingCoordinator:
    """Reconciles persisted tasks with live cron triggers.

    Lifecycle: construct, `start_all()` once, then `add_task()` /
    `remove_task()` for the lifetime of the process, `stop()` on shutdown.

    Invariant while running: every task in the store that registered
    successfully has exactly one trigger handle, and every handle belongs to
    exactly one task ID. A task whose registration failed stays in the store
    without a handle (degraded) until it is removed.
    """

    def __init__(
        self,
        store: TaskStore,
        clock: ClockConfig | None = None,
        executor: ProgramExecutor | None = None,
        engine: TriggerEngine | None = None,
    ):
        """Initialize the coordinator without starting the clock.

        Args:
            store: Initialized task store
            clock: Timezone and granularity of the trigger engine
            executor: Receives each task at every firing (defaults to logging only)
            engine: Trigger engine override, built from `clock` when omitted

        Raises:
            ConfigurationError: the configured timezone cannot be resolved
        """
        self.clock = clock or ClockConfig()
        timezone = resolve_timezone(self.clock.timezone)

        self.store = store
        self.engine = engine if engine is not None else TriggerEngine(timezone, with_seconds=self.clock.with_seconds)
        self.executor = executor if executor is not None else LoggingExecutor()
        self.events = EventEmitter()
        self.state = CoordinatorState()

    @property
    def running(self) -> bool:
        return self.state.running

    async def start_all(self) -> StartResult:
        """Register a trigger for every persisted task, then start the clock.

        A task that fails to register is logged and skipped; it never aborts
        the load.

        Raises:
            StoreUnavailable: the tasks could not be loaded
        """
        if self.state.running:
            logger.warning("Coordinator already running")
            return StartResult()

        try:
            tasks = await self.store.list_all()
        except StoreUnavailable:
            raise
        except Exception as e:
            raise StoreUnavailable(f"Failed to load tasks: {e}") from e

        result = StartResult(loaded=len(tasks))

        for task in tasks:
            try:
                handle = self._register(task)
            except Exception as e:
                result.failures.append(PartialRegistrationFailure(task.id, task.name, e))
                logger.error(f"Failed to register task {task.name} ({task.id}): {e}")
                emit_task_event(self.events, EventTypes.TASK_DEGRADED, task.id, {"error": str(e)})
                continue

            if not await self._bind(task.id, handle):
                # Added concurrently and already scheduled
                self.engine.cancel(handle)
                continue

            result.scheduled.append(task.id)
            logger.info(f"Task {task.name} ({task.id}) started, cron: {task.cron}")

        await self.engine.start()
        self.state.running = True

        emit_task_event(self.events, EventTypes.COORDINATOR_STARTED, None, result.to_dict())
        logger.info(
            f"Coordinator started: {len(result.scheduled)}/{result.loaded} tasks scheduled, "
            f"{len(result.failures)} degraded"
        )
        return result

    async def stop(self) -> None:
        """Cancel every trigger and stop the clock.

        Triggers registered by add_task before start_all are cancelled too.
        """
        async with self.state.lock:
            was_running = self.state.running
            handles = list(self.state.handles.values())
            self.state.reset()

        for handle in handles:
            self.engine.cancel(handle)

        if not was_running:
            return

        await self.engine.stop()

        emit_task_event(self.events, EventTypes.COORDINATOR_STOPPED, None)
        logger.info("Coordinator stopped")

    # ============== Task Management ==============

    async def add_task(self, name: str, program: str, cron_expression: str) -> int:
        """Persist a new task and schedule it.

        If the trigger cannot be registered, the new record is deleted again
        and the registration error is raised.

        Args:
            name: Human-readable label
            program: Opaque reference handed to the executor
            cron_expression: Recurrence in the engine's grammar

        Returns:
            ID of the new task

        Raises:
            InvalidExpression: the expression does not parse; nothing was stored
            StoreError: the record could not be created
            CompensationFailure: registration failed and the record could not be deleted
        """
        self.engine.validate(cron_expression)

        task = Task(name=name, program=program, cron=cron_expression)
        try:
            task_id = await self.store.create(task)
        except SchedulerError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to create task {name}: {e}") from e

        try:
            handle = self._register(task)
        except Exception as e:
            try:
                await self.store.delete(task_id)
            except NotFound:
                # Already gone, nothing orphaned
                pass
            except Exception as delete_error:
                logger.error(f"Failed to delete task {name} ({task_id}) after registration failure: {delete_error}")
                raise CompensationFailure(task_id, e, delete_error) from e
            logger.warning(f"Rolled back task {name} ({task_id}): {e}")
            raise

        if not await self._bind(task_id, handle):
            # Picked up by a concurrent start_all
            self.engine.cancel(handle)

        emit_task_event(self.events, EventTypes.TASK_ADDED, task_id, {"name": name, "cron": cron_expression})
        logger.info(f"Task {name} ({task_id}) added, cron: {cron_expression}")
        return task_id

    async def remove_task(self, task_id: int) -> None:
        """Unschedule a task and delete its record.

        A task without a trigger (failed registration) is removed from the
        store all the same. If the store delete fails, the trigger stays
        cancelled and the record stays persisted.

        Raises:
            NotFound: no task with this ID
            StoreError: the record could not be deleted
        """
        try:
            task = await self.store.get(task_id)
        except SchedulerError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to look up task {task_id}: {e}") from e

        async with self.state.lock:
            handle = self.state.handles.pop(task_id, None)

        if handle is not None:
            self.engine.cancel(handle)
        else:
            logger.warning(f"Task {task.name} ({task_id}) had no trigger, removing record only")

        try:
            await self.store.delete(task_id)
        except NotFound:
            raise
        except Exception as e:
            logger.error(f"Task {task.name} ({task_id}) unscheduled but still persisted: {e}")
            raise StoreError(f"Failed to delete task {task_id}: {e}") from e

        emit_task_event(self.events, EventTypes.TASK_REMOVED, task_id, {"name": task.name})
        logger.info(f"Task {task.name} ({task_id}) removed")

    # ============== Inspection ==============

    async def scheduled_task_ids(self) -> list[int]:
        """Snapshot of the IDs that currently hold a trigger."""
        async with self.state.lock:
            return sorted(self.state.handles)

    async def handle_for(self, task_id: int) -> TriggerHandle | None:
        async with self.state.lock:
            return self.state.handles.get(task_id)

    async def status(self) -> CoordinatorStatus:
        """Get coordinator status.

        Returns:
            Running flag, task counts and the IDs of degraded tasks
        """
        tasks = await self.store.list_all()
        async with self.state.lock:
            scheduled = set(self.state.handles)

        return CoordinatorStatus(
            running=self.state.running,
            tasks_total=len(tasks),
            tasks_scheduled=len(scheduled),
            degraded_task_ids=[t.id for t in tasks if t.id not in scheduled],
            next_fire_at=self.engine.next_fire_at(),
        )

    # ============== Event Handling ==============

    def on_event(self, handler: Callable[[Any], None]) -> None:
        """Register an event handler."""
        self.events.add_handler(handler)

    def off_event(self, handler: Callable[[Any], None]) -> None:
        """Unregister an event handler."""
        self.events.remove_handler(handler)

    # ============== Internal ==============

    def _register(self, task: Task) -> TriggerHandle:
        return self.engine.register(
            task.cron,
            self._make_callback(task),
            label=f"{task.name} ({task.id})",
        )

    def _make_callback(self, task: Task) -> Callable[[], Awaitable[None]]:
        """Build the firing callback bound to its own copy of the task."""
        snapshot = replace(task)
        executor = self.executor
        events = self.events

        async def fire() -> None:
            emit_task_event(events, EventTypes.TASK_FIRED, snapshot.id, {"name": snapshot.name})
            await executor.execute(snapshot)

        return fire

    async def _bind(self, task_id: int, handle: TriggerHandle) -> bool:
        """Record the handle unless the task already has one."""
        async with self.state.lock:
            if task_id in self.state.handles:
                return False
            self.state.handles[task_id] = handle
            return True
