"""Lifecycle notifications for coordinator observers.

Handlers are plain callables run synchronously in emission order; a failing
handler is logged and never reaches the coordinator.
"""
import time
from typing import Any, Callable

from loguru import logger

from ..types import CoordinatorEvent

logger = logger.bind(module="scheduler.events")


class EventTypes:
    """Event type names."""

    COORDINATOR_STARTED = "coordinator.started"
    COORDINATOR_STOPPED = "coordinator.stopped"

    TASK_ADDED = "task.added"
    TASK_REMOVED = "task.removed"
    # Persisted but could not be registered
    TASK_DEGRADED = "task.degraded"

    TASK_FIRED = "task.fired"


EventHandler = Callable[[CoordinatorEvent], None]


class EventEmitter:
    """Fan-out of coordinator events to subscribed handlers."""

    def __init__(self):
        self._handlers: list[EventHandler] = []

    def __len__(self) -> int:
        return len(self._handlers)

    def add_handler(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def remove_handler(self, handler: EventHandler) -> None:
        """Unsubscribe a handler; unknown handlers are ignored."""
        try:
            self._handlers.remove(handler)
        except ValueError:
            pass

    def emit(self, event: CoordinatorEvent) -> None:
        # Handlers may unsubscribe while being called
        for handler in tuple(self._handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Handler for {event.type} failed: {e}")


def emit_task_event(
    emitter: EventEmitter,
    event_type: str,
    task_id: int | None,
    payload: dict[str, Any] | None = None,
) -> None:
    """Build a timestamped event and emit it.

    Args:
        emitter: Target emitter
        event_type: One of the EventTypes names
        task_id: Affected task, None for coordinator-wide events
        payload: Extra fields, e.g. the task name or the registration error
    """
    emitter.emit(CoordinatorEvent(
        type=event_type,
        task_id=task_id,
        timestamp_ms=int(time.time() * 1000),
        payload=payload or {},
    ))
