"""Core type definitions for the scheduling coordinator.

This module defines:
- Clock configuration (timezone, second granularity)
- Trigger handles returned by the engine
- Result and status types for coordinator operations
- Event types for the event system
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .errors import PartialRegistrationFailure

# Opaque identifier of one registered recurrence
TriggerHandle = int

DEFAULT_TIMEZONE = "Asia/Shanghai"


# ============== Clock ==============

@dataclass(frozen=True)
class ClockConfig:
    """Timezone and granularity of the trigger engine.

    - with_seconds=True: 6-part expressions "sec min hour day month weekday"
    - with_seconds=False: 5-part expressions "min hour day month weekday"
    """
    timezone: str = DEFAULT_TIMEZONE
    with_seconds: bool = True


# ============== Event Types ==============

@dataclass
class CoordinatorEvent:
    """Event emitted by the coordinator."""
    type: str
    task_id: int | None
    timestamp_ms: int
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "task_id": self.task_id,
            "timestamp_ms": self.timestamp_ms,
            "payload": self.payload,
        }


# ============== Result Types ==============

@dataclass
class StartResult:
    """Result of loading and registering all persisted tasks."""
    loaded: int = 0
    scheduled: list[int] = field(default_factory=list)
    failures: list[PartialRegistrationFailure] = field(default_factory=list)

    @property
    def degraded(self) -> list[int | None]:
        return [f.task_id for f in self.failures]

    def to_dict(self) -> dict[str, Any]:
        return {
            "loaded": self.loaded,
            "scheduled": self.scheduled,
            "failures": [
                {"task_id": f.task_id, "name": f.name, "error": str(f.cause)}
                for f in self.failures
            ],
        }


@dataclass
class CoordinatorStatus:
    """Status of the scheduling coordinator."""
    running: bool
    tasks_total: int
    tasks_scheduled: int
    degraded_task_ids: list[int] = field(default_factory=list)
    next_fire_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "running": self.running,
            "tasks_total": self.tasks_total,
            "tasks_scheduled": self.tasks_scheduled,
            "degraded_task_ids": self.degraded_task_ids,
            "next_fire_at": self.next_fire_at.isoformat() if self.next_fire_at else None,
        }
