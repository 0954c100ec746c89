"""Scheduling coordinator package.

This package contains the coordinator and its collaborators:
- service.py: SchedulingCoordinator (task ID -> trigger reconciliation)
- state.py: Runtime state and the mapping lock
- store.py: SQLite persistence layer
- engine.py: Cron trigger engine and clock loop
- events.py: Event system
- seed.py: First-boot example tasks
"""
from .engine import TriggerEngine, resolve_timezone, validate_cron_expression
from .seed import DEFAULT_TASKS, seed_tasks
from .service import SchedulingCoordinator
from .store import TaskStore

__all__ = [
    "SchedulingCoordinator",
    "TaskStore",
    "TriggerEngine",
    "resolve_timezone",
    "validate_cron_expression",
    "DEFAULT_TASKS",
    "seed_tasks",
]
