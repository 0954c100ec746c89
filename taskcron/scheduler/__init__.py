"""Scheduler module for durable cron tasks.

This module provides:
- Persisted tasks (SQLite)
- Six-field cron triggers with second granularity in a fixed timezone
- A coordinator keeping stored tasks and live triggers consistent
- asyncio-based clock
"""
# Errors
from .errors import (
    SchedulerError,
    ConfigurationError,
    StoreError,
    StoreUnavailable,
    InvalidExpression,
    NotFound,
    PartialRegistrationFailure,
    CompensationFailure,
)

# Core types
from .types import (
    ClockConfig,
    TriggerHandle,
    CoordinatorEvent,
    StartResult,
    CoordinatorStatus,
)

# Models
from .models import Task

# Executor
from .executor import ProgramExecutor, LoggingExecutor

# Service
from .service import (
    SchedulingCoordinator,
    TaskStore,
    TriggerEngine,
    resolve_timezone,
    validate_cron_expression,
    DEFAULT_TASKS,
    seed_tasks,
)

__all__ = [
    # Errors
    "SchedulerError",
    "ConfigurationError",
    "StoreError",
    "StoreUnavailable",
    "InvalidExpression",
    "NotFound",
    "PartialRegistrationFailure",
    "CompensationFailure",
    # Core types
    "ClockConfig",
    "TriggerHandle",
    "CoordinatorEvent",
    "StartResult",
    "CoordinatorStatus",
    # Models
    "Task",
    # Executor
    "ProgramExecutor",
    "LoggingExecutor",
    # Service
    "SchedulingCoordinator",
    "TaskStore",
    "TriggerEngine",
    "resolve_timezone",
    "validate_cron_expression",
    "DEFAULT_TASKS",
    "seed_tasks",
]
