"""Error types for the scheduling coordinator.

Bulk operations log and swallow per-task failures; single administrative
operations always raise to the caller.
"""
from typing import Any


class SchedulerError(Exception):
    """Base class for all coordinator errors."""


class ConfigurationError(SchedulerError):
    """Unrecoverable startup misconfiguration, e.g. an unknown timezone."""


class StoreError(SchedulerError):
    """The task store failed to complete an operation."""


class StoreUnavailable(StoreError):
    """The task store could not be reached (or was never initialized)."""


class InvalidExpression(SchedulerError):
    """A recurrence expression failed to parse."""

    def __init__(self, expression: str, reason: str = ""):
        self.expression = expression
        self.reason = reason
        message = f"Invalid cron expression {expression!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class NotFound(SchedulerError):
    """Referenced task does not exist."""

    def __init__(self, task_id: Any):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class PartialRegistrationFailure(SchedulerError):
    """One task's trigger could not be registered during a bulk load.

    Never raised; collected in StartResult.failures.
    """

    def __init__(self, task_id: int | None, name: str, cause: Exception):
        self.task_id = task_id
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to register task {name} ({task_id}): {cause}")


class CompensationFailure(SchedulerError):
    """Deleting a just-created task after its registration failed also failed.

    The store may now hold an orphaned, unscheduled record.
    """

    def __init__(
        self,
        task_id: int | None,
        registration_error: Exception,
        compensation_error: Exception,
    ):
        self.task_id = task_id
        self.registration_error = registration_error
        self.compensation_error = compensation_error
        super().__init__(
            f"Failed to register task {task_id} ({registration_error}) "
            f"and failed to delete its record ({compensation_error})"
        )
