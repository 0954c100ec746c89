"""Program executor invoked when a task's recurrence fires.

The coordinator only knows the `ProgramExecutor` protocol. The default
`LoggingExecutor` records the execution and does nothing else; plug in a
real implementation to actually run programs.
"""
from typing import Protocol

from loguru import logger

from .models import Task

logger = logger.bind(module="scheduler.executor")


class ProgramExecutor(Protocol):
    """Protocol for task execution.

    Called once per firing, possibly concurrently for the same task.
    """

    async def execute(self, task: Task) -> None:
        """Run the program referenced by the task."""
        ...


class LoggingExecutor:
    """Executor that logs each firing instead of running anything."""

    async def execute(self, task: Task) -> None:
        logger.info(f"Executing task {task.name} ({task.id}): {task.program}")
