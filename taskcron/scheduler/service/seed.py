"""Example tasks inserted on first boot.

Seeding is keyed on the task name, so re-running it never duplicates tasks.
"""
from loguru import logger

from ..models import Task
from .store import TaskStore

logger = logger.bind(module="scheduler.seed")

DEFAULT_TASKS: tuple[Task, ...] = (
    Task(name="DailyBackup", program="Run the database backup script", cron="0 0 0 * * *"),
    Task(name="HourlyCheck", program="Check system status", cron="0 0 * * * *"),
    Task(name="BiMinuteReport", program="Generate the two-minute report", cron="0 */2 * * * *"),
)


async def seed_tasks(store: TaskStore, tasks: tuple[Task, ...] | list[Task] = DEFAULT_TASKS) -> int:
    """Create each task whose name is not in the store yet.

    Returns:
        Number of tasks inserted
    """
    inserted = 0
    for template in tasks:
        if await store.exists_by_name(template.name):
            continue

        task = Task(name=template.name, program=template.program, cron=template.cron)
        try:
            await store.create(task)
        except Exception as e:
            logger.error(f"Failed to insert example task {template.name}: {e}")
            continue

        inserted += 1
        logger.info(f"Inserted example task {template.name}")

    if inserted:
        logger.info(f"Seeded {inserted} example tasks, {await store.count()} tasks stored")
    return inserted
