"""SQLite persistence layer for tasks.

Narrow CRUD surface consumed by the coordinator: create, list, get and
delete by ID, plus the name lookup used by first-boot seeding.
"""
from pathlib import Path
from typing import Any

import aiosqlite
from loguru import logger

from ..errors import NotFound, StoreUnavailable
from ..models import Task

logger = logger.bind(module="scheduler.store")


class TaskStore:
    """SQLite-based task persistence."""

    def __init__(self, db_path: str | Path):
        """Initialize task store.

        Args:
            db_path: Path to SQLite database, ":memory:" for a private in-memory database
        """
        self.db_path = db_path if db_path == ":memory:" else Path(db_path).expanduser()
        self._connection: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open the connection and create the schema if missing."""
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._connection = await aiosqlite.connect(self.db_path)
            await self._connection.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    program TEXT NOT NULL,
                    cron TEXT NOT NULL,
                    created_at_ms INTEGER NOT NULL
                )
            """)
            await self._connection.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_name ON tasks(name)"
            )
            await self._connection.commit()
        except (aiosqlite.Error, OSError) as e:
            raise StoreUnavailable(f"Failed to open task store at {self.db_path}: {e}") from e

        logger.info(f"Task store initialized at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @property
    def connection(self) -> aiosqlite.Connection:
        if not self._connection:
            raise StoreUnavailable("TaskStore not initialized")
        return self._connection

    async def create(self, task: Task) -> int:
        """Insert a task and return its new ID.

        The ID is also written back to `task.id`.
        """
        cursor = await self.connection.execute(
            "INSERT INTO tasks (name, program, cron, created_at_ms) VALUES (?, ?, ?, ?)",
            (task.name, task.program, task.cron, task.created_at_ms),
        )
        await self.connection.commit()
        task_id = cursor.lastrowid
        if task_id is None:
            raise RuntimeError("SQLite did not return lastrowid for tasks insert")
        task.id = int(task_id)
        logger.debug(f"Task created id={task.id} name={task.name} cron={task.cron}")
        return task.id

    async def list_all(self) -> list[Task]:
        """List every stored task, ordered by ID."""
        tasks = []
        async with self.connection.execute("SELECT * FROM tasks ORDER BY id ASC") as cursor:
            rows = await cursor.fetchall()
            for row in rows:
                tasks.append(self._row_to_task(row, cursor.description))
        return tasks

    async def get(self, task_id: int) -> Task:
        """Get a task by ID.

        Raises:
            NotFound: no task with this ID
        """
        async with self.connection.execute(
            "SELECT * FROM tasks WHERE id = ?", (task_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_task(row, cursor.description)
        raise NotFound(task_id)

    async def delete(self, task_id: int) -> None:
        """Permanently delete a task.

        Raises:
            NotFound: no row was deleted
        """
        result = await self.connection.execute(
            "DELETE FROM tasks WHERE id = ?", (task_id,)
        )
        await self.connection.commit()
        if result.rowcount == 0:
            raise NotFound(task_id)

    async def exists_by_name(self, name: str) -> bool:
        async with self.connection.execute(
            "SELECT COUNT(*) FROM tasks WHERE name = ?", (name,)
        ) as cursor:
            row = await cursor.fetchone()
            return bool(row and row[0])

    async def count(self) -> int:
        async with self.connection.execute("SELECT COUNT(*) FROM tasks") as cursor:
            row = await cursor.fetchone()
            return int(row[0]) if row else 0

    def _row_to_task(self, row: Any, description: Any) -> Task:
        """Convert a database row to a Task."""
        columns = [col[0] for col in description]
        data = dict(zip(columns, row))
        return Task.from_dict(data)
