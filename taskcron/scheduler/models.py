"""Data models for persisted tasks."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Task:
    """A durable recurring task.

    `program` is an opaque reference interpreted by the executor, and
    `cron` is a recurrence expression in the coordinator's timezone.
    """
    # Identity, assigned by the store on creation
    id: int | None = None

    # Definition
    name: str = ""
    program: str = ""
    cron: str = ""

    created_at_ms: int = field(default_factory=lambda: int(datetime.now().timestamp() * 1000))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "program": self.program,
            "cron": self.cron,
            "created_at_ms": self.created_at_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Create from dictionary."""
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            program=data.get("program", ""),
            cron=data.get("cron", ""),
            created_at_ms=data.get("created_at_ms", int(datetime.now().timestamp() * 1000)),
        )
