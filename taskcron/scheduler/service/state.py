"""Runtime state of the scheduling coordinator."""
import asyncio
from dataclasses import dataclass, field

from ..types import TriggerHandle


@dataclass
class CoordinatorState:
    """Live task ID -> trigger handle mapping.

    Every read and write of `handles` happens under `lock`, and the lock is
    never held across store or engine calls.
    """
    running: bool = False
    handles: dict[int, TriggerHandle] = field(default_factory=dict)

    # Lock for concurrent access
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def reset(self) -> None:
        """Reset state to initial values."""
        self.running = False
        self.handles.clear()
