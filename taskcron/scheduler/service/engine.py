"""Trigger engine: cron recurrences fired by an asyncio clock loop.

Expressions are parsed with croniter and evaluated in one fixed timezone.
The engine is dormant until start(); each firing runs its callback as a
separate asyncio task so slow callbacks never delay the clock.
"""
import asyncio
import inspect
import itertools
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter
from loguru import logger

from ..errors import ConfigurationError, InvalidExpression
from ..types import DEFAULT_TIMEZONE, TriggerHandle

logger = logger.bind(module="scheduler.engine")

TriggerCallback = Callable[[], Any]


def resolve_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name.

    Raises:
        ConfigurationError: the name is unknown to the tz database
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Failed to load timezone {name!r}: {e}") from e


def validate_cron_expression(expression: str, with_seconds: bool = True) -> None:
    """Validate a cron expression.

    Args:
        expression: 6-part "sec min hour day month weekday", or 5-part
            without the seconds field when with_seconds is False

    Raises:
        InvalidExpression: wrong field count or rejected by croniter
    """
    expected = 6 if with_seconds else 5
    parts = expression.split()
    if len(parts) != expected:
        raise InvalidExpression(expression, f"expected {expected} fields, got {len(parts)}")

    try:
        croniter(expression, datetime.now(), second_at_beginning=with_seconds)
    except Exception as e:
        raise InvalidExpression(expression, str(e)) from e


@dataclass
class _Entry:
    handle: TriggerHandle
    expression: str
    callback: TriggerCallback
    label: str
    next_fire_at: datetime


class TriggerEngine:
    """Timezone-aware recurring timer with second granularity."""

    def __init__(self, timezone: str | ZoneInfo = DEFAULT_TIMEZONE, with_seconds: bool = True):
        """Initialize the engine without starting its clock.

        Args:
            timezone: IANA name or ZoneInfo all expressions are evaluated in
            with_seconds: Whether expressions carry a leading seconds field

        Raises:
            ConfigurationError: the timezone cannot be resolved
        """
        self.timezone = timezone if isinstance(timezone, ZoneInfo) else resolve_timezone(timezone)
        self.with_seconds = with_seconds

        self._entries: dict[TriggerHandle, _Entry] = {}
        self._handles = itertools.count(1)
        self._wake_event = asyncio.Event()
        self._loop_task: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def __len__(self) -> int:
        return len(self._entries)

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    def validate(self, expression: str) -> None:
        validate_cron_expression(expression, self.with_seconds)

    def register(self, expression: str, callback: TriggerCallback, *, label: str = "") -> TriggerHandle:
        """Schedule callback at every instant matching expression.

        Args:
            expression: Cron expression in the engine's grammar
            callback: Called with no arguments; may return an awaitable
            label: Name used in log messages

        Returns:
            Handle identifying this registration

        Raises:
            InvalidExpression: the expression does not parse
        """
        self.validate(expression)

        handle = next(self._handles)
        self._entries[handle] = _Entry(
            handle=handle,
            expression=expression,
            callback=callback,
            label=label,
            next_fire_at=self._next_after(expression, self.now()),
        )
        self._wake_event.set()

        logger.debug(f"Registered trigger {handle} ({label}) cron: {expression}")
        return handle

    def cancel(self, handle: TriggerHandle) -> bool:
        """Unregister a trigger.

        No new firing starts after this returns; a firing already in flight
        completes. Unknown or already cancelled handles are ignored.

        Returns:
            True if the handle was registered
        """
        entry = self._entries.pop(handle, None)
        if entry is None:
            return False

        self._wake_event.set()
        logger.debug(f"Cancelled trigger {handle} ({entry.label})")
        return True

    def next_fire_at(self) -> datetime | None:
        """Earliest upcoming fire time across all triggers."""
        if not self._entries:
            return None
        return min(entry.next_fire_at for entry in self._entries.values())

    async def start(self) -> None:
        """Start the clock loop."""
        if self._running:
            logger.warning("Trigger engine already running")
            return

        self._running = True
        self._loop_task = asyncio.create_task(self._clock_loop())
        logger.info(f"Trigger engine started ({self.timezone.key}, {len(self._entries)} triggers)")

    async def stop(self) -> None:
        """Stop the clock loop and wait for in-flight callbacks."""
        if not self._running:
            return

        self._running = False

        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

        logger.info("Trigger engine stopped")

    # ============== Internal ==============

    def _next_after(self, expression: str, base: datetime) -> datetime:
        cron = croniter(expression, base, second_at_beginning=self.with_seconds)
        return cron.get_next(datetime)

    async def _clock_loop(self) -> None:
        """Sleep until the next fire time (or until woken), then fire due triggers."""
        logger.debug("Clock loop started")

        while self._running:
            try:
                self._wake_event.clear()
                next_fire = self.next_fire_at()

                if next_fire is None:
                    # Nothing registered, wait for a registration
                    try:
                        await asyncio.wait_for(self._wake_event.wait(), timeout=60.0)
                    except asyncio.TimeoutError:
                        pass
                    continue

                sleep_seconds = (next_fire - self.now()).total_seconds()
                if sleep_seconds > 0:
                    try:
                        await asyncio.wait_for(self._wake_event.wait(), timeout=sleep_seconds)
                        # Woken early by register/cancel, re-calculate
                        continue
                    except asyncio.TimeoutError:
                        pass

                self._fire_due()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Clock loop error: {e}")
                await asyncio.sleep(1)

        logger.debug("Clock loop stopped")

    def _fire_due(self) -> None:
        now = self.now()
        for entry in list(self._entries.values()):
            if entry.next_fire_at > now:
                continue
            # Missed instants are skipped, never replayed
            entry.next_fire_at = self._next_after(entry.expression, now)
            task = asyncio.create_task(self._invoke(entry))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _invoke(self, entry: _Entry) -> None:
        try:
            result = entry.callback()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Trigger {entry.handle} ({entry.label}) callback failed: {e}")
