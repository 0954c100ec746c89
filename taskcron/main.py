"""taskcron daemon.

Opens the task store, seeds the example tasks on first boot, schedules every
persisted task and keeps running until SIGINT/SIGTERM.
"""
import asyncio
import signal
import sys

from loguru import logger

from .config import Settings, settings
from .scheduler import (
    ClockConfig,
    ConfigurationError,
    SchedulingCoordinator,
    StoreUnavailable,
    TaskStore,
    seed_tasks,
)


def configure_logging(level: str) -> None:
    """Replace loguru's default sink with one at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=level)


async def demo_admin(coordinator: SchedulingCoordinator, delay_seconds: float = 10.0) -> None:
    """Add a per-minute task, then remove task 1, pausing before each step."""
    await asyncio.sleep(delay_seconds)
    try:
        await coordinator.add_task("TestTask", "Run the test program", "0 * * * * *")
    except Exception as e:
        logger.error(f"Failed to add task: {e}")

    await asyncio.sleep(delay_seconds)
    try:
        await coordinator.remove_task(1)
    except Exception as e:
        logger.error(f"Failed to remove task: {e}")


async def main(config: Settings = settings) -> int:
    """Run the daemon until a shutdown signal arrives.

    Returns:
        Process exit code
    """
    configure_logging(config.log_level)

    logger.info("=" * 50)
    logger.info("  taskcron")
    logger.info(f"  Database: {config.db_path}")
    logger.info(f"  Timezone: {config.timezone}")
    logger.info("=" * 50)

    store = TaskStore(config.db_path)
    try:
        await store.initialize()
    except StoreUnavailable as e:
        logger.critical(f"Failed to open task store: {e}")
        return 1

    try:
        if config.seed_examples:
            await seed_tasks(store)

        try:
            coordinator = SchedulingCoordinator(store, ClockConfig(timezone=config.timezone))
        except ConfigurationError as e:
            logger.critical(str(e))
            return 1

        try:
            result = await coordinator.start_all()
        except StoreUnavailable as e:
            logger.critical(f"Failed to start tasks: {e}")
            return 1

        if result.degraded:
            logger.warning(f"Tasks without a trigger until removed: {result.degraded}")

        demo_task = asyncio.create_task(demo_admin(coordinator)) if config.demo else None

        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                # Windows event loops have no signal handlers
                pass

        try:
            await stop_event.wait()
        except asyncio.CancelledError:
            pass

        logger.info("Shutting down...")
        if demo_task:
            demo_task.cancel()
        await coordinator.stop()
    finally:
        await store.close()

    logger.info("Goodbye!")
    return 0


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
