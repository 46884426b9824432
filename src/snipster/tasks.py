"""Higher level asyncio task management."""
from __future__ import annotations

import asyncio

from loguru import logger

tasks: dict[asyncio.Task, None] = {}
monitor_task: asyncio.Task | None = None


async def watchdog():
    """Detect and log failures of other tasks."""
    while tasks:
        to_be_dropped = set()
        for task in tasks:
            if not task.done():
                continue

            to_be_dropped.add(task)
            exc = None if task.cancelled() else task.exception()
            if exc:
                logger.opt(exception=exc).error(
                    'Task {} failed', task.get_name())

        for task in to_be_dropped:
            tasks.pop(task)

        await asyncio.sleep(0.1)


def create_task(coro, *, name=None) -> asyncio.Task:
    """Create a task and add to the set of monitored tasks."""
    global monitor_task                   # pylint: disable=global-statement

    task = asyncio.create_task(coro, name=name)
    tasks[task] = None

    if monitor_task is None or monitor_task.done():
        monitor_task = asyncio.create_task(watchdog())

    return task


def reset_for_tests():
    """Perform a 'system' reset for test purposes.

    This is not intended for non-testing use.
    """
    global monitor_task                   # pylint: disable=global-statement
    tasks.clear()
    monitor_task = None
