import asyncio
from asyncio import TaskGroup, Semaphore
from typing import Any, Coroutine


class Throttler:
    """Bounds how many hash jobs of a scan are in flight at once.

    Scheduling blocks until a permit is free, so walking the tree never runs far ahead of the workers and
    the number of pending pool jobs stays bounded.
    """

    def __init__(self, task_group: TaskGroup, concurrency: int):
        """Initialize the throttler.

        Args:
            task_group: The TaskGroup to which tasks will be added
            concurrency: Maximum number of tasks that can run concurrently
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._task_group = task_group
        self._semaphore = Semaphore(concurrency)

    async def schedule(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
        """Wait for a free permit, then start coro in the task group.

        The permit is given back when the task finishes, whether it succeeds, fails or is cancelled.
        """
        await self._semaphore.acquire()

        async def wrapper():
            try:
                return await coro
            finally:
                self._semaphore.release()

        try:
            return self._task_group.create_task(wrapper(), name=name)
        except BaseException:
            self._semaphore.release()
            coro.close()
            raise
