"""Collapsing of concurrent identical lookups."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any


class InFlightCalls:
    """At most one running computation per key.

    The first caller for a key starts ``compute`` as a task; callers that
    arrive while it runs await the same task. The entry is dropped once the
    task settles, so a failure is never replayed to later callers.

    Example:
        ```python
        calls = InFlightCalls()
        result = await calls.run("synonyms:happy:noctx", lambda: client.generate(prompt))
        ```
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, key: str) -> bool:
        return key in self._tasks

    async def run(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.create_task(self._settle(key, compute))
            self._tasks[key] = task
        # One cancelled waiter must not cancel the shared call.
        return await asyncio.shield(task)

    async def _settle(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await compute()
        finally:
            self._tasks.pop(key, None)
