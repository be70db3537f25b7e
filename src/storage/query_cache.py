"""
In-memory cache of pipeline results keyed by the requested time window.

Entries never expire on their own; callers drop them with `invalidate` or
`clear`. Concurrent lookups of the same window share one fetch. A fetch whose
window is invalidated while it is still running is handed to the callers
already waiting on it but is not stored. `amend` rewrites stored results and
is applied to running fetches when they land.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from todo_planner.dates import as_utc

logger = logging.getLogger(__name__)

WindowKey = Tuple[str, str]


def window_key(start: datetime, end: datetime) -> WindowKey:
    return (as_utc(start).isoformat(), as_utc(end).isoformat())


class QueryCache:
    def __init__(self):
        self._results: Dict[WindowKey, Any] = {}
        self._inflight: Dict[WindowKey, asyncio.Task] = {}
        self._generation: Dict[WindowKey, int] = {}
        self._amendments: Dict[WindowKey, List[Callable[[Any], Any]]] = {}

    def __contains__(self, key: WindowKey) -> bool:
        return key in self._results

    def get(self, key: WindowKey) -> Optional[Any]:
        return self._results.get(key)

    def set(self, key: WindowKey, value: Any) -> None:
        self._results[key] = value

    def entries(self) -> List[Tuple[WindowKey, Any]]:
        return list(self._results.items())

    def amend(self, update: Callable[[Any], Any]) -> None:
        """Apply `update` to every stored result, and to running fetches when they land."""
        for key, value in list(self._results.items()):
            self._results[key] = update(value)
        for key in self._inflight:
            self._amendments.setdefault(key, []).append(update)

    def invalidate(self, key: WindowKey) -> None:
        self._generation[key] = self._generation.get(key, 0) + 1
        self._results.pop(key, None)
        self._inflight.pop(key, None)
        self._amendments.pop(key, None)

    def clear(self) -> None:
        for key in set(self._results) | set(self._inflight):
            self._generation[key] = self._generation.get(key, 0) + 1
        self._results.clear()
        self._inflight.clear()
        self._amendments.clear()

    async def get_or_fetch(
        self,
        key: WindowKey,
        fetch: Callable[[], Awaitable[Any]],
        force: bool = False,
    ) -> Any:
        if force:
            self.invalidate(key)
        if key in self._results:
            return self._results[key]

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, fetch, self._generation.get(key, 0)))
            self._inflight[key] = task
        return await task

    async def _run(self, key: WindowKey, fetch: Callable[[], Awaitable[Any]], generation: int) -> Any:
        try:
            value = await fetch()
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]
            current = self._generation.get(key, 0) == generation
            amendments = self._amendments.pop(key, []) if current else []

        if current:
            for update in amendments:
                value = update(value)
            self._results[key] = value
        else:
            logger.debug(f"Discarding superseded result for window {key}")
        return value
