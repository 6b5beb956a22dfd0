# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Schedulers for deferred listener delivery.

A deferred send does not call listeners inline: each call is submitted to
a scheduler and runs on a later turn. Two schedulers are provided:

- LoopScheduler: submits to an asyncio event loop with ``call_soon``.
- QueueScheduler: keeps a FIFO queue drained explicitly by run_pending(),
  for synchronous programs and tests.

Calls submitted in the same pass run in submission order. Once submitted,
a call cannot be cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable

from .exceptions import NoEventLoopError

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """Abstract base class for deferred delivery schedulers."""

    __slots__ = ()

    @abstractmethod
    def submit(self, callback: Callable[..., Any], *args: Any) -> None:
        """Schedule callback(*args) to run on a later turn."""


class LoopScheduler(Scheduler):
    """Submit deferred calls to an asyncio event loop.

    Args:
        loop: Loop to submit to. If None, the running loop at submit
            time is used.

    Example:
        >>> async def main():
        ...     space = EventSpace(scheduler=LoopScheduler())
        ...     space.send('a', 1, deferred=True)  # runs after main yields
    """

    __slots__ = ('_loop',)

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def __repr__(self) -> str:
        return f"LoopScheduler(loop={self._loop!r})"

    def submit(self, callback: Callable[..., Any], *args: Any) -> None:
        """Schedule callback(*args) with loop.call_soon.

        Raises:
            NoEventLoopError: If no loop was given and none is running.
        """
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise NoEventLoopError(
                    "deferred delivery requires a running event loop"
                ) from exc
        loop.call_soon(callback, *args)


class QueueScheduler(Scheduler):
    """Collect deferred calls in a FIFO queue until run_pending() is called.

    Example:
        >>> scheduler = QueueScheduler()
        >>> space = EventSpace(scheduler=scheduler)
        >>> space.send('a', 1, deferred=True)
        >>> scheduler.run_pending()  # listeners run here
        1
    """

    __slots__ = ('_queue',)

    def __init__(self) -> None:
        self._queue: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()

    def __repr__(self) -> str:
        return f"QueueScheduler(pending={len(self._queue)})"

    def __len__(self) -> int:
        return len(self._queue)

    def submit(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.append((callback, args))

    def run_pending(self) -> int:
        """Run queued calls in FIFO order until the queue is empty.

        Calls queued while draining run in the same drain. An exception
        raised by a call propagates; the calls after it stay queued.

        Returns:
            Number of calls executed.
        """
        executed = 0
        while self._queue:
            callback, args = self._queue.popleft()
            executed += 1
            callback(*args)
        if executed:
            logger.debug("ran %d deferred call(s)", executed)
        return executed

    def clear(self) -> None:
        """Drop every queued call without running it."""
        self._queue.clear()
