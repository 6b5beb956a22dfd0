# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""EventSpace - A hierarchical publish/subscribe dispatcher.

This module provides the EventSpace class, the core of the genro-eventspace
library. Listeners are registered on levels of a tree addressed by dotted
paths; data sent to a path is delivered according to the tree position.

Key Features:
    - **Hierarchical levels**: Nested EventLevel instances forming a tree
    - **Three dispatch shapes**: exact level, descendant subtree, ancestor chain
    - **Once listeners**: Listeners removed after their first delivery
    - **Deferred delivery**: Listener calls submitted to a scheduler
    - **Subscriptions**: Notifications when listener sets change

Path Syntax:
    - Dotted paths: 'parent.child.grandchild'
    - Segment sequences: ['parent', 'child', 'grandchild']
    - Root: '' or []

Example:
    Basic usage::

        space = EventSpace()
        space.receive('app.user', lambda data, level: print('user', data))
        space.receive('app', lambda data, level: print('app', data))

        space.send('app.user', 1)              # user 1
        space.send_ancestors('app.user', 2)    # app 2, user 2
        space.send_descendants('app', 3)       # app 3, user 3

    Deferred delivery::

        scheduler = QueueScheduler()
        space = EventSpace(scheduler=scheduler)
        space.send('app.user', 1, deferred=True)
        scheduler.run_pending()
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, TypeVar

from .exceptions import InvalidListenerTypeError
from .level import EventLevel
from .paths import EventPath, join_path, split_path
from .scheduler import LoopScheduler, Scheduler
from .subscription import SubscriberCallback, check_callbacks, check_scope

logger = logging.getLogger(__name__)

Listener = Callable[[Any, EventLevel], Any]
L = TypeVar('L', bound=Callable[..., Any])


def _check_listener(listener: Any) -> None:
    if not callable(listener):
        raise InvalidListenerTypeError(
            f"listener must be callable, not {type(listener).__name__}"
        )


class OnceListener:
    """One-shot adapter registered by EventSpace.receive_once().

    On its first call the adapter calls the wrapped listener, then removes
    itself from the level it was registered on (also when the listener
    raises). Further calls, such as a second deferred delivery scheduled
    before the first one ran, do nothing.

    The adapter is the registered handle: keep it to cancel the
    registration before it fires.

    Attributes:
        listener: The wrapped listener.
        level: The level the adapter is registered on.
        fired: True once the wrapped listener has been called.
    """

    __slots__ = ('listener', 'level', 'fired', '_space')

    def __init__(self, space: EventSpace, level: EventLevel, listener: Listener) -> None:
        self.listener = listener
        self.level = level
        self.fired = False
        self._space = space

    def __repr__(self) -> str:
        return f"OnceListener({self.listener!r}, level={self.level.path!r}, fired={self.fired})"

    def __call__(self, data: Any, level: EventLevel) -> Any:
        if self.fired:
            return None
        self.fired = True
        try:
            return self.listener(data, level)
        finally:
            self._space._remove_listener(self.level, self)


class EventSpace:
    """A hierarchical publish/subscribe dispatcher.

    EventSpace provides:
    - receive(path, listener) / receive_once(path, listener): Register listeners
    - cancel / cancel_descendants / cancel_ancestors: Remove listeners
    - send / send_descendants / send_ancestors: Deliver data
    - has / has_descendants / has_ancestors: Query registrations

    Listeners are called as listener(data, level), where level is the
    EventLevel the listener is registered on. Levels are created by
    registrations only: sends, cancels and queries never create them.

    Attributes:
        root: The root EventLevel (empty path).

    Example:
        >>> space = EventSpace()
        >>> handler = space.receive('a.b', lambda data, level: print(data))
        >>> space.send('a.b', 'hello')
        hello
        >>> space.has('a.b', handler)
        True
    """

    __slots__ = ('root', '_scheduler', '_prune_empty')

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        prune_empty: bool = False,
    ) -> None:
        """Initialize an EventSpace.

        Args:
            scheduler: Scheduler used for deferred delivery. Defaults to a
                LoopScheduler submitting to the running asyncio loop.
            prune_empty: If True, cancel() and expired once listeners also
                detach the level, and then each ancestor, while it holds no
                listeners, children, subscriptions or data. If False
                (default), emptied levels stay in the tree until a
                cancel_descendants() on them or an ancestor.

        Example:
            >>> EventSpace()
            >>> EventSpace(scheduler=QueueScheduler())
            >>> EventSpace(prune_empty=True)
        """
        self.root = EventLevel()
        self._scheduler = scheduler if scheduler is not None else LoopScheduler()
        self._prune_empty = prune_empty

    def __repr__(self) -> str:
        return f"EventSpace(levels={len(self.root.map_children())}, prune_empty={self._prune_empty})"

    @property
    def scheduler(self) -> Scheduler:
        """The scheduler used for deferred delivery."""
        return self._scheduler

    @property
    def prune_empty(self) -> bool:
        """True if emptied levels are pruned after cancel()."""
        return self._prune_empty

    # ==================== Tree ====================

    def get_level(self, path: EventPath, autocreate: bool = False) -> EventLevel | None:
        """Get the level at path.

        Args:
            path: Dotted string or sequence of segments. Empty means root.
            autocreate: If True, create missing levels along the path.

        Returns:
            The EventLevel, or None if missing and autocreate is False.

        Raises:
            InvalidPathTypeError: If path has an invalid type.
        """
        return self.root.get_child(path, autocreate)

    def _chain(self, segments: tuple[str, ...], include_self: bool) -> list[EventLevel]:
        """Collect levels from root toward segments, stopping at a gap.

        The terminal level is included only if include_self is True and
        the whole path exists.
        """
        chain = []
        level = self.root
        for segment in segments:
            chain.append(level)
            child = level.children.get(segment)
            if child is None:
                return chain
            level = child
        if include_self:
            chain.append(level)
        return chain

    def _remove_listener(self, level: EventLevel, listener: Any) -> None:
        if level.remove_listener(listener) and self._prune_empty:
            self._prune(level)

    def _prune(self, level: EventLevel) -> None:
        while level.parent is not None and level.is_empty:
            parent = level.parent
            logger.debug("pruning empty level %r", level.path)
            level.detach()
            level = parent

    # ==================== Registration ====================

    def receive(self, path: EventPath, listener: L) -> L:
        """Register listener on the level at path, creating levels as needed.

        Registering the same listener twice on the same level keeps a
        single registration.

        Args:
            path: Dotted string or sequence of segments.
            listener: Callable invoked as listener(data, level).

        Returns:
            The listener itself, for chaining or later cancel().

        Raises:
            InvalidPathTypeError: If path has an invalid type.
            InvalidListenerTypeError: If listener is not callable.
        """
        segments = split_path(path)
        _check_listener(listener)
        self.root.get_child(segments, autocreate=True).add_listener(listener)
        return listener

    on = receive
    register = receive

    def receive_once(self, path: EventPath, listener: Listener) -> OnceListener:
        """Register listener for a single delivery.

        Returns:
            The OnceListener adapter actually registered. Pass it to
            cancel() to remove the registration before it fires.

        Raises:
            InvalidPathTypeError: If path has an invalid type.
            InvalidListenerTypeError: If listener is not callable.
        """
        segments = split_path(path)
        _check_listener(listener)
        level = self.root.get_child(segments, autocreate=True)
        adapter = OnceListener(self, level, listener)
        level.add_listener(adapter)
        return adapter

    once = receive_once
    register_once = receive_once

    def cancel(self, path: EventPath = (), listener: Any = None) -> None:
        """Remove listener from the level at path, or all its listeners.

        Child levels and their listeners are not touched. Missing paths
        are ignored.

        Args:
            path: Dotted string or sequence of segments. Empty means root.
            listener: The listener to remove. If None, clears the level.
        """
        level = self.get_level(path)
        if level is None:
            return
        if listener is not None:
            level.remove_listener(listener)
        else:
            level.clear_listeners()
        if self._prune_empty:
            self._prune(level)

    off = cancel

    def cancel_descendants(self, path: EventPath = (), include_self: bool = True) -> None:
        """Detach every level below path, with their listeners.

        Args:
            path: Dotted string or sequence of segments. Empty means root.
            include_self: If True, also clear the listeners at path.
        """
        level = self.get_level(path)
        if level is None:
            return
        if include_self:
            level.clear_listeners()
        level.discard_children()

    off_descendants = cancel_descendants

    def cancel_ancestors(self, path: EventPath = (), include_self: bool = True) -> None:
        """Clear the listeners of every level from the root down to path.

        Levels are kept; only listener sets are cleared. If a segment of
        path is missing, the walk stops there and the levels already
        visited stay cleared.

        Args:
            path: Dotted string or sequence of segments. Empty means root.
            include_self: If True, also clear the listeners at path.
        """
        for level in self._chain(split_path(path), include_self):
            level.clear_listeners()

    off_ancestors = cancel_ancestors

    # ==================== Dispatch ====================

    def _deliver(self, levels: Iterable[EventLevel], data: Any, deferred: bool) -> None:
        calls = [(listener, level) for level in levels for listener in level.listeners]
        if not calls:
            return
        if deferred:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("scheduling %d deferred call(s)", len(calls))
            for listener, level in calls:
                self._scheduler.submit(listener, data, level)
            return
        for listener, level in calls:
            listener(data, level)

    def send(self, path: EventPath, data: Any = None, deferred: bool = False) -> None:
        """Deliver data to the listeners registered exactly at path.

        Args:
            path: Dotted string or sequence of segments.
            data: Value passed to each listener.
            deferred: If True, submit each call to the scheduler instead
                of calling listeners inline.
        """
        level = self.get_level(path)
        if level is not None:
            self._deliver((level,), data, deferred)

    trigger = send

    def send_descendants(
        self,
        path: EventPath,
        data: Any = None,
        include_self: bool = True,
        deferred: bool = False,
    ) -> None:
        """Deliver data to the listeners at path and at every level below.

        Levels are visited in pre-order, children in creation order.

        Args:
            path: Dotted string or sequence of segments.
            data: Value passed to each listener.
            include_self: If True, deliver to the listeners at path too.
            deferred: If True, submit each call to the scheduler.
        """
        level = self.get_level(path)
        if level is not None:
            self._deliver(level.iter_children(include_self), data, deferred)

    trigger_descendants = send_descendants

    def send_ancestors(
        self,
        path: EventPath,
        data: Any = None,
        include_self: bool = True,
        deferred: bool = False,
    ) -> None:
        """Deliver data to the listeners from the root down to path.

        If a segment of path is missing, the levels visited before the gap
        (root included) still receive the data.

        Args:
            path: Dotted string or sequence of segments.
            data: Value passed to each listener.
            include_self: If True, deliver to the listeners at path too.
            deferred: If True, submit each call to the scheduler.
        """
        self._deliver(self._chain(split_path(path), include_self), data, deferred)

    trigger_ancestors = send_ancestors

    # ==================== Queries ====================

    def has(self, path: EventPath, listener: Any = None) -> bool:
        """True if the level at path has listeners (or holds listener)."""
        level = self.get_level(path)
        if level is None:
            return False
        if listener is not None:
            return level.has_listener(listener)
        return level.count > 0

    def has_descendants(self, path: EventPath, include_self: bool = True) -> bool:
        """True if any level at or below path has listeners."""
        level = self.get_level(path)
        if level is None:
            return False
        return level.for_each_children(lambda lvl: lvl.count > 0, include_self)

    def has_ancestors(self, path: EventPath, include_self: bool = True) -> bool:
        """True if any level from the root down to path has listeners."""
        return any(
            level.count > 0 for level in self._chain(split_path(path), include_self)
        )

    # ==================== Subscriptions ====================

    def subscribe(
        self,
        path: EventPath,
        subscriber_id: str,
        added: SubscriberCallback | None = None,
        removed: SubscriberCallback | None = None,
        scope: str = 'self',
    ) -> EventLevel:
        """Subscribe to listener changes on the level at path.

        The level is created if missing. See EventLevel.subscribe().

        Returns:
            The subscribed EventLevel.
        """
        segments = split_path(path)
        check_scope(scope)
        check_callbacks(added, removed)
        level = self.root.get_child(segments, autocreate=True)
        level.subscribe(subscriber_id, added=added, removed=removed, scope=scope)
        logger.debug("subscriber %r on %r (%s)", subscriber_id, join_path(segments), scope)
        return level

    def unsubscribe(self, path: EventPath, subscriber_id: str, scope: str | None = None) -> None:
        """Remove a subscription from the level at path. Missing paths are ignored."""
        level = self.get_level(path)
        if level is None:
            return
        level.unsubscribe(subscriber_id, scope)
        if self._prune_empty:
            self._prune(level)
