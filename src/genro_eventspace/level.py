# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""EventLevel - one node of the event tree."""

from __future__ import annotations

import logging
from types import BuiltinMethodType, MethodType
from typing import Any, Callable, Iterator, TypeVar

from .paths import EventPath, join_path, split_path
from .subscription import SubscriptionMixin

logger = logging.getLogger(__name__)

P = TypeVar('P')


def listener_key(listener: Any) -> Any:
    """Return the identity key of a listener.

    Listeners are told apart by identity, never by equality, so unhashable
    callables can be registered and equal but distinct handles stay
    separate. A bound method is keyed by its instance and function, so
    that two accesses of obj.method address the same registration.
    """
    if isinstance(listener, MethodType):
        return (id(listener.__self__), listener.__func__)
    if isinstance(listener, BuiltinMethodType):
        return (id(listener.__self__), listener.__name__)
    return id(listener)


class EventLevel(SubscriptionMixin):
    """A level in an EventSpace hierarchy.

    Each level has:
    - name: The level's own path segment (empty string for the root)
    - parent: The containing level, or None for the root
    - children: Dict mapping child segment to child EventLevel
    - data: Optional user payload, reset when the level loses its last listener

    Listeners are kept in registration order and are unique by identity
    (see listener_key): adding the same listener twice keeps a single entry.

    Example:
        >>> root = EventLevel()
        >>> level = root.get_child('a.b', autocreate=True)
        >>> level.full_name
        ('a', 'b')
        >>> level.parent.name
        'a'
    """

    __slots__ = (
        'name', 'parent', 'children', 'data',
        '_full_name', '_listeners', '_subscribers',
    )

    def __init__(self, name: str = '', parent: EventLevel | None = None) -> None:
        """Initialize an EventLevel.

        Args:
            name: The level's path segment.
            parent: The level containing this one (None for a root).
        """
        self.name = name
        self.parent = parent
        self.children: dict[str, EventLevel] = {}
        self.data: Any = None
        self._full_name: tuple[str, ...] = parent._full_name + (name,) if parent is not None else ()
        self._listeners: dict[Any, Any] = {}
        self._subscribers = None

    def __repr__(self) -> str:
        return (
            f"EventLevel({self.path!r}, listeners={len(self._listeners)}, "
            f"children={len(self.children)})"
        )

    # ==================== Identity ====================

    @property
    def is_root(self) -> bool:
        """True if this level has no parent."""
        return self.parent is None

    @property
    def full_name(self) -> tuple[str, ...]:
        """Segments from the root down to this level (root excluded).

        Fixed at creation: a detached level keeps the path it had in the tree.
        """
        return self._full_name

    @property
    def path(self) -> str:
        """Dotted form of full_name."""
        return join_path(self.full_name)

    @property
    def depth(self) -> int:
        """Depth of this level in the hierarchy (root=0)."""
        return len(self._full_name)

    @property
    def is_empty(self) -> bool:
        """True if the level holds no listeners, children, subscriptions or data."""
        return (
            not self._listeners
            and not self.children
            and not self.has_subscribers
            and self.data is None
        )

    # ==================== Listeners ====================

    @property
    def listeners(self) -> tuple[Any, ...]:
        """Snapshot of the listeners registered on this level, in order."""
        return tuple(self._listeners.values())

    @property
    def count(self) -> int:
        """Number of listeners registered on this level."""
        return len(self._listeners)

    @property
    def ancestor_listener_count(self) -> int:
        """Number of listeners registered on all ancestors (self excluded)."""
        return sum(len(level._listeners) for level in self.iter_parents())

    @property
    def descendants_listener_count(self) -> int:
        """Number of listeners registered on all descendants (self excluded)."""
        return sum(len(level._listeners) for level in self.iter_children())

    def has_listener(self, listener: Any) -> bool:
        """True if listener is registered on this level."""
        return listener_key(listener) in self._listeners

    def add_listener(self, listener: Any) -> bool:
        """Add a listener to this level.

        Returns:
            True if added, False if it was already registered.
        """
        key = listener_key(listener)
        if key in self._listeners:
            return False
        self._listeners[key] = listener
        self._on_listener_added(listener)
        return True

    def remove_listener(self, listener: Any) -> bool:
        """Remove a listener from this level.

        Returns:
            True if removed, False if it was not registered.
        """
        registered = self._listeners.pop(listener_key(listener), None)
        if registered is None:
            return False
        if not self._listeners:
            self.data = None
        self._on_listener_removed(registered)
        return True

    def clear_listeners(self) -> tuple[Any, ...]:
        """Remove every listener from this level (children untouched).

        Returns:
            The removed listeners, in registration order.
        """
        removed = tuple(self._listeners.values())
        if not removed:
            return removed
        self._listeners.clear()
        self.data = None
        for listener in removed:
            self._on_listener_removed(listener)
        return removed

    # ==================== Children ====================

    def get_child(self, path: EventPath, autocreate: bool = False) -> EventLevel | None:
        """Get the level at path relative to this one.

        Args:
            path: Dotted string or sequence of segments. Empty means self.
            autocreate: If True, create missing levels along the path.

        Returns:
            The EventLevel at path, or None if missing and autocreate is False.
            Nothing is created when None is returned.
        """
        level = self
        for segment in split_path(path):
            child = level.children.get(segment)
            if child is None:
                if not autocreate:
                    return None
                child = EventLevel(segment, parent=level)
                level.children[segment] = child
                logger.debug("created level %r", child.path)
            level = child
        return level

    def discard_children(self) -> None:
        """Detach every descendant level, dropping their listeners.

        Subscribers are notified once of each listener dropped with the
        subtree; the detached levels are left empty so later removals
        (a once listener already scheduled, for instance) are no-ops.
        """
        if not self.children:
            return
        for descendant in list(self.iter_children()):
            dropped = tuple(descendant._listeners.values())
            descendant._listeners.clear()
            descendant.data = None
            for listener in dropped:
                descendant._on_listener_removed(listener)
        for child in self.children.values():
            child.parent = None
        self.children.clear()
        logger.debug("discarded descendants of %r", self.path)

    def detach(self) -> None:
        """Remove this level from its parent's children."""
        parent = self.parent
        if parent is None:
            return
        if parent.children.get(self.name) is self:
            del parent.children[self.name]
        self.parent = None

    # ==================== Walk ====================

    def iter_children(self, include_self: bool = False) -> Iterator[EventLevel]:
        """Yield descendant levels in pre-order (parent before children)."""
        if include_self:
            yield self
        for child in list(self.children.values()):
            yield from child.iter_children(include_self=True)

    def iter_parents(self, include_self: bool = False) -> Iterator[EventLevel]:
        """Yield ancestor levels from the parent up to the root."""
        level = self if include_self else self.parent
        while level is not None:
            yield level
            level = level.parent

    def walk(self) -> Iterator[tuple[str, EventLevel]]:
        """Yield (dotted_path, level) for every descendant, in pre-order.

        Paths are relative to this level.

        Example:
            >>> for path, level in space.root.walk():
            ...     print(path, level.count)
        """
        def _walk_gen(level: EventLevel, prefix: str) -> Iterator[tuple[str, EventLevel]]:
            for child in list(level.children.values()):
                path = f"{prefix}.{child.name}" if prefix else child.name
                yield path, child
                yield from _walk_gen(child, path)

        return _walk_gen(self, '')

    def for_each_children(
        self, callback: Callable[[EventLevel], Any], include_self: bool = False
    ) -> bool:
        """Call callback on each descendant; a truthy result stops the walk.

        Returns:
            True if the walk was stopped by the callback.
        """
        for level in self.iter_children(include_self):
            if callback(level):
                return True
        return False

    def for_each_parents(
        self, callback: Callable[[EventLevel], Any], include_self: bool = False
    ) -> bool:
        """Call callback on each ancestor; a truthy result stops the walk.

        Returns:
            True if the walk was stopped by the callback.
        """
        for level in self.iter_parents(include_self):
            if callback(level):
                return True
        return False

    def map_children(
        self, callback: Callable[[EventLevel], Any] | None = None, include_self: bool = False
    ) -> list[Any]:
        """Return descendants, or callback results for each descendant."""
        if callback is None:
            return list(self.iter_children(include_self))
        return [callback(level) for level in self.iter_children(include_self)]

    def map_parents(
        self, callback: Callable[[EventLevel], Any] | None = None, include_self: bool = False
    ) -> list[Any]:
        """Return ancestors, or callback results for each ancestor."""
        if callback is None:
            return list(self.iter_parents(include_self))
        return [callback(level) for level in self.iter_parents(include_self)]

    def reduce_children(
        self, callback: Callable[[P, EventLevel], P], initial: P, include_self: bool = False
    ) -> P:
        """Fold callback over the descendants, like functools.reduce."""
        result = initial
        for level in self.iter_children(include_self):
            result = callback(result, level)
        return result

    def reduce_parents(
        self, callback: Callable[[P, EventLevel], P], initial: P, include_self: bool = False
    ) -> P:
        """Fold callback over the ancestors, like functools.reduce."""
        result = initial
        for level in self.iter_parents(include_self):
            result = callback(result, level)
        return result

    def find_child(
        self, predicate: Callable[[EventLevel], bool], include_self: bool = False
    ) -> EventLevel | None:
        """Return the first descendant matching predicate, or None."""
        for level in self.iter_children(include_self):
            if predicate(level):
                return level
        return None

    def find_parent(
        self, predicate: Callable[[EventLevel], bool], include_self: bool = False
    ) -> EventLevel | None:
        """Return the first ancestor matching predicate, or None."""
        for level in self.iter_parents(include_self):
            if predicate(level):
                return level
        return None
