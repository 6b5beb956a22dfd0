# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Listener change subscriptions for EventLevel.

A subscriber is notified when listeners are added to or removed from a
level. Subscribers are not listeners: they never receive sent data, only
the changed listener and the level whose listener set changed.

Scopes:
    - 'self': changes on the subscribed level itself
    - 'ancestors': changes on any strict ancestor of the subscribed level
    - 'descendants': changes on any strict descendant of the subscribed level

Example:
    >>> level = space.get_level('app', autocreate=True)
    >>> level.subscribe('audit', added=lambda listener, lvl: print(lvl.path),
    ...                 scope='descendants')
    >>> space.receive('app.user', handler)  # prints 'app.user'
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from .exceptions import InvalidListenerTypeError

if TYPE_CHECKING:
    from .level import EventLevel

SubscriberCallback = Callable[[Any, 'EventLevel'], Any]

SCOPES = ('self', 'ancestors', 'descendants')

_ADDED = 0
_REMOVED = 1


def check_scope(scope: str) -> None:
    """Raise ValueError if scope is not one of SCOPES."""
    if scope not in SCOPES:
        raise ValueError(
            f"Unknown subscription scope: {scope!r} (expected one of {', '.join(SCOPES)})"
        )


def check_callbacks(*callbacks: SubscriberCallback | None) -> None:
    """Raise InvalidListenerTypeError if a given callback is not callable."""
    for callback in callbacks:
        if callback is not None and not callable(callback):
            raise InvalidListenerTypeError(
                f"subscriber callback must be callable, not {type(callback).__name__}"
            )


class SubscriptionMixin:
    """Mixin adding listener change subscriptions to EventLevel.

    The host class must define the ``_subscribers`` slot (initialized to
    None) and provide iter_parents() and iter_children().
    """

    __slots__ = ()

    _subscribers: dict[str, dict[str, tuple[SubscriberCallback | None, SubscriberCallback | None]]] | None

    def subscribe(
        self,
        subscriber_id: str,
        added: SubscriberCallback | None = None,
        removed: SubscriberCallback | None = None,
        scope: str = 'self',
    ) -> None:
        """Register callbacks for listener additions and/or removals.

        Subscribing again with the same id and scope replaces the callbacks.

        Args:
            subscriber_id: Key identifying the subscription.
            added: Called as added(listener, level) after an addition.
            removed: Called as removed(listener, level) after a removal.
            scope: 'self', 'ancestors' or 'descendants'.

        Raises:
            ValueError: If scope is unknown.
            InvalidListenerTypeError: If a given callback is not callable.
        """
        check_scope(scope)
        check_callbacks(added, removed)
        if self._subscribers is None:
            self._subscribers = {s: {} for s in SCOPES}
        self._subscribers[scope][subscriber_id] = (added, removed)

    def unsubscribe(self, subscriber_id: str, scope: str | None = None) -> None:
        """Remove a subscription from one scope, or from all if scope is None."""
        if scope is not None:
            check_scope(scope)
        if self._subscribers is None:
            return
        for current in (SCOPES if scope is None else (scope,)):
            self._subscribers[current].pop(subscriber_id, None)

    @property
    def has_subscribers(self) -> bool:
        """True if this level holds at least one subscription in any scope."""
        if self._subscribers is None:
            return False
        return any(self._subscribers.values())

    def _notify(self, scope: str, kind: int, listener: Any, origin: EventLevel) -> None:
        if not self._subscribers:
            return
        subscribers = self._subscribers[scope]
        if not subscribers:
            return
        for callbacks in list(subscribers.values()):
            callback = callbacks[kind]
            if callback is not None:
                callback(listener, origin)

    def _trigger_change(self, kind: int, listener: Any) -> None:
        origin: EventLevel = self  # type: ignore[assignment]
        self._notify('self', kind, listener, origin)
        for ancestor in self.iter_parents():
            ancestor._notify('descendants', kind, listener, origin)
        for descendant in self.iter_children():
            descendant._notify('ancestors', kind, listener, origin)

    def _on_listener_added(self, listener: Any) -> None:
        self._trigger_change(_ADDED, listener)

    def _on_listener_removed(self, listener: Any) -> None:
        self._trigger_change(_REMOVED, listener)

