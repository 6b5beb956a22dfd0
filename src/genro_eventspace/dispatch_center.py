# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Dispatch center - cache mirroring and the process-wide default space.

CacheMirror wraps an EventSpace so that every send() is also delivered
under a cache namespace: sending to 'a.b' also sends to
'__cache__receive.a.b'. A cache can then observe all the traffic by
listening below the marker, without being a listener of each path.

The module also keeps a default CacheMirror shared by the whole process,
with module-level shortcuts::

    from genro_eventspace import dispatch_center

    dispatch_center.receive('user.login', on_login)
    dispatch_center.send('user.login', {'id': 1})
"""

from __future__ import annotations

from typing import Any

from .paths import EventPath, split_path
from .space import EventSpace, Listener, OnceListener

CACHE_MARKER = '__cache__receive'


class CacheMirror:
    """EventSpace decorator mirroring every send() under a cache marker.

    Only send() is decorated. Every other attribute (receive, cancel,
    send_descendants, has, root, ...) is delegated to the wrapped space.

    Args:
        space: The EventSpace to wrap. A new one is created if None.
        cache_marker: Leading segment of the mirrored paths.

    Example:
        >>> center = CacheMirror()
        >>> center.receive('__cache__receive.a', lambda data, level: print('cache', data))
        >>> center.send('a', 1)
        cache 1
        >>> center.send('a', 2, mirror=False)  # not mirrored
    """

    __slots__ = ('space', 'cache_marker')

    def __init__(
        self,
        space: EventSpace | None = None,
        cache_marker: str = CACHE_MARKER,
    ) -> None:
        self.space = space if space is not None else EventSpace()
        self.cache_marker = cache_marker

    def __repr__(self) -> str:
        return f"CacheMirror({self.space!r}, cache_marker={self.cache_marker!r})"

    def __getattr__(self, name: str) -> Any:
        """Delegate attribute access to the wrapped space."""
        if name.startswith('_'):
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )
        return getattr(self.space, name)

    def send(
        self,
        path: EventPath,
        data: Any = None,
        deferred: bool = False,
        mirror: bool = True,
    ) -> None:
        """Send data to path, then to the same path under the cache marker.

        Args:
            path: Dotted string or sequence of segments.
            data: Value passed to each listener.
            deferred: If True, submit each call to the scheduler.
            mirror: If False, skip the cache delivery.
        """
        segments = split_path(path)
        self.space.send(segments, data, deferred=deferred)
        if mirror:
            self.space.send((self.cache_marker, *segments), data, deferred=deferred)

    trigger = send


default_center = CacheMirror()


def reset_default_center(space: EventSpace | None = None) -> CacheMirror:
    """Replace the process-wide center with a fresh one and return it."""
    global default_center
    default_center = CacheMirror(space)
    return default_center


def receive(path: EventPath, listener: Listener) -> Listener:
    """Register listener on the default center. See EventSpace.receive()."""
    return default_center.space.receive(path, listener)


def receive_once(path: EventPath, listener: Listener) -> OnceListener:
    """Register a once listener on the default center."""
    return default_center.space.receive_once(path, listener)


def cancel(path: EventPath = (), listener: Any = None) -> None:
    """Cancel listeners on the default center. See EventSpace.cancel()."""
    default_center.space.cancel(path, listener)


def send(path: EventPath, data: Any = None, deferred: bool = False, mirror: bool = True) -> None:
    """Send data through the default center, mirrored to the cache namespace."""
    default_center.send(path, data, deferred=deferred, mirror=mirror)


def has(path: EventPath, listener: Any = None) -> bool:
    """Query the default center. See EventSpace.has()."""
    return default_center.space.has(path, listener)
