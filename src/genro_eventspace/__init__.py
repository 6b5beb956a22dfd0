# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-EventSpace - Hierarchical publish/subscribe over dotted paths.

A lightweight, zero-dependency library dispatching data to listeners
organized in a tree of levels, for the Genro ecosystem (Genro Kyō).
"""

__version__ = "0.1.0"

from .dispatch_center import CACHE_MARKER, CacheMirror
from .exceptions import (
    EventSpaceError,
    InvalidListenerTypeError,
    InvalidPathTypeError,
    NoEventLoopError,
)
from .level import EventLevel
from .paths import EventPath, join_path, split_path
from .scheduler import LoopScheduler, QueueScheduler, Scheduler
from .space import EventSpace, Listener, OnceListener

__all__ = [
    # Core classes
    "EventSpace",
    "EventLevel",
    "OnceListener",
    "Listener",
    # Paths
    "EventPath",
    "split_path",
    "join_path",
    # Deferred delivery
    "Scheduler",
    "LoopScheduler",
    "QueueScheduler",
    # Cache mirroring
    "CacheMirror",
    "CACHE_MARKER",
    # Exceptions
    "EventSpaceError",
    "InvalidPathTypeError",
    "InvalidListenerTypeError",
    "NoEventLoopError",
]
