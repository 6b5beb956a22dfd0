# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""EventSpace exceptions."""

from __future__ import annotations


class EventSpaceError(Exception):
    """Base exception for EventSpace errors."""

    pass


class InvalidPathTypeError(EventSpaceError, TypeError):
    """Raised when a path is neither a string nor a sequence of strings."""

    pass


class InvalidListenerTypeError(EventSpaceError, TypeError):
    """Raised when a listener or subscription callback is not callable."""

    pass


class NoEventLoopError(EventSpaceError, RuntimeError):
    """Raised when deferred delivery is requested without a running loop."""

    pass
