# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Event path normalization.

An event path names one level of the event tree. It can be given either as
a sequence of segment strings or as a single string using '.' as the
delimiter::

    'app.user.login'          -> ('app', 'user', 'login')
    ['app', 'user', 'login']  -> ('app', 'user', 'login')
    ''                        -> ()  # the root level

There is no escaping: a literal '.' cannot appear inside a string segment,
and empty segments ('a..b') are kept as they are.
"""

from __future__ import annotations

from typing import Sequence, Union

from .exceptions import InvalidPathTypeError

EventPath = Union[str, Sequence[str]]

PATH_SEPARATOR = '.'


def split_path(path: EventPath) -> tuple[str, ...]:
    """Normalize an event path into a tuple of segments.

    Args:
        path: Dotted string or list/tuple of segment strings.

    Returns:
        Tuple of segments. The empty tuple denotes the root.

    Raises:
        InvalidPathTypeError: If path is not a string nor a list/tuple
            of strings.

    Example:
        >>> split_path('a.b')
        ('a', 'b')
        >>> split_path('')
        ()
        >>> split_path('a..b')
        ('a', '', 'b')
    """
    if isinstance(path, str):
        if not path:
            return ()
        return tuple(path.split(PATH_SEPARATOR))

    if isinstance(path, (list, tuple)):
        for segment in path:
            if not isinstance(segment, str):
                raise InvalidPathTypeError(
                    f"path segments must be str, not {type(segment).__name__}"
                )
        return tuple(path)

    raise InvalidPathTypeError(
        f"path must be str, list or tuple, not {type(path).__name__}"
    )


def join_path(segments: Sequence[str]) -> str:
    """Return the dotted string form of a segment sequence."""
    return PATH_SEPARATOR.join(segments)
