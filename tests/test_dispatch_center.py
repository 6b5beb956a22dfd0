# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for CacheMirror and the default dispatch center."""

import pytest

from genro_eventspace import CACHE_MARKER, CacheMirror, EventSpace, QueueScheduler
from genro_eventspace import dispatch_center


@pytest.fixture
def center():
    return CacheMirror(EventSpace(scheduler=QueueScheduler()))


@pytest.fixture(autouse=True)
def fresh_default_center():
    """Give every test its own process-wide center."""
    dispatch_center.reset_default_center()
    yield
    dispatch_center.reset_default_center()


class TestCacheMirror:
    """Tests for CacheMirror."""

    def test_send_is_mirrored(self, center):
        """Test send also delivers under the cache marker."""
        calls = []
        center.receive('a.b', lambda data, level: calls.append(('direct', level.path, data)))
        center.receive(
            [CACHE_MARKER, 'a', 'b'],
            lambda data, level: calls.append(('cache', level.path, data)),
        )
        center.send('a.b', 1)
        assert calls == [
            ('direct', 'a.b', 1),
            ('cache', '__cache__receive.a.b', 1),
        ]

    def test_mirror_disabled(self, center):
        """Test mirror=False skips the cache delivery."""
        calls = []
        center.receive('__cache__receive.a', lambda data, level: calls.append(data))
        center.send('a', 1, mirror=False)
        assert calls == []

    def test_subscriber_on_cache_namespace(self, center):
        """Test a descendants subscriber on the marker sees cache registrations."""
        center.receive('x', lambda data, level: None)
        center.receive('y.z', lambda data, level: None)
        seen = []
        center.space.subscribe(
            CACHE_MARKER, 'observer',
            added=lambda listener, level: seen.append(level.path),
            scope='descendants',
        )
        center.receive('__cache__receive.y.z', lambda data, level: None)
        assert seen == ['__cache__receive.y.z']

    def test_mirror_to_missing_cache_path(self, center):
        """Test mirroring to a path nobody listens to creates nothing."""
        center.receive('a', lambda data, level: None)
        center.send('a', 1)
        assert center.get_level(CACHE_MARKER) is None

    def test_custom_marker(self):
        """Test a custom cache marker."""
        calls = []
        center = CacheMirror(EventSpace(), cache_marker='__mirror__')
        center.receive('__mirror__.a', lambda data, level: calls.append(data))
        center.send(['a'], 'payload')
        assert calls == ['payload']

    def test_deferred_mirror(self, center):
        """Test deferred sends defer both deliveries."""
        calls = []
        center.receive('a', lambda data, level: calls.append('direct'))
        center.receive('__cache__receive.a', lambda data, level: calls.append('cache'))
        center.trigger('a', 1, deferred=True)
        assert calls == []
        center.scheduler.run_pending()
        assert calls == ['direct', 'cache']

    def test_delegates_to_space(self, center):
        """Test attributes other than send come from the wrapped space."""
        listener = center.receive('a', lambda data, level: None)
        assert center.has('a', listener) is True
        assert center.root is center.space.root
        center.cancel('a', listener)
        assert center.has('a') is False

    def test_private_attributes_not_delegated(self, center):
        """Test underscore names are not looked up on the space."""
        with pytest.raises(AttributeError):
            center._scheduler

    def test_default_space(self):
        """Test a CacheMirror without space creates one."""
        center = CacheMirror()
        assert isinstance(center.space, EventSpace)
        assert center.cache_marker == CACHE_MARKER
        assert 'CacheMirror' in repr(center)


class TestDefaultCenter:
    """Tests for the module level dispatch center."""

    def test_module_functions(self):
        """Test receive, send, has and cancel on the default center."""
        calls = []
        listener = dispatch_center.receive('user.login', lambda data, level: calls.append(data))
        dispatch_center.receive(
            '__cache__receive.user.login',
            lambda data, level: calls.append(('cache', data)),
        )
        assert dispatch_center.has('user.login', listener) is True
        dispatch_center.send('user.login', {'id': 1})
        assert calls == [{'id': 1}, ('cache', {'id': 1})]
        dispatch_center.cancel('user.login', listener)
        assert dispatch_center.has('user.login') is False

    def test_module_receive_once(self):
        """Test receive_once on the default center."""
        calls = []
        dispatch_center.receive_once('a', lambda data, level: calls.append(data))
        dispatch_center.send('a', 1)
        dispatch_center.send('a', 2)
        assert calls == [1]

    def test_reset_default_center(self):
        """Test reset replaces the shared center."""
        dispatch_center.receive('a', lambda data, level: None)
        space = EventSpace()
        center = dispatch_center.reset_default_center(space)
        assert dispatch_center.default_center is center
        assert center.space is space
        assert dispatch_center.has('a') is False
