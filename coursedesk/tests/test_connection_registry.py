"""
Tests for the connection registry.
"""

import asyncio

from coursedesk.tests.conftest import FakeConnection


def test_register_and_get(registry):
    connection = FakeConnection()
    registry.register("u1", connection)

    assert registry.get("u1") is connection
    assert registry.get("u2") is None
    assert len(registry) == 1


def test_register_replaces_previous_connection(registry):
    first, second = FakeConnection(), FakeConnection()
    registry.register("u1", first)
    registry.register("u1", second)

    assert registry.get("u1") is second
    assert len(registry) == 1


def test_unregister(registry):
    connection = FakeConnection()
    registry.register("u1", connection)

    assert registry.unregister("u1") is connection
    assert registry.get("u1") is None
    assert registry.unregister("u1") is None


def test_stale_connection_cannot_evict_replacement(registry):
    stale, current = FakeConnection(), FakeConnection()
    registry.register("u1", stale)
    registry.register("u1", current)

    assert registry.unregister("u1", stale) is None
    assert registry.get("u1") is current

    assert registry.unregister("u1", current) is current


def test_disconnect_closes_connection(registry):
    connection = FakeConnection()
    registry.register("u1", connection)

    asyncio.run(registry.disconnect("u1"))

    assert connection.closed
    assert registry.get("u1") is None


def test_disconnect_unknown_user_is_noop(registry):
    asyncio.run(registry.disconnect("nobody"))
    assert len(registry) == 0


def test_close_all(registry):
    connections = [FakeConnection() for _ in range(3)]
    for index, connection in enumerate(connections):
        registry.register(f"u{index}", connection)

    asyncio.run(registry.close_all())

    assert len(registry) == 0
    assert all(c.closed for c in connections)
