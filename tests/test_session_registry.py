"""
Unit tests for the session registry.
"""

from services.realtime.session_registry import SessionRegistry


def test_register_is_idempotent():
    registry = SessionRegistry()
    registry.register("S1", "a")
    registry.register("S1", "a")

    assert registry.members_of("S1") == {"a"}
    assert registry.count("S1") == 1


def test_register_creates_session_on_first_member():
    registry = SessionRegistry()
    assert "S1" not in registry

    registry.register("S1", "a")
    registry.register("S1", "b")

    assert "S1" in registry
    assert registry.members_of("S1") == {"a", "b"}
    assert len(registry) == 1


def test_unregister_last_member_removes_session():
    registry = SessionRegistry()
    registry.register("S1", "a")
    registry.register("S1", "b")

    registry.unregister("S1", "a")
    assert registry.members_of("S1") == {"b"}

    registry.unregister("S1", "b")
    assert "S1" not in registry
    assert registry.session_ids() == frozenset()


def test_unregister_unknown_is_noop():
    registry = SessionRegistry()
    registry.unregister("missing", "a")
    registry.register("S1", "a")
    registry.unregister("S1", "zzz")

    assert registry.members_of("S1") == {"a"}


def test_members_of_unknown_session_is_empty():
    registry = SessionRegistry()
    assert registry.members_of("nope") == frozenset()
    assert registry.count("nope") == 0


def test_members_of_returns_snapshot():
    registry = SessionRegistry()
    registry.register("S1", "a")
    snapshot = registry.members_of("S1")

    registry.register("S1", "b")

    assert snapshot == {"a"}
