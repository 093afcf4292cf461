"""Tests for the listener registry."""
from __future__ import annotations

import pytest

from eventide.errors import LimitExceededError
from eventide.listeners import Listener, ListenerRegistry


def noop(*_args: object) -> None:
    pass


class TestAdd:
    def test_preserves_insertion_order(self) -> None:
        registry = ListenerRegistry()
        first = registry.add("foo", lambda: None)
        second = registry.add("foo", lambda: None)
        assert registry.snapshot("foo") == (first, second)

    def test_once_flag_recorded(self) -> None:
        registry = ListenerRegistry()
        entry = registry.add("foo", noop, once=True)
        assert entry.once is True
        assert entry.callback is noop

    def test_limit_rejects_without_mutation(self) -> None:
        registry = ListenerRegistry(limit=2)
        registry.add("foo", noop)
        registry.add("foo", noop)
        with pytest.raises(LimitExceededError):
            registry.add("foo", noop)
        assert registry.count("foo") == 2

    def test_limit_is_per_event(self) -> None:
        registry = ListenerRegistry(limit=1)
        registry.add("foo", noop)
        registry.add("bar", noop)
        assert registry.count("bar") == 1

    def test_global_limit_independent(self) -> None:
        registry = ListenerRegistry(limit=1)
        registry.add("foo", noop)
        registry.add_global(noop)
        with pytest.raises(LimitExceededError) as exc_info:
            registry.add_global(noop)
        assert exc_info.value.event_name is None
        assert registry.global_count() == 1

    def test_zero_limit_is_unlimited(self) -> None:
        registry = ListenerRegistry(limit=0)
        for _ in range(50):
            registry.add("foo", noop)
        assert registry.count("foo") == 50


class TestRemove:
    def test_removes_all_identity_matches(self) -> None:
        registry = ListenerRegistry()
        other = registry.add("foo", lambda: None)
        registry.add("foo", noop)
        registry.add("foo", noop, once=True)
        removed = registry.remove("foo", noop)
        assert len(removed) == 2
        assert registry.snapshot("foo") == (other,)

    def test_bound_method_removed(self) -> None:
        class Handler:
            def on_foo(self) -> None:
                pass

        handler = Handler()
        registry = ListenerRegistry()
        registry.add("foo", handler.on_foo)
        assert registry.remove("foo", handler.on_foo) != []
        assert registry.count("foo") == 0

    def test_bound_method_of_other_instance_kept(self) -> None:
        class Handler:
            def on_foo(self) -> None:
                pass

        a, b = Handler(), Handler()
        registry = ListenerRegistry()
        registry.add("foo", a.on_foo)
        kept = registry.add("foo", b.on_foo)
        registry.remove("foo", a.on_foo)
        assert registry.snapshot("foo") == (kept,)

    def test_global_bound_method_removed(self) -> None:
        class Handler:
            def on_any(self, name: str) -> None:
                pass

        handler = Handler()
        registry = ListenerRegistry()
        registry.add_global(handler.on_any)
        registry.remove_global(handler.on_any)
        assert registry.global_count() == 0

    def test_without_callback_drops_event(self) -> None:
        registry = ListenerRegistry()
        registry.add("foo", noop)
        registry.add("foo", noop)
        registry.remove("foo")
        assert registry.count("foo") == 0
        assert "foo" not in registry.names()

    def test_unknown_event_is_noop(self) -> None:
        registry = ListenerRegistry()
        assert registry.remove("missing", noop) == []

    def test_remove_global(self) -> None:
        registry = ListenerRegistry()
        registry.add_global(noop)
        keep = registry.add_global(lambda name: None)
        registry.remove_global(noop)
        assert registry.snapshot_global() == (keep,)
        registry.remove_global()
        assert registry.global_count() == 0


class TestDiscard:
    def test_removes_only_given_entry(self) -> None:
        registry = ListenerRegistry()
        first = registry.add("foo", noop, once=True)
        second = registry.add("foo", noop, once=True)
        registry.discard("foo", first)
        assert registry.snapshot("foo") == (second,)

    def test_discard_twice_is_noop(self) -> None:
        registry = ListenerRegistry()
        entry = registry.add("foo", noop)
        registry.discard("foo", entry)
        registry.discard("foo", entry)
        assert registry.count("foo") == 0

    def test_discard_global(self) -> None:
        registry = ListenerRegistry()
        first = registry.add_global(noop)
        second = registry.add_global(noop)
        registry.discard_global(second)
        assert registry.snapshot_global() == (first,)


class TestClear:
    def test_clears_everything(self) -> None:
        registry = ListenerRegistry()
        registry.add("foo", noop)
        registry.add("bar", noop)
        registry.add_global(noop)
        removed = registry.clear()
        assert len(removed) == 3
        assert all(isinstance(entry, Listener) for entry in removed)
        assert registry.names() == []
        assert registry.global_count() == 0


class TestSnapshot:
    def test_snapshot_is_detached_from_registry(self) -> None:
        registry = ListenerRegistry()
        registry.add("foo", noop)
        snap = registry.snapshot("foo")
        registry.add("foo", noop)
        assert len(snap) == 1

    def test_listeners_compare_by_identity(self) -> None:
        assert Listener(noop) != Listener(noop)
