# tests/shadow/test_registry.py

import threading

import pytest

from reflection.registry import MethodRegistry, SnapshotError, UnknownMethodError


class Snapshotting:
    def __init__(self, items):
        self.items = items
        self.snapshots = 0

    def snapshot(self):
        self.snapshots += 1
        return Snapshotting(list(self.items))


def test_resolve_registered_method(registry):
    func = registry.resolve("Counter", "add")

    assert func.__name__ == "add"
    assert ("Counter", "add") in registry


def test_resolve_unknown_method():
    with pytest.raises(UnknownMethodError):
        MethodRegistry().resolve("Counter", "add")


def test_unregister(registry):
    registry.unregister("Counter", "add")

    assert ("Counter", "add") not in registry


def test_snapshot_is_deep_by_default(counter, registry):
    counter.history.append([1])
    clone = registry.snapshot("Counter", "add", counter)

    clone.history[0].append(2)
    clone.total = 99

    assert counter.history == [[1]]
    assert counter.total == 10


def test_snapshot_prefers_object_snapshot():
    registry = MethodRegistry()
    original = Snapshotting([1, 2])

    clone = registry.snapshot("Snapshotting", "any", original)

    assert original.snapshots == 1
    assert clone.items == [1, 2]
    assert clone.items is not original.items


def test_snapshot_prefers_registered_clone():
    registry = MethodRegistry()
    registry.register("Snapshotting", "any", lambda self: None, clone=lambda obj: "cloned")

    assert registry.snapshot("Snapshotting", "any", Snapshotting([])) == "cloned"


def test_snapshot_failure_is_wrapped():
    registry = MethodRegistry()
    lock_holder = {"lock": threading.Lock()}

    with pytest.raises(SnapshotError):
        registry.snapshot("Holder", "any", lock_holder)
