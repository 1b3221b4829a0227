# Ensures local imports (e.g. from main import app) work
import sys, os
import pytest


ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)


class Counter:
    """Small stateful receiver used across the suite."""

    def __init__(self, total=0):
        self.total = total
        self.history = []

    def add(self, amount):
        self.total += amount
        self.history.append(amount)
        return self.total

    def is_positive(self, amount):
        return amount > 0

    def items(self, values):
        self.history.extend(values)
        return list(values)

    def explode(self, amount):
        raise ValueError(f"cannot take {amount}")


@pytest.fixture
def counter():
    return Counter(total=10)


@pytest.fixture
def registry():
    from reflection.registry import MethodRegistry

    registry = MethodRegistry()
    for name in ("add", "is_positive", "items", "explode"):
        registry.register("Counter", name, getattr(Counter, name))
    return registry


@pytest.fixture
def ruler():
    from reflection.ruler import DeclaredRuler

    return DeclaredRuler()
