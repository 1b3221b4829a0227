# reflection/registry.py

import copy
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

MethodKey = Tuple[str, str]
CloneFn = Callable[[Any], Any]


class UnknownMethodError(LookupError):
    pass


class SnapshotError(RuntimeError):
    pass


class MethodRegistry:

    def __init__(self):
        """
        Explicit (class, method) -> callable table used for shadow dispatch.

        Each entry may carry its own clone function. Receivers without one
        are duplicated with their own snapshot() method when they define it,
        otherwise with copy.deepcopy. Either way the copy must share no
        mutable state with the original.
        """
        self._methods: Dict[MethodKey, Callable[..., Any]] = {}
        self._clones: Dict[MethodKey, CloneFn] = {}
        self._lock = Lock()

    def __contains__(self, key: MethodKey) -> bool:
        with self._lock:
            return key in self._methods

    def __len__(self):
        with self._lock:
            return len(self._methods)

    def register(self, klass: str, method: str, func: Callable[..., Any], clone: Optional[CloneFn] = None):
        with self._lock:
            self._methods[(klass, method)] = func
            if clone is not None:
                self._clones[(klass, method)] = clone
            else:
                self._clones.pop((klass, method), None)
        return func

    def unregister(self, klass: str, method: str):
        with self._lock:
            self._methods.pop((klass, method), None)
            self._clones.pop((klass, method), None)

    def resolve(self, klass: str, method: str) -> Callable[..., Any]:
        with self._lock:
            func = self._methods.get((klass, method))
        if func is None:
            raise UnknownMethodError(f"no method registered for {klass}.{method}")
        return func

    def snapshot(self, klass: str, method: str, obj: Any) -> Any:
        with self._lock:
            clone = self._clones.get((klass, method))

        try:
            if clone is not None:
                return clone(obj)
            if callable(getattr(obj, "snapshot", None)):
                return obj.snapshot()
            return copy.deepcopy(obj)
        except Exception as e:
            raise SnapshotError(f"cannot snapshot {klass} receiver: {e}") from e

    def snapshot_args(self, klass: str, method: str, args: Sequence[Any]) -> List[Any]:
        """
        Deep copy of a call's arguments, taken as one unit so arguments
        that alias each other still do in the copy.
        """
        try:
            return copy.deepcopy(list(args))
        except Exception as e:
            raise SnapshotError(f"cannot snapshot {klass}.{method} arguments: {e}") from e

    def clear(self):
        with self._lock:
            self._methods.clear()
            self._clones.clear()


# Global singleton (used by the engine unless one is injected)
method_registry = MethodRegistry()
