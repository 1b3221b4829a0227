# reflection/engine.py

import functools
import random
import threading
from collections import defaultdict
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from logger import get_logger
from reflection.config import ReflectionConfig
from reflection.execution import Execution, ShadowStack
from reflection.registry import CloneFn, MethodRegistry, SnapshotError, method_registry
from reflection.ruler import Ruler
from reflection.shadow import Control, Reflection
from reflection.store import ReportStore

log = get_logger("Reflection.Engine")


class ShadowEngine:
    """
    Shadows calls to monitored methods.

    Each eligible call becomes an Execution that spawns one Control
    (number 0, original arguments) and `reflect_amount` Reflections
    (numbers 1..n, deviated arguments). Every attempt works on its own
    snapshot of the receiver and of the arguments, and all of them run
    before the real call. The real call's result and exceptions are
    never touched.
    """

    def __init__(
            self,
            ruler: Ruler,
            store: Optional[ReportStore] = None,
            registry: Optional[MethodRegistry] = None,
            config: Optional[ReflectionConfig] = None,
            rng: Optional[random.Random] = None,
    ):
        self.ruler = ruler
        self.store = store
        self.registry = registry if registry is not None else method_registry
        self.config = config if config is not None else ReflectionConfig()
        self._rng = rng

        self._counts: Dict[Tuple[str, str], int] = defaultdict(int)
        self._lock = Lock()
        self._local = threading.local()

    # ------------------------------------------
    # Per-thread state
    # ------------------------------------------
    @property
    def stack(self) -> ShadowStack:
        stack = getattr(self._local, "stack", None)
        if stack is None:
            stack = self._local.stack = ShadowStack()
        return stack

    @property
    def is_reflecting(self) -> bool:
        return getattr(self._local, "reflecting", False)

    def executions(self, klass: str, method: str) -> int:
        with self._lock:
            return self._counts[(klass, method)]

    # ------------------------------------------
    # Decorator
    # ------------------------------------------
    def monitor(self, func: Optional[Callable] = None, *, klass: Optional[str] = None,
                clone: Optional[CloneFn] = None):
        """
        Monitor a method:

            @engine.monitor
            def add(self, amount): ...

        The class name defaults to the owner in the function's qualname.
        """
        if func is None:
            return functools.partial(self.monitor, klass=klass, clone=clone)

        qualname = func.__qualname__.split(".")
        owner = klass or (qualname[-2] if len(qualname) > 1 else func.__module__)
        method = func.__name__
        self.registry.register(owner, method, func, clone=clone)

        @functools.wraps(func)
        def wrapper(caller_object, *args, **kwargs):
            if self.is_reflecting:
                return func(caller_object, *args, **kwargs)

            execution = self.stack.push(Execution(owner, method, caller_object))
            try:
                if kwargs:
                    log.debug({"event": "reflection_skipped_kwargs", "class": owner, "method": method})
                elif self.should_reflect(owner, method):
                    self.shadow(execution, args)
                return func(caller_object, *args, **kwargs)
            finally:
                self.stack.pop()

        return wrapper

    # ------------------------------------------
    # Shadowing
    # ------------------------------------------
    def should_reflect(self, klass: str, method: str) -> bool:
        if not self.config.enabled or self.is_reflecting:
            return False

        with self._lock:
            return not self._over_limit(klass, method)

    def _over_limit(self, klass: str, method: str) -> bool:
        limit = self.config.reflect_limit
        return bool(limit) and self._counts[(klass, method)] >= limit

    def _claim(self, klass: str, method: str) -> bool:
        with self._lock:
            if self._over_limit(klass, method):
                return False
            self._counts[(klass, method)] += 1
        return True

    def shadow(self, execution: Execution, args: Sequence[Any]) -> List[Dict[str, Any]]:
        """
        Run the control and the reflections of one execution.
        Returns their reports; a receiver or arguments that cannot be
        snapshot yield none.
        """
        self._local.reflecting = True
        execution.is_reflecting = True
        reports = []

        try:
            # Uncopyable arguments skip the execution like an uncopyable receiver.
            args = self.registry.snapshot_args(execution.klass, execution.method, args)

            attempts = [Control(execution, 0, self.ruler, registry=self.registry)]
            for number in range(1, self.config.reflect_amount + 1):
                attempts.append(
                    Reflection(execution, number, self.ruler, registry=self.registry, rng=self._rng)
                )

            # Only executions that actually get shadowed count towards the limit.
            if not self._claim(execution.klass, execution.method):
                return reports

            for attempt in attempts:
                attempt.reflect(args)
                report = attempt.result()
                execution.reflections.append(report)
                reports.append(report)
                self._record(report)

        except SnapshotError as e:
            log.warning({
                "event": "reflection_snapshot_failed",
                "class": execution.klass,
                "method": execution.method,
                "error": str(e),
            })

        finally:
            self._local.reflecting = False
            execution.is_reflecting = False

        return reports

    def _record(self, report: Dict[str, Any]):
        """
        Best-effort store append.
        """
        if self.store is None:
            return

        try:
            self.store.append(report)
        except Exception as e:
            # A broken store must never reach the monitored call
            log.warning({
                "event": "reflection_store_failed",
                "reflection_id": report.get("reflection_id"),
                "error": str(e),
            })
