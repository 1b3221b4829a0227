# reflection/shadow.py
"""
Shadow execution of a monitored method.

A Reflection re-runs one real call on a snapshot of the receiver with
deviated arguments, validates inputs and output against the Ruler's rule
sets and keeps a normalized, size-bounded report of what happened.

Lifecycle:
    CREATED -> RUNNING -> PASSED | FAILED

reflect() runs once. result() can be read any number of times and always
returns the same report.
"""

import random
import time
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from logger import get_logger
from reflection.execution import Execution
from reflection.meta import meta_for, plain_document
from reflection.registry import MethodRegistry, SnapshotError, UnknownMethodError, method_registry
from reflection.ruler import Ruler
from reflection.values import deviate_all, normalize_input, normalize_output

log = get_logger("Reflection.Shadow")


class Status(str, Enum):
    PASS = "pass"
    FAIL = "fail"


class State(Enum):
    CREATED = "created"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


class ShadowFailure(Exception):
    """
    Anything that aborts a shadow attempt.
    """


class DispatchFailure(ShadowFailure):
    """
    The shadowed method could not be resolved or raised.
    """


class PredicateFailure(ShadowFailure):
    """
    The Ruler raised while fetching or evaluating a rule set.
    """


class ArgumentFailure(ShadowFailure):
    """
    The call's arguments could not be copied for the shadow dispatch.
    """


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class Reflection:

    def __init__(
            self,
            execution: Execution,
            number: int,
            ruler: Ruler,
            *,
            registry: Optional[MethodRegistry] = None,
            rng: Optional[random.Random] = None,
    ):
        """
        Args:
            execution: the real call this reflection shadows
            number: sequence number, several reflections run per execution
            ruler: rule sets and validation for the class/method

        Raises:
            SnapshotError: the receiver cannot be duplicated
        """
        self.execution = execution
        self.number = number
        self.unique_id = execution.unique_id + number

        self.ruler = ruler
        self.registry = registry if registry is not None else method_registry
        self._rng = rng

        self.klass = execution.klass
        self.method = execution.method

        self.inputs: List[Any] = []
        self.output: Any = None

        # Owned by this reflection only; never handed back to callers.
        self.clone = self.registry.snapshot(self.klass, self.method, execution.caller_object)

        self.status = Status.PASS
        self.message: Optional[str] = None
        self.state = State.CREATED
        self.time = int(time.time())

        self._normalized_input: List[Dict[str, Any]] = []
        self._normalized_output: Dict[str, Any] = normalize_output(None)

    @property
    def base_id(self) -> Optional[int]:
        base = self.execution.base
        return base.unique_id if base is not None else None

    def prepare_inputs(self, args: Sequence[Any]) -> List[Any]:
        return deviate_all(args, self._rng)

    def reflect(self, args: Sequence[Any]) -> None:
        """
        Run the shadow attempt with deviated copies of `args`.
        Never raises; the outcome is read through result().
        """
        if self.state is not State.CREATED:
            log.warning({
                "event": "reflection_already_run",
                "reflection_id": self.unique_id,
                "class": self.klass,
                "method": self.method,
            })
            return

        self.state = State.RUNNING

        try:
            self.inputs = self.prepare_inputs(self._copy_args(args))
            self._run()
        except ShadowFailure as failure:
            self.status = Status.FAIL
            self.message = _describe(failure)
            log.info({
                "event": "reflection_failed",
                "reflection_id": self.unique_id,
                "class": self.klass,
                "method": self.method,
                "error": self.message,
            })

        self.state = State.PASSED if self.status is Status.PASS else State.FAILED
        self._capture()

    def _capture(self) -> None:
        self._normalized_input = normalize_input(self.inputs)
        self._normalized_output = normalize_output(self.output)

    def _copy_args(self, args: Sequence[Any]) -> List[Any]:
        # The caller's argument objects never reach the shadow dispatch.
        try:
            return self.registry.snapshot_args(self.klass, self.method, args)
        except SnapshotError as e:
            # Reported as received; never dispatched.
            self.inputs = self.prepare_inputs(args)
            raise ArgumentFailure(_describe(e)) from e

    def _run(self) -> None:
        input_rule_sets = self._ask_ruler(self.ruler.get_input_rule_sets, self.klass, self.method)
        output_rule_set = self._ask_ruler(self.ruler.get_output_rule_set, self.klass, self.method)

        # A failed input check is recorded but the dispatch still happens.
        if input_rule_sets is not None:
            if not self._ask_ruler(self.ruler.validate_inputs, self.inputs, input_rule_sets):
                self.status = Status.FAIL

        self.output = self._dispatch()

        if output_rule_set is not None:
            if not self._ask_ruler(self.ruler.validate_output, self.output, output_rule_set):
                self.status = Status.FAIL

    def _ask_ruler(self, call, *args):
        try:
            return call(*args)
        except Exception as e:
            raise PredicateFailure(_describe(e)) from e

    def _dispatch(self) -> Any:
        try:
            func = self.registry.resolve(self.klass, self.method)
        except UnknownMethodError as e:
            raise DispatchFailure(_describe(e)) from e

        try:
            return func(self.clone, *self.inputs)
        except Exception as e:
            raise DispatchFailure(_describe(e)) from e

    def result(self) -> Dict[str, Any]:
        return {
            "base_id": self.base_id,
            "execution_id": self.execution.unique_id,
            "reflection_id": self.unique_id,
            "reflection_number": self.number,
            "time": self.time,
            "class": self.klass,
            "method": self.method,
            "status": self.status.value,
            "input": [dict(entry) for entry in self._normalized_input],
            "output": dict(self._normalized_output),
            "message": self.message,
        }


class Control(Reflection):
    """
    Baseline attempt: copies of the original arguments, no validation.

    Shows how the method behaves on an untouched snapshot so deviated
    reflections of the same execution can be compared against it. Its
    report also carries the metadata of the values it observed.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.input_meta: List[Dict[str, Any]] = []
        self.output_meta: Dict[str, Any] = meta_for(None).result()

    def prepare_inputs(self, args):
        return list(args)

    def _run(self):
        self.output = self._dispatch()

    def _capture(self):
        super()._capture()
        self.input_meta = [meta_for(value).result() for value in self.inputs]
        self.output_meta = meta_for(self.output).result()

    def result(self):
        report = super().result()
        report["meta"] = {
            "input": [plain_document(doc) for doc in self.input_meta],
            "output": plain_document(self.output_meta),
        }
        return report
