# reflection/ruler.py

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from reflection.meta import Meta, MetaField, MetaType
from reflection.values import ValueKind, classify

Predicate = Callable[[Any], bool]


@dataclass(frozen=True)
class RuleSet:
    """
    Opaque validation predicate for one value.
    `meta` keeps the canonical document it was built from, if any.
    """
    predicate: Predicate
    meta: Dict[Any, Any] = field(default_factory=dict)

    def test(self, value: Any) -> bool:
        return bool(self.predicate(value))


class Ruler(ABC):

    @abstractmethod
    def get_input_rule_sets(self, klass: str, method: str) -> Optional[List[RuleSet]]:
        raise NotImplementedError

    @abstractmethod
    def get_output_rule_set(self, klass: str, method: str) -> Optional[RuleSet]:
        raise NotImplementedError

    @abstractmethod
    def validate_inputs(self, values: Sequence[Any], rule_sets: Sequence[RuleSet]) -> bool:
        raise NotImplementedError

    @abstractmethod
    def validate_output(self, value: Any, rule_set: RuleSet) -> bool:
        raise NotImplementedError


_KIND_BY_TYPE = {
    MetaType.BOOLEAN: (ValueKind.BOOLEAN,),
    MetaType.INTEGER: (ValueKind.INTEGER,),
    MetaType.STRING: (ValueKind.TEXT,),
    MetaType.ARRAY: (ValueKind.SEQUENCE,),
    MetaType.HASH: (ValueKind.MAPPING,),
}


def _matches_type(meta_type: Any, value: Any) -> bool:
    if meta_type == MetaType.NULL:
        return True
    if meta_type == MetaType.FLOAT:
        return isinstance(value, float) or classify(value) is ValueKind.INTEGER
    kinds = _KIND_BY_TYPE.get(meta_type)
    if kinds is None:
        # Unknown declared types cannot be checked.
        return True
    return classify(value) in kinds


def rule_set_from_meta(document: Optional[Dict[Any, Any]]) -> RuleSet:
    """
    Build a RuleSet from a declared metadata document.

    The document goes through Meta.deserialize first, so raw string keys
    are accepted. A missing document accepts any value.
    """
    meta = Meta.deserialize(document)
    meta_type = meta.get(MetaField.TYPE, MetaType.NULL)

    def predicate(value: Any) -> bool:
        if not _matches_type(meta_type, value):
            return False
        if meta_type == MetaType.NULL:
            return True

        if MetaField.MIN in meta and value < meta[MetaField.MIN]:
            return False
        if MetaField.MAX in meta and value > meta[MetaField.MAX]:
            return False

        if MetaField.MIN_LENGTH in meta or MetaField.MAX_LENGTH in meta:
            length = len(value)
            if MetaField.MIN_LENGTH in meta and length < meta[MetaField.MIN_LENGTH]:
                return False
            if MetaField.MAX_LENGTH in meta and length > meta[MetaField.MAX_LENGTH]:
                return False

        if MetaField.VALUES in meta and value not in meta[MetaField.VALUES]:
            return False

        return True

    return RuleSet(predicate=predicate, meta=meta)


class DeclaredRuler(Ruler):
    """
    Ruler backed by metadata documents declared per (class, method).
    """

    def __init__(self):
        self._inputs: Dict[Tuple[str, str], List[RuleSet]] = {}
        self._outputs: Dict[Tuple[str, str], RuleSet] = {}
        self._lock = Lock()

    def declare(
            self,
            klass: str,
            method: str,
            *,
            inputs: Optional[Sequence[Optional[Dict[Any, Any]]]] = None,
            output: Optional[Dict[Any, Any]] = None,
    ):
        with self._lock:
            if inputs is not None:
                self._inputs[(klass, method)] = [rule_set_from_meta(doc) for doc in inputs]
            if output is not None:
                self._outputs[(klass, method)] = rule_set_from_meta(output)

    def declare_rule_sets(
            self,
            klass: str,
            method: str,
            *,
            inputs: Optional[Sequence[RuleSet]] = None,
            output: Optional[RuleSet] = None,
    ):
        with self._lock:
            if inputs is not None:
                self._inputs[(klass, method)] = list(inputs)
            if output is not None:
                self._outputs[(klass, method)] = output

    def load(self, declarations: Dict[str, Dict[str, Any]]):
        """
        Load declarations keyed by "Class.method", e.g. from YAML:

            Counter.add:
              inputs: [{type: int, min: 0}]
              output: {type: int}
        """
        for name, declaration in (declarations or {}).items():
            klass, _, method = name.rpartition(".")
            self.declare(
                klass,
                method,
                inputs=declaration.get("inputs"),
                output=declaration.get("output"),
            )

    def get_input_rule_sets(self, klass, method):
        with self._lock:
            rule_sets = self._inputs.get((klass, method))
        return list(rule_sets) if rule_sets is not None else None

    def get_output_rule_set(self, klass, method):
        with self._lock:
            return self._outputs.get((klass, method))

    def validate_inputs(self, values, rule_sets):
        if len(values) != len(rule_sets):
            return False
        return all(rule_set.test(value) for value, rule_set in zip(values, rule_sets))

    def validate_output(self, value, rule_set):
        return rule_set.test(value)
