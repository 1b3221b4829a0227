# reflection/meta.py
"""
Metadata describing the inputs and output of a monitored method.

Every component loads declared metadata through Meta.deserialize so that
documents coming from loosely typed sources (YAML, JSON, string-keyed
records) all arrive with the same canonical keys.
"""

import sys
from enum import Enum
from typing import Any, Dict, Optional, Type, Union

from reflection.values import ValueKind, classify


class MetaField(str, Enum):
    TYPE = "type"
    VALUE = "value"
    MIN = "min"
    MAX = "max"
    LENGTH = "length"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    VALUES = "values"


class MetaType(str, Enum):
    NULL = "null"
    BOOLEAN = "bool"
    INTEGER = "int"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    HASH = "hash"


class Symbol(str):
    """
    Canonical name with no MetaField/MetaType member.
    Compares and hashes like the plain string it wraps.
    """
    __slots__ = ()

    def __repr__(self):
        return f"Symbol({str.__repr__(self)})"


MetaKey = Union[MetaField, MetaType, Symbol]


def symbolize(raw: Any, kind: Type[Enum]) -> MetaKey:
    """
    Canonical symbol for a raw key or type value.
    Unknown names become interned Symbols.
    """
    if isinstance(raw, (kind, Symbol)):
        return raw
    name = raw.value if isinstance(raw, Enum) else str(raw)
    try:
        return kind(name)
    except ValueError:
        return Symbol(sys.intern(name))


def plain_document(document: Dict[Any, Any]) -> Dict[str, Any]:
    """
    String-keyed copy of a canonical document, for JSON reports.
    """
    def plain(item):
        if isinstance(item, Enum):
            return item.value
        if isinstance(item, Symbol):
            return str(item)
        return item

    return {str(plain(key)): plain(value) for key, value in document.items()}


class Meta:
    """
    Base metadata. Each variant sets its type and decides what load() keeps.
    """

    type: Optional[MetaType] = None

    def load(self, value: Any) -> None:
        pass

    def result(self) -> Dict[MetaKey, Any]:
        return {}

    @classmethod
    def deserialize(cls, document: Optional[Dict[Any, Any]]) -> Dict[MetaKey, Any]:
        # Methods without declared inputs/output have no document.
        if document is None:
            return NullMeta().result()

        meta = {symbolize(key, MetaField): value for key, value in document.items()}

        if MetaField.TYPE in meta:
            meta[MetaField.TYPE] = symbolize(meta[MetaField.TYPE], MetaType)

        return meta


class NullMeta(Meta):
    type = MetaType.NULL

    def result(self):
        return {MetaField.TYPE: self.type}


class BooleanMeta(Meta):
    type = MetaType.BOOLEAN

    def __init__(self):
        self.value: Optional[bool] = None

    def load(self, value):
        self.value = bool(value)

    def result(self):
        return {MetaField.TYPE: self.type, MetaField.VALUE: self.value}


class IntegerMeta(Meta):
    type = MetaType.INTEGER

    def __init__(self):
        self.value: Optional[int] = None

    def load(self, value):
        self.value = value

    def result(self):
        return {MetaField.TYPE: self.type, MetaField.VALUE: self.value}


class FloatMeta(IntegerMeta):
    type = MetaType.FLOAT


class StringMeta(Meta):
    type = MetaType.STRING

    def __init__(self):
        self.length: Optional[int] = None

    def load(self, value):
        self.length = len(value)

    def result(self):
        return {MetaField.TYPE: self.type, MetaField.LENGTH: self.length}


class ArrayMeta(Meta):
    """
    Sequences are described by their length, never by their contents.
    """
    type = MetaType.ARRAY

    def __init__(self):
        self.length: Optional[int] = None

    def load(self, value):
        self.length = len(value)

    def result(self):
        return {MetaField.TYPE: self.type, MetaField.LENGTH: self.length}


class HashMeta(ArrayMeta):
    type = MetaType.HASH


_META_BY_KIND = {
    ValueKind.BOOLEAN: BooleanMeta,
    ValueKind.INTEGER: IntegerMeta,
    ValueKind.TEXT: StringMeta,
    ValueKind.SEQUENCE: ArrayMeta,
    ValueKind.MAPPING: HashMeta,
}


def meta_for(value: Any) -> Meta:
    """
    Build and load the Meta variant matching a runtime value.
    """
    if value is None:
        return NullMeta()

    if isinstance(value, float):
        meta_cls = FloatMeta
    else:
        meta_cls = _META_BY_KIND.get(classify(value), NullMeta)

    meta = meta_cls()
    meta.load(value)
    return meta
