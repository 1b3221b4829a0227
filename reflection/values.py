# reflection/values.py

import random
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

# Deviated integers are drawn from [0, DEVIATION_UPPER).
DEVIATION_UPPER = 999

TRUNCATE_AT = 30
ELLIPSIS = "..."

_LINE_BREAK = re.compile(r"\r?\n")
_WHITESPACE = re.compile(r"\s")


class ValueKind(Enum):
    """
    Closed set of value kinds the engine distinguishes.
    """
    INTEGER = "integer"
    BOOLEAN = "boolean"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    TEXT = "text"
    OTHER = "other"


def classify(value: Any) -> ValueKind:
    # bool is a subclass of int, so it is checked first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    return ValueKind.OTHER


def deviate(value: Any, rng: Optional[random.Random] = None) -> Any:
    """
    Replace an integer with a fresh draw from [0, DEVIATION_UPPER).
    Every other kind is returned untouched.
    """
    kind = classify(value)
    if kind is ValueKind.INTEGER:
        return (rng or random).randrange(DEVIATION_UPPER)
    return value


def deviate_all(args: Sequence[Any], rng: Optional[random.Random] = None) -> List[Any]:
    return [deviate(arg, rng) for arg in args]


def type_name(value: Any) -> str:
    return type(value).__name__


def _display(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        pass
    try:
        return repr(value)
    except Exception:
        return object.__repr__(value)


def normalize_value(value: Any) -> Optional[str]:
    """
    Single-line, size-bounded display form of a value.

    Line breaks collapse to spaces. Strings of TRUNCATE_AT characters or
    more are cut at the last whitespace at or before TRUNCATE_AT and end
    with an ellipsis. Never raises.
    """
    if value is None:
        return None

    text = _LINE_BREAK.sub(" ", _display(value))

    if len(text) >= TRUNCATE_AT:
        cut = TRUNCATE_AT
        for match in _WHITESPACE.finditer(text, 0, TRUNCATE_AT + 1):
            cut = match.start()
        text = text[:cut].rstrip() + ELLIPSIS

    return text


def normalize_input(args: Sequence[Any]) -> List[Dict[str, Any]]:
    inputs = []
    for arg in args:
        entry = {
            "type": type_name(arg),
            "value": normalize_value(arg),
        }
        if classify(arg) is ValueKind.SEQUENCE:
            entry["count"] = len(arg)
        inputs.append(entry)
    return inputs


def normalize_output(value: Any) -> Dict[str, Any]:
    output = {
        "type": type_name(value),
        "value": normalize_value(value),
    }

    kind = classify(value)
    if kind in (ValueKind.SEQUENCE, ValueKind.MAPPING):
        output["count"] = len(value)
    elif kind is ValueKind.BOOLEAN:
        output["type"] = "Boolean"

    return output
