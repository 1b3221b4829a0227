# tests/shadow/test_values.py

import random

from reflection.values import (
    ValueKind,
    classify,
    deviate,
    normalize_input,
    normalize_output,
    normalize_value,
)


def test_classify_closed_kinds():
    assert classify(3) is ValueKind.INTEGER
    assert classify(True) is ValueKind.BOOLEAN
    assert classify("x") is ValueKind.TEXT
    assert classify([1]) is ValueKind.SEQUENCE
    assert classify((1,)) is ValueKind.SEQUENCE
    assert classify({"a": 1}) is ValueKind.MAPPING
    assert classify(1.5) is ValueKind.OTHER
    assert classify(None) is ValueKind.OTHER


def test_deviate_only_touches_integers():
    rng = random.Random(1)
    for _ in range(200):
        assert 0 <= deviate(123456, rng) < 999

    marker = object()
    assert deviate(True, rng) is True
    assert deviate(2.5, rng) == 2.5
    assert deviate("7", rng) == "7"
    assert deviate(marker, rng) is marker


def test_short_values_are_unchanged():
    assert normalize_value("hello world") == "hello world"
    assert normalize_value(42) == "42"
    assert normalize_value(None) is None


def test_line_breaks_collapse():
    assert normalize_value("a\nb\r\nc") == "a b c"


def test_long_values_truncate_on_whitespace():
    text = "the quick brown fox jumps over the lazy dog"
    value = normalize_value(text)

    assert value == "the quick brown fox jumps over..."
    assert len(value) <= 33
    assert value.endswith("...")


def test_exactly_thirty_characters_is_truncated():
    text = "abcd efgh ijkl mnop qrst uvwx"
    assert len(text) == 29
    assert normalize_value(text) == text

    text = text + "z"
    assert normalize_value(text) == "abcd efgh ijkl mnop qrst..."


def test_long_value_without_whitespace_is_cut_hard():
    value = normalize_value("x" * 100)

    assert value == "x" * 30 + "..."


def test_cyclic_value_does_not_raise():
    cyclic = []
    cyclic.append(cyclic)
    cyclic.extend(range(40))

    value = normalize_value(cyclic)

    assert value.startswith("[[...]")
    assert len(value) <= 33


def test_unprintable_value_degrades():
    class Broken:
        def __str__(self):
            raise RuntimeError("no str")

        def __repr__(self):
            raise RuntimeError("no repr")

    value = normalize_value(Broken())

    assert value.startswith("<")
    assert value.endswith("...")


def test_normalize_input_counts_sequences_only():
    inputs = normalize_input([[1, 2, 3], {"a": 1}, "abc", 4])

    assert inputs[0] == {"type": "list", "value": "[1, 2, 3]", "count": 3}
    assert "count" not in inputs[1]
    assert inputs[1]["type"] == "dict"
    assert "count" not in inputs[2]
    assert inputs[3] == {"type": "int", "value": "4"}


def test_normalize_output():
    assert normalize_output({"a": 1, "b": 2})["count"] == 2
    assert normalize_output([1])["count"] == 1
    assert normalize_output(False) == {"type": "Boolean", "value": "False"}
    assert normalize_output(None) == {"type": "NoneType", "value": None}
    assert "count" not in normalize_output("abc")
