# tests/shadow/test_ruler.py

from reflection.meta import MetaField, MetaType
from reflection.ruler import DeclaredRuler, RuleSet, rule_set_from_meta


def test_missing_declarations_are_absent(ruler):
    assert ruler.get_input_rule_sets("Counter", "add") is None
    assert ruler.get_output_rule_set("Counter", "add") is None


def test_rule_set_keeps_canonical_meta():
    rule_set = rule_set_from_meta({"type": "int", "max": 5})

    assert rule_set.meta == {MetaField.TYPE: MetaType.INTEGER, MetaField.MAX: 5}


def test_integer_bounds():
    rule_set = rule_set_from_meta({"type": "int", "min": 0, "max": 10})

    assert rule_set.test(0)
    assert rule_set.test(10)
    assert not rule_set.test(11)
    assert not rule_set.test(-1)
    assert not rule_set.test(True)
    assert not rule_set.test("5")


def test_float_accepts_integers():
    rule_set = rule_set_from_meta({"type": "float", "max": 1.5})

    assert rule_set.test(1)
    assert rule_set.test(1.25)
    assert not rule_set.test(2.0)


def test_string_length_and_values():
    rule_set = rule_set_from_meta({"type": "string", "min_length": 2, "values": ["ab", "abc", "z"]})

    assert rule_set.test("ab")
    assert not rule_set.test("z")
    assert not rule_set.test("abcd")


def test_array_length():
    rule_set = rule_set_from_meta({"type": "array", "max_length": 2})

    assert rule_set.test([1, 2])
    assert not rule_set.test([1, 2, 3])
    assert not rule_set.test({"a": 1})


def test_null_meta_accepts_anything():
    rule_set = rule_set_from_meta(None)

    assert rule_set.test(None)
    assert rule_set.test(object())


def test_validate_inputs_checks_count_and_rules(ruler):
    ruler.declare("Counter", "add", inputs=[{"type": "int"}, {"type": "bool"}])
    rule_sets = ruler.get_input_rule_sets("Counter", "add")

    assert ruler.validate_inputs([1, True], rule_sets)
    assert not ruler.validate_inputs([1, 2], rule_sets)
    assert not ruler.validate_inputs([1], rule_sets)


def test_validate_output(ruler):
    ruler.declare("Counter", "is_positive", output={"type": "bool"})
    rule_set = ruler.get_output_rule_set("Counter", "is_positive")

    assert ruler.validate_output(False, rule_set)
    assert not ruler.validate_output(0, rule_set)


def test_declare_opaque_rule_sets(ruler):
    even = RuleSet(predicate=lambda v: v % 2 == 0)
    ruler.declare_rule_sets("Counter", "add", inputs=[even], output=even)

    assert ruler.validate_inputs([4], ruler.get_input_rule_sets("Counter", "add"))
    assert not ruler.validate_output(3, ruler.get_output_rule_set("Counter", "add"))


def test_load_declarations(ruler):
    ruler.load({
        "Counter.add": {
            "inputs": [{"type": "int", "min": 0}],
            "output": {"type": "int"},
        },
        "billing.Invoice.total": {"output": {"type": "float"}},
    })

    assert len(ruler.get_input_rule_sets("Counter", "add")) == 1
    assert ruler.get_output_rule_set("Counter", "add") is not None
    assert ruler.get_input_rule_sets("billing.Invoice", "total") is None
    assert ruler.get_output_rule_set("billing.Invoice", "total") is not None
