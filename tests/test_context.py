from dataclasses import dataclass

import pytest

from whisker.context import MISSING, Context, get_member, is_falsey, is_lambda, is_sequence, takes_arguments


@dataclass
class Person:
    name: str
    age: int = 0

    def greeting(self):
        return "hi {{name}}"


def test_get_member_from_mapping():
    assert get_member({"a": 1}, "a") == 1
    assert get_member({"a": None}, "a") is None
    assert get_member({"a": 1}, "b") is MISSING


def test_get_member_from_object():
    person = Person("Ada")
    assert get_member(person, "name") == "Ada"
    assert get_member(person, "missing") is MISSING
    assert callable(get_member(person, "greeting"))


def test_get_member_from_sequence_index():
    assert get_member(["a", "b"], "1") == "b"
    assert get_member(["a", "b"], "2") is MISSING
    assert get_member(["a", "b"], "x") is MISSING


@pytest.mark.parametrize("value", [1, 1.5, "text", True, None])
def test_builtin_scalars_have_no_members(value):
    assert get_member(value, "real") is MISSING
    assert get_member(value, "upper") is MISSING


def test_lookup_dot_is_current_value():
    assert Context("x", Context({"a": 1})).lookup(".") == "x"


def test_lookup_walks_parents():
    root = Context({"a": 1, "c": 3})
    child = Context({"a": 2}, root)
    assert child.lookup("a") == 2
    assert child.lookup("c") == 3
    assert child.lookup("z") is MISSING


def test_none_shadows_parent_value():
    child = Context({"a": None}, Context({"a": "outer"}))
    assert child.lookup("a") is None


def test_dotted_lookup():
    context = Context({"a": {"b": {"c": "deep"}}})
    assert context.lookup("a.b.c") == "deep"
    assert context.lookup("a.x.c") is MISSING


def test_dotted_first_step_uses_chain_then_strict():
    root = Context({"b": {"c": "ERROR"}})
    child = Context({"b": {}}, root)
    assert child.lookup("b.c") is MISSING
    assert Context({}, root).lookup("b.c") == "ERROR"


def test_dotted_lookup_through_objects_and_lists():
    context = Context({"people": [Person("Ada", 36)]})
    assert context.lookup("people.0.age") == 36


def test_context_is_immutable():
    context = Context({})
    with pytest.raises(Exception):
        context.value = {"a": 1}


@pytest.mark.parametrize("value", [MISSING, None, False, [], (), {}, set()])
def test_falsey_values(value):
    assert is_falsey(value)


@pytest.mark.parametrize("value", [0, 0.0, "", "0", True, [0], {"a": None}, Person("x")])
def test_truthy_values(value):
    assert not is_falsey(value)


def test_is_lambda():
    assert is_lambda(lambda: "x")
    assert is_lambda(Person("x").greeting)
    assert not is_lambda("x")
    assert not is_lambda({"a": 1})


def test_takes_arguments():
    assert takes_arguments(lambda: None, 0)
    assert not takes_arguments(lambda: None, 1)
    assert takes_arguments(lambda text: text, 1)
    assert not takes_arguments(lambda text: text, 0)
    assert takes_arguments(lambda *args: args, 0)
    assert takes_arguments(lambda text="": text, 0)
    assert takes_arguments(Person("x").greeting, 0)
    assert not takes_arguments(Person("x").greeting, 1)


@pytest.mark.parametrize("value, expected", [
    ([1], True),
    ((1,), True),
    ({1}, True),
    (iter([1]), True),
    (range(2), True),
    (frozenset(), True),
    ({"a": 1}, False),
    ("abc", False),
    (5, False),
    (Person("x"), False),
])
def test_is_sequence(value, expected):
    assert is_sequence(value) is expected
