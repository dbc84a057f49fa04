"""Tests for marked-field listing, method-name listing and forced construction."""

from __future__ import annotations

import abc
import functools
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Optional, Protocol

import pytest

from typescope.introspection import (
    ConstructorInvocationError,
    InspectionError,
    Marker,
    NoMatchingConstructorError,
    create_instance,
    describe,
    initializer,
    list_marked_fields,
    list_method_names,
)


@dataclass(frozen=True, slots=True)
class Id(Marker):
    pass


@dataclass(frozen=True, slots=True)
class Column(Marker):
    name: str


class Tagged:
    a: Annotated[int, Id()]
    b: Annotated[str, Id]
    c: int


class TaggedChild(Tagged):
    d: Annotated[int, Id(), Column("d_col")]
    e: ClassVar[Annotated[int, Id()]] = 0


class I1(Protocol):
    def m1(self) -> None: ...


class I2(Protocol):
    def m2(self) -> None: ...


class Capable(I1, I2):
    def m3(self) -> None:
        pass


class Greeter(abc.ABC):
    @abc.abstractmethod
    def greet(self) -> str: ...


class Walker:
    def walk(self) -> None:
        pass


class Person(Walker, Greeter):
    def greet(self) -> str:
        return "hello"

    @staticmethod
    def species() -> str:
        return "human"

    @classmethod
    def anonymous(cls) -> "Person":
        return cls()

    @property
    def label(self) -> str:
        return "person"


class Parent(Protocol):
    def inherited_contract(self) -> None: ...


class ChildContract(Parent, Protocol):
    def child_contract(self) -> None: ...


class Deep(ChildContract):
    def own(self) -> None:
        pass


class Villager:
    def __init__(self) -> None:
        self.name = "Villager"
        self.description = "An ordinary villager"

    @initializer
    def __named(cls, name: str, description: str) -> Villager:
        villager = cls()
        villager.name = name
        villager.description = description
        return villager


class Hidden:
    def __init__(self, token: int) -> None:
        self.token = token

    @initializer
    def _blank(cls) -> Hidden:
        instance = cls.__new__(cls)
        instance.token = 0
        return instance


class Ordered:
    @initializer
    def from_int(cls, value: int) -> Ordered:
        instance = cls(str(value))
        instance.source = "from_int"
        return instance

    def __init__(self, value: object) -> None:
        self.value = value
        self.source = "__init__"


class Exploding:
    def __init__(self, value: int) -> None:
        raise ValueError(f"cannot build from {value}")


class Liar:
    @initializer
    def _fake(cls) -> Any:
        return "not a liar"

    def __init__(self, value: int) -> None:
        self.value = value


class Nullable:
    def __init__(self, label: Optional[str]) -> None:
        self.label = label


class Loose:
    def __init__(self, first, second: Any, items: list[int]) -> None:
        self.values = (first, second, items)


class KeywordOnly:
    def __init__(self, *, value: int) -> None:
        self.value = value


@dataclass
class Point:
    x: int
    y: int


# ---------------------------------------------------------------------------
# list_marked_fields


def test_marked_fields_scenario() -> None:
    assert list_marked_fields(Tagged, Id) == ["a", "b"]


def test_marked_fields_skip_inherited_fields() -> None:
    assert list_marked_fields(TaggedChild, Id) == ["d", "e"]
    assert list_marked_fields(TaggedChild, Column) == ["d"]


def test_marked_fields_without_matches_is_empty() -> None:
    assert list_marked_fields(Tagged, Column) == []
    assert list_marked_fields(Walker, Id) == []


def test_marked_fields_are_unique_and_declared() -> None:
    names = list_marked_fields(TaggedChild, Id)
    declared = {field.name for field in describe(TaggedChild).fields}
    assert len(names) == len(set(names))
    assert set(names) <= declared


def test_marked_fields_of_locally_defined_self_referencing_type() -> None:
    class Node:
        parent: Annotated[Optional[Node], Id()] = None
        label: Annotated[str, Id()] = ""
        broken: Annotated[Unknown, Id()] = None  # noqa: F821

    assert list_marked_fields(Node, Id) == ["parent", "label"]


# ---------------------------------------------------------------------------
# list_method_names


def test_method_names_scenario() -> None:
    assert list_method_names(Capable) == ["m3", "m1", "m2"]


def test_method_names_cover_abc_capabilities_only() -> None:
    names = list_method_names(Person)
    assert names == ["greet", "species", "anonymous"]
    assert "walk" not in names
    assert "label" not in names


def test_method_names_do_not_walk_interfaces_transitively() -> None:
    assert list_method_names(Deep) == ["own", "child_contract"]


def test_method_names_skip_initializers() -> None:
    assert list_method_names(Villager) == []
    assert list_method_names(Ordered) == []


def test_method_names_empty_type() -> None:
    class Empty:
        pass

    assert list_method_names(Empty) == []


def test_method_names_ignore_concrete_protocol_implementations() -> None:
    class Sub(Capable):
        def m4(self) -> None:
            pass

    assert list_method_names(Sub) == ["m4"]
    assert describe(Sub).interfaces == ()


def test_method_names_ignore_partially_concrete_abc() -> None:
    class Template(abc.ABC):
        @abc.abstractmethod
        def required(self) -> None: ...

        def helper(self) -> None:
            pass

    class Filled(Template):
        def required(self) -> None:
            pass

    assert list_method_names(Filled) == ["required"]


def _logged(method):
    def wrapper(self, *args):
        return method(self, *args)

    return wrapper


def test_method_names_follow_decorated_methods() -> None:
    class Cached:
        @functools.cache
        def total(self) -> int:
            return 1

        @_logged
        def logged(self) -> None:
            pass

        def plain(self) -> None:
            pass

        alias = len

    assert list_method_names(Cached) == ["total", "logged", "plain"]


# ---------------------------------------------------------------------------
# create_instance


def test_create_instance_uses_public_default() -> None:
    villager = create_instance(Villager)
    assert isinstance(villager, Villager)
    assert villager.name == "Villager"


def test_create_instance_reaches_private_initializer() -> None:
    villager = create_instance(Villager, "Bob", "desc")
    assert (villager.name, villager.description) == ("Bob", "desc")
    assert not hasattr(Villager, "__named")


def test_zero_argument_construction_through_non_public_initializer() -> None:
    hidden = create_instance(Hidden)
    assert hidden.token == 0
    assert create_instance(Hidden, 7).token == 7


def test_zero_argument_construction_requires_zero_parameter_initializer() -> None:
    with pytest.raises(NoMatchingConstructorError):
        create_instance(Exploding)


@pytest.mark.parametrize(
    "args",
    [
        ("Bob",),
        ("Bob", "desc", "extra"),
        (1, 2),
        ("Bob", 2),
    ],
)
def test_create_instance_rejects_unmatched_profiles(args: tuple[Any, ...]) -> None:
    with pytest.raises(NoMatchingConstructorError) as excinfo:
        create_instance(Villager, *args)
    assert excinfo.value.target is Villager
    assert excinfo.value.args_given == args


def test_first_match_in_declaration_order_wins() -> None:
    by_int = create_instance(Ordered, 3)
    assert by_int.source == "from_int"
    assert by_int.value == "3"

    by_object = create_instance(Ordered, "x")
    assert by_object.source == "__init__"


def test_none_never_matches_a_parameter() -> None:
    assert create_instance(Nullable, "tag").label == "tag"
    with pytest.raises(NoMatchingConstructorError):
        create_instance(Nullable, None)


def test_unannotated_any_and_generic_parameters() -> None:
    loose = create_instance(Loose, 1, "two", [3])
    assert loose.values == (1, "two", [3])
    with pytest.raises(NoMatchingConstructorError):
        create_instance(Loose, 1, "two", (3,))


def test_required_keyword_only_initializer_is_not_eligible() -> None:
    assert describe(KeywordOnly).initializers == ()
    with pytest.raises(NoMatchingConstructorError):
        create_instance(KeywordOnly, 1)


def test_dataclass_initializer() -> None:
    point = create_instance(Point, 1, 2)
    assert point == Point(1, 2)


def test_initializer_failure_is_wrapped() -> None:
    with pytest.raises(ConstructorInvocationError) as excinfo:
        create_instance(Exploding, 5)
    error = excinfo.value
    assert isinstance(error, InspectionError)
    assert isinstance(error.cause, ValueError)
    assert error.__cause__ is error.cause
    assert error.initializer == "__init__"


def test_initializer_returning_foreign_object_is_wrapped() -> None:
    with pytest.raises(ConstructorInvocationError) as excinfo:
        create_instance(Liar)
    assert isinstance(excinfo.value.cause, TypeError)


def test_create_instance_returns_fresh_instances() -> None:
    first = create_instance(Villager, "Bob", "desc")
    second = create_instance(Villager, "Bob", "desc")
    assert first is not second
    assert vars(first) == vars(second)


def test_create_instance_for_locally_defined_type() -> None:
    class Local:
        def __init__(self) -> None:
            self.value: Any = None

        @initializer
        def _from(cls, value: int) -> Local:
            local = cls()
            local.value = value
            return local

        @initializer
        def _pair(cls, first: int, second: Unknown) -> Local:  # noqa: F821
            local = cls()
            local.value = (first, second)
            return local

    assert create_instance(Local, 5).value == 5
    assert create_instance(Local, 1, "x").value == (1, "x")
    profiles = [init.parameter_types for init in describe(Local).initializers]
    assert profiles == [(), (int,), (int, object)]


# ---------------------------------------------------------------------------
# Idempotence and concurrency


def test_operations_are_idempotent() -> None:
    assert list_marked_fields(Tagged, Id) == list_marked_fields(Tagged, Id)
    assert list_method_names(Capable) == list_method_names(Capable)
    assert describe(Villager) == describe(Villager)


def test_operations_are_safe_across_threads() -> None:
    def run(_: int) -> tuple[list[str], list[str], str]:
        villager = create_instance(Villager, "Bob", "desc")
        return list_marked_fields(Tagged, Id), list_method_names(Capable), villager.name

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(run, range(16)))

    assert all(result == (["a", "b"], ["m3", "m1", "m2"], "Bob") for result in results)
