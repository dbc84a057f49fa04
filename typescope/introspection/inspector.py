"""Type inspector: marked fields, method names, and forced construction.

All three operations are stateless reads over :func:`descriptors.describe`
snapshots.  Nothing is cached and nothing is logged here; failures surface as
:mod:`typescope.introspection.errors` exceptions raised to the caller.
"""

from __future__ import annotations

import types
from typing import Annotated, Any, Sequence, TypeVar, Union, get_args, get_origin

from .descriptors import InitializerDescriptor, describe
from .errors import ConstructorInvocationError, NoMatchingConstructorError

__all__ = [
    "accepts",
    "create_instance",
    "force_construct",
    "list_marked_fields",
    "list_method_names",
    "resolve_initializer",
]

T = TypeVar("T")

_UNION_ORIGINS = (Union, types.UnionType)


def list_marked_fields(cls: type, marker: object) -> list[str]:
    """Return names of fields declared on ``cls`` that carry ``marker``.

    Inherited fields are ignored.  Names appear once, in declaration order.
    """

    names: list[str] = []
    for descriptor in describe(cls).fields:
        if descriptor.has_marker(marker) and descriptor.name not in names:
            names.append(descriptor.name)
    return names


def list_method_names(cls: type) -> list[str]:
    """Return method names declared on ``cls`` and on its direct interfaces.

    Methods of ``cls`` come first, then those of each protocol or ABC listed in
    ``cls.__bases__``, in base order.  Interfaces of interfaces are not visited.
    """

    descriptor = describe(cls)
    names: list[str] = []
    for method in descriptor.methods:
        if method.name not in names:
            names.append(method.name)
    for interface in descriptor.interfaces:
        for method in interface.methods:
            if method.name not in names:
                names.append(method.name)
    return names


def create_instance(cls: type[T], *args: Any) -> T:
    """Construct ``cls`` through the first initializer accepting ``args``.

    Initializers are tried in declaration order and non-public ones are used
    as readily as public ones.

    Raises
    ------
    NoMatchingConstructorError
        If no initializer has a matching arity and parameter-type profile.
    ConstructorInvocationError
        If the selected initializer raises.
    """

    selected = resolve_initializer(cls, args)
    if selected is None:
        raise NoMatchingConstructorError(cls, args)
    return force_construct(cls, selected, args)


def resolve_initializer(cls: type, args: Sequence[Any]) -> InitializerDescriptor | None:
    """Return the first initializer of ``cls`` whose profile accepts ``args``."""

    for candidate in describe(cls).initializers:
        if candidate.arity != len(args):
            continue
        if all(accepts(expected, value) for expected, value in zip(candidate.parameter_types, args)):
            return candidate
    return None


def force_construct(cls: type[T], initializer: InitializerDescriptor, args: Sequence[Any]) -> T:
    """Invoke ``initializer`` with ``args`` whatever its visibility.

    This is the only place a non-public initializer is called from outside its
    class.  The callable was captured from the class ``__dict__`` when the
    descriptor was built, so name mangling does not hide it.
    """

    try:
        instance = initializer.invoke(*args)
    except Exception as exc:
        raise ConstructorInvocationError(cls, initializer.name, exc) from exc
    if not isinstance(instance, cls):
        cause = TypeError(
            f"initializer returned {type(instance).__name__}, expected {cls.__qualname__}"
        )
        raise ConstructorInvocationError(cls, initializer.name, cause) from cause
    return instance


def accepts(expected: Any, value: Any) -> bool:
    """Whether ``value`` may be passed for a parameter annotated ``expected``.

    ``None`` is never accepted, even for ``Optional`` parameters.
    """

    if value is None:
        return False
    if expected is Any or expected is object:
        return True
    origin = get_origin(expected)
    if origin is Annotated:
        return accepts(get_args(expected)[0], value)
    if origin in _UNION_ORIGINS:
        return any(accepts(option, value) for option in get_args(expected))
    if isinstance(origin, type):
        expected = origin
    if not isinstance(expected, type):
        return False
    try:
        return isinstance(value, expected)
    except TypeError:
        # Non-runtime-checkable protocols refuse isinstance().
        return False
