"""Marker tags and the alternate-constructor decorator.

Fields are tagged with ``typing.Annotated`` metadata::

    class Account:
        number: Annotated[str, Id()]

Any object may serve as a marker; :class:`Marker` is only a convenient frozen
base for marker kinds that carry parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

__all__ = ["INITIALIZER_FLAG", "Marker", "initializer", "is_initializer", "matches_marker"]

F = TypeVar("F", bound=Callable[..., Any])

INITIALIZER_FLAG = "__typescope_initializer__"


@dataclass(frozen=True, slots=True)
class Marker:
    """Base class for marker kinds attached to annotated fields."""


def matches_marker(candidate: object, kind: object) -> bool:
    """Return ``True`` when ``candidate`` is of marker kind ``kind``.

    A marker matches either as an instance of the kind or as the kind itself, so
    both ``Annotated[int, Id()]`` and ``Annotated[int, Id]`` are found when
    searching for ``Id``.
    """

    if candidate is kind:
        return True
    if isinstance(kind, type):
        return isinstance(candidate, kind)
    return candidate == kind


def initializer(func: F) -> classmethod:
    """Declare ``func`` as an alternate constructor of the enclosing class.

    The function receives the class as its first argument, like a
    ``classmethod``, and must return the new instance. A name starting with an
    underscore makes the initializer non-public.
    """

    setattr(func, INITIALIZER_FLAG, True)
    return classmethod(func)


def is_initializer(member: object) -> bool:
    func = getattr(member, "__func__", member)
    return bool(getattr(func, INITIALIZER_FLAG, False))
