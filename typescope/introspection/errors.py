"""Failure taxonomy for the introspection layer."""

from __future__ import annotations

from typing import Any, Sequence

__all__ = [
    "ConstructorInvocationError",
    "InspectionError",
    "NoMatchingConstructorError",
]


class InspectionError(RuntimeError):
    """Base class for failures raised while inspecting or constructing a type."""


class NoMatchingConstructorError(InspectionError):
    """Raised when no declared initializer accepts the supplied arguments."""

    def __init__(self, target: type, args: Sequence[Any]) -> None:
        self.target = target
        self.args_given = tuple(args)
        profile = ", ".join(_type_name(type(arg)) for arg in self.args_given)
        super().__init__(
            f"no initializer of {target.__qualname__} accepts ({profile})"
        )


class ConstructorInvocationError(InspectionError):
    """Raised when a matched initializer fails while being invoked.

    The underlying exception is available as :attr:`cause` and is also chained
    as ``__cause__``.
    """

    def __init__(self, target: type, initializer: str, cause: BaseException) -> None:
        self.target = target
        self.initializer = initializer
        self.cause = cause
        super().__init__(
            f"{target.__qualname__}.{initializer} raised {type(cause).__name__}: {cause}"
        )


def _type_name(value: type) -> str:
    return getattr(value, "__qualname__", repr(value))
