"""Read-only descriptors of a class's directly declared structure.

:func:`describe` takes a snapshot of what a class body declares: annotated
fields and their marker tags, methods, initializers, and the capability
contracts (protocols and ABCs) it lists as direct bases.  Everything is read
from the class ``__dict__`` and its own annotations, so inherited members never
leak into a descriptor and building one never mutates the class.

Initializers deserve a note.  Python has one constructor per class, so the
class call itself (``cls(...)``, whose signature combines ``__new__`` and
``__init__``) is always reported as the public ``__init__`` initializer.
Alternate constructors are opted in with :func:`markers.initializer`; those
whose name starts with an underscore are non-public and can only be reached
through :func:`typescope.introspection.inspector.force_construct`.
"""

from __future__ import annotations

import abc
import inspect
import sys
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, ClassVar, Final, Generic, Iterator, Optional, Protocol
from typing import get_args, get_origin

from .markers import is_initializer, matches_marker

__all__ = [
    "CONSTRUCTOR_NAME",
    "FieldDescriptor",
    "InitializerDescriptor",
    "InterfaceDescriptor",
    "MethodDescriptor",
    "TypeDescriptor",
    "describe",
]

CONSTRUCTOR_NAME = "__init__"

_CONSTRUCTOR_MEMBERS = frozenset({"__init__", "__new__"})
_CAPABILITY_ROOTS: tuple[type, ...] = (object, Protocol, Generic, abc.ABC)  # type: ignore[assignment]
_UNRESOLVED = (NameError, AttributeError, SyntaxError, TypeError)
_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


@dataclass(slots=True, frozen=True)
class FieldDescriptor:
    """Annotated attribute declared in a class body."""

    name: str
    markers: tuple[object, ...] = ()

    def has_marker(self, kind: object) -> bool:
        return any(matches_marker(marker, kind) for marker in self.markers)

    def marker(self, kind: object) -> Optional[object]:
        """Return the first marker of ``kind`` or ``None``."""

        for marker in self.markers:
            if matches_marker(marker, kind):
                return marker
        return None


@dataclass(slots=True, frozen=True)
class MethodDescriptor:
    name: str
    kind: str


@dataclass(slots=True, frozen=True)
class InitializerDescriptor:
    """Construction routine with a positional parameter-type profile."""

    name: str
    parameter_types: tuple[Any, ...]
    public: bool
    invoke: Callable[..., Any] = field(repr=False, compare=False)

    @property
    def arity(self) -> int:
        return len(self.parameter_types)


@dataclass(slots=True, frozen=True)
class InterfaceDescriptor:
    target: type
    methods: tuple[MethodDescriptor, ...]

    @property
    def name(self) -> str:
        return self.target.__qualname__


@dataclass(slots=True, frozen=True)
class TypeDescriptor:
    """Snapshot of everything a class declares directly."""

    target: type
    fields: tuple[FieldDescriptor, ...]
    methods: tuple[MethodDescriptor, ...]
    initializers: tuple[InitializerDescriptor, ...]
    interfaces: tuple[InterfaceDescriptor, ...]

    @property
    def name(self) -> str:
        return self.target.__qualname__


def describe(cls: type) -> TypeDescriptor:
    """Build a :class:`TypeDescriptor` for ``cls``.

    Parameters
    ----------
    cls:
        The class to inspect.  Only members of ``cls.__dict__`` and the class's
        own annotations are considered.

    Raises
    ------
    TypeError
        If ``cls`` is not a class.
    """

    if not isinstance(cls, type):
        raise TypeError(f"expected a class, got {type(cls).__name__}")
    return TypeDescriptor(
        target=cls,
        fields=_declared_fields(cls),
        methods=_declared_methods(cls),
        initializers=_declared_initializers(cls),
        interfaces=_direct_interfaces(cls),
    )


# ---------------------------------------------------------------------------
# Annotation resolution


def _resolve_annotation(annotation: Any, owner: type, default: Any) -> Any:
    """Evaluate a string annotation in the namespace of ``owner``.

    The class itself and its ``__dict__`` act as locals, so self-references
    resolve even for classes defined inside functions.  Anything that still
    cannot be evaluated becomes ``default``.
    """

    module = sys.modules.get(owner.__module__)
    global_ns = dict(vars(module)) if module is not None else {}
    local_ns = dict(vars(owner))
    local_ns.setdefault(owner.__name__, owner)
    # Two passes: quoted annotations under postponed evaluation are nested strings.
    for _ in range(2):
        if not isinstance(annotation, str):
            return annotation
        try:
            annotation = eval(annotation, global_ns, local_ns)  # noqa: S307
        except _UNRESOLVED:
            return default
    return default if isinstance(annotation, str) else annotation


def _deferred_string_format() -> Any:
    # Deferred annotations (Python 3.14+) that cannot be evaluated yet.
    import annotationlib

    return annotationlib.Format.STRING


# ---------------------------------------------------------------------------
# Fields


def _declared_fields(cls: type) -> tuple[FieldDescriptor, ...]:
    return tuple(
        FieldDescriptor(name=name, markers=_markers_of(annotation))
        for name, annotation in _own_annotations(cls).items()
    )


def _own_annotations(cls: type) -> dict[str, Any]:
    try:
        return dict(inspect.get_annotations(cls, eval_str=True))
    except _UNRESOLVED:
        pass
    try:
        raw = inspect.get_annotations(cls)
    except NameError:
        raw = inspect.get_annotations(cls, format=_deferred_string_format())
    # Unresolvable entries keep their name and lose their markers.
    return {name: _resolve_annotation(value, cls, None) for name, value in raw.items()}


def _markers_of(annotation: Any) -> tuple[object, ...]:
    origin = get_origin(annotation)
    if origin in (ClassVar, Final):
        args = get_args(annotation)
        return _markers_of(args[0]) if args else ()
    if origin is Annotated:
        return tuple(annotation.__metadata__)
    return ()


# ---------------------------------------------------------------------------
# Methods


def _declared_methods(cls: type) -> tuple[MethodDescriptor, ...]:
    return tuple(
        MethodDescriptor(name=name, kind=kind) for name, kind, _ in _declared_members(cls)
    )


def _declared_members(cls: type) -> Iterator[tuple[str, str, Callable[..., Any]]]:
    for key, member in vars(cls).items():
        if key in _CONSTRUCTOR_MEMBERS or is_initializer(member):
            continue
        unwrapped = _unwrap_method(member)
        if unwrapped is None:
            continue
        kind, target = unwrapped
        name = _declared_name(cls, key, target)
        if name is not None:
            yield name, kind, target


def _unwrap_method(member: object) -> Optional[tuple[str, Callable[..., Any]]]:
    if isinstance(member, staticmethod):
        return "staticmethod", member.__func__
    if isinstance(member, classmethod):
        return "classmethod", member.__func__
    if callable(member) and not isinstance(member, type):
        return "function", member  # type: ignore[return-value]
    return None


def _declared_name(cls: type, key: str, target: Callable[..., Any]) -> Optional[str]:
    """Name under which ``target`` was written in the body of ``cls``.

    Decorated methods are followed through ``__wrapped__`` and, for wrappers
    built without :func:`functools.wraps`, through their closure.  Helpers
    injected by metaclasses or ``typing`` carry a foreign qualname and yield
    ``None``; ``__private`` members are stored under their mangled key.
    """

    for candidate in _wrapped_chain(target):
        name = getattr(candidate, "__name__", None)
        if not isinstance(name, str):
            continue
        if getattr(candidate, "__qualname__", None) != f"{cls.__qualname__}.{name}":
            continue
        if key in (name, _mangle(cls, name)):
            return name
    return None


def _wrapped_chain(target: Callable[..., Any]) -> Iterator[Any]:
    yield target
    try:
        unwrapped = inspect.unwrap(target)
    except ValueError:
        # Cyclic __wrapped__ chain.
        unwrapped = target
    if unwrapped is not target:
        yield unwrapped
    for cell in getattr(unwrapped, "__closure__", None) or ():
        try:
            contents = cell.cell_contents
        except ValueError:
            continue
        if inspect.isfunction(contents):
            yield contents


def _mangle(cls: type, name: str) -> str:
    if not name.startswith("__") or name.endswith("__"):
        return name
    owner = cls.__name__.lstrip("_")
    return f"_{owner}{name}" if owner else name


# ---------------------------------------------------------------------------
# Initializers


def _declared_initializers(cls: type) -> tuple[InitializerDescriptor, ...]:
    initializers: list[InitializerDescriptor] = []
    constructor_seen = False
    for key, member in vars(cls).items():
        if key in _CONSTRUCTOR_MEMBERS:
            if not constructor_seen:
                constructor_seen = True
                initializers.extend(_constructor(cls))
        elif is_initializer(member):
            initializers.extend(_alternate_constructor(cls, member))
    if not constructor_seen:
        initializers[:0] = _constructor(cls)
    return tuple(initializers)


def _constructor(cls: type) -> list[InitializerDescriptor]:
    signature = _signature(cls)
    if signature is None:
        return []
    profile = _positional_profile(signature, cls)
    if profile is None:
        return []
    return [InitializerDescriptor(CONSTRUCTOR_NAME, profile, True, cls)]


def _alternate_constructor(cls: type, member: Any) -> list[InitializerDescriptor]:
    bound = member.__get__(None, cls)
    signature = _signature(bound)
    if signature is None:
        return []
    profile = _positional_profile(signature, cls)
    if profile is None:
        return []
    name = member.__func__.__name__
    return [InitializerDescriptor(name, profile, not name.startswith("_"), bound)]


def _signature(target: Callable[..., Any]) -> Optional[inspect.Signature]:
    try:
        return inspect.signature(target, eval_str=True)
    except (NameError, AttributeError, SyntaxError):
        pass
    except (TypeError, ValueError):
        # Builtins and extension types without an introspectable signature.
        return None
    # Some annotation failed to evaluate; resolve each one on its own later.
    try:
        return inspect.signature(target)
    except NameError:
        return inspect.signature(target, annotation_format=_deferred_string_format())


def _positional_profile(
    signature: inspect.Signature, owner: type
) -> Optional[tuple[Any, ...]]:
    """Return positional parameter types, or ``None`` if keywords are required.

    Unannotated and unresolvable parameters are typed ``object``.
    """

    profile: list[Any] = []
    for parameter in signature.parameters.values():
        if parameter.kind in _POSITIONAL:
            annotation = parameter.annotation
            if annotation is inspect.Parameter.empty:
                profile.append(object)
            else:
                profile.append(_resolve_annotation(annotation, owner, object))
        elif (
            parameter.kind is inspect.Parameter.KEYWORD_ONLY
            and parameter.default is inspect.Parameter.empty
        ):
            return None
    return tuple(profile)


# ---------------------------------------------------------------------------
# Interfaces


def _direct_interfaces(cls: type) -> tuple[InterfaceDescriptor, ...]:
    return tuple(
        InterfaceDescriptor(target=base, methods=_declared_methods(base))
        for base in cls.__bases__
        if _is_capability(base)
    )


def _is_capability(base: type) -> bool:
    """Whether ``base`` is a contract rather than a superclass.

    Protocol classes qualify; so do abstract classes whose own methods are all
    abstract.  Concrete classes implementing a protocol do not.
    """

    if base in _CAPABILITY_ROOTS:
        return False
    if base.__dict__.get("_is_protocol", False):
        return True
    if not inspect.isabstract(base):
        return False
    return all(
        getattr(target, "__isabstractmethod__", False) for _, _, target in _declared_members(base)
    )
