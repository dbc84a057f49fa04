"""Public entry points for typescope introspection."""

from typescope.introspection.descriptors import (
    FieldDescriptor,
    InitializerDescriptor,
    InterfaceDescriptor,
    MethodDescriptor,
    TypeDescriptor,
    describe,
)
from typescope.introspection.errors import (
    ConstructorInvocationError,
    InspectionError,
    NoMatchingConstructorError,
)
from typescope.introspection.inspector import (
    create_instance,
    list_marked_fields,
    list_method_names,
)
from typescope.introspection.markers import Marker, initializer

__all__ = [
    "ConstructorInvocationError",
    "FieldDescriptor",
    "InitializerDescriptor",
    "InspectionError",
    "InterfaceDescriptor",
    "Marker",
    "MethodDescriptor",
    "NoMatchingConstructorError",
    "TypeDescriptor",
    "create_instance",
    "describe",
    "initializer",
    "list_marked_fields",
    "list_method_names",
]
