"""JSON codec for marker-described records such as :class:`ProductRecord`.

Field names on the wire come from :class:`JsonProperty` markers and date
rendering from :class:`JsonFormat` markers, both discovered through the
introspection layer.  Encoding follows a fixed property order, skips ``None``
and empty values, and decoding ignores properties it does not know.  Records
are built through their zero-argument initializer and then populated field by
field.
"""

from __future__ import annotations

import json
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence, TypeVar, get_args, get_type_hints

from typescope.introspection import create_instance, describe

from .product import PRODUCT_PROPERTY_ORDER, JsonFormat, JsonProperty, ProductRecord

__all__ = ["CodecError", "from_dict", "from_json", "to_dict", "to_json"]

R = TypeVar("R")


class CodecError(ValueError):
    """Raised when a payload cannot be mapped onto a record."""


@dataclass(slots=True, frozen=True)
class _Property:
    attribute: str
    external: str
    value_type: Any
    pattern: Optional[str]


def to_dict(record: Any, *, order: Sequence[str] = PRODUCT_PROPERTY_ORDER) -> OrderedDict[str, Any]:
    """Return the external mapping for ``record`` in canonical property order."""

    data: OrderedDict[str, Any] = OrderedDict()
    for prop in _properties(type(record), order):
        value = getattr(record, prop.attribute)
        if _is_empty(value):
            continue
        data[prop.external] = _encode_value(prop, value)
    return data


def to_json(
    record: Any,
    *,
    indent: Optional[int] = None,
    order: Sequence[str] = PRODUCT_PROPERTY_ORDER,
) -> str:
    """Serialize ``record`` into JSON text.

    Decimal values keep their exact digits; NaN and infinities are rejected.
    The layout matches :func:`json.dumps` with the same ``indent``.
    """

    members = [
        f"{json.dumps(key)}: {_json_scalar(value)}"
        for key, value in to_dict(record, order=order).items()
    ]
    if not members:
        return "{}"
    if indent is None:
        return "{" + ", ".join(members) + "}"
    newline = "\n" + " " * indent
    return "{" + newline + ("," + newline).join(members) + "\n}"


def from_dict(data: Mapping[str, Any], cls: type[R] = ProductRecord) -> R:  # type: ignore[assignment]
    """Build a ``cls`` instance from an external mapping.

    Unknown keys are ignored and ``None`` values leave the field untouched.
    """

    if not isinstance(data, Mapping):
        raise CodecError(f"expected a JSON object, got {type(data).__name__}")
    record = create_instance(cls)
    for prop in _properties(cls, ()):
        raw = data.get(prop.external)
        if raw is None:
            continue
        setattr(record, prop.attribute, _decode_value(prop, raw))
    return record


def from_json(payload: str | bytes, cls: type[R] = ProductRecord) -> R:  # type: ignore[assignment]
    """Deserialize JSON text into a ``cls`` instance."""

    try:
        raw = json.loads(payload, parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise CodecError(f"invalid JSON payload: {exc}") from exc
    return from_dict(raw, cls)


# ---------------------------------------------------------------------------
# Property discovery


def _properties(cls: type, order: Sequence[str]) -> list[_Property]:
    hints = get_type_hints(cls)
    properties: list[_Property] = []
    for field_info in describe(cls).fields:
        prop = field_info.marker(JsonProperty)
        if prop is None:
            continue
        fmt = field_info.marker(JsonFormat)
        properties.append(
            _Property(
                attribute=field_info.name,
                external=prop.name,  # type: ignore[attr-defined]
                value_type=_strip_optional(hints.get(field_info.name, Any)),
                pattern=fmt.pattern if fmt is not None else None,  # type: ignore[attr-defined]
            )
        )
    rank = {name: index for index, name in enumerate(order)}
    # Stable sort keeps declaration order for properties missing from ``order``.
    properties.sort(key=lambda item: rank.get(item.external, len(rank)))
    return properties


def _strip_optional(annotation: Any) -> Any:
    options = [option for option in get_args(annotation) if option is not type(None)]
    if options and type(None) in get_args(annotation):
        return options[0] if len(options) == 1 else annotation
    return annotation


# ---------------------------------------------------------------------------
# Value conversion


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def _encode_value(prop: _Property, value: Any) -> Any:
    if prop.pattern is not None and isinstance(value, date):
        return value.strftime(prop.pattern)
    return value


def _decode_value(prop: _Property, raw: Any) -> Any:
    expected = prop.value_type
    try:
        if prop.pattern is not None:
            parsed = datetime.strptime(str(raw), prop.pattern)
            if expected is date:
                return parsed.date()
            return parsed
        if expected is Decimal:
            return Decimal(str(raw))
        if expected is int:
            if isinstance(raw, bool):
                raise TypeError("booleans are not integers")
            if isinstance(raw, Decimal) and raw != raw.to_integral_value():
                raise ValueError("fractional identifier")
            return int(raw)
        if expected is str:
            return str(raw)
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise CodecError(f"invalid value for {prop.external}: {raw!r}") from exc
    return raw


def _json_scalar(value: Any) -> str:
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise CodecError(f"cannot encode non-finite number {value}")
        return str(value)
    if isinstance(value, (date, datetime)):
        value = value.isoformat()
    try:
        return json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise CodecError(f"cannot encode {value!r}") from exc
