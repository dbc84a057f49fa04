"""Product data-transfer record and the JSON markers describing its wire form."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional

from typescope.introspection.markers import Marker

__all__ = [
    "DATE_PATTERN",
    "DATETIME_PATTERN",
    "JsonFormat",
    "JsonProperty",
    "PRODUCT_PROPERTY_ORDER",
    "ProductRecord",
]

DATE_PATTERN = "%Y-%m-%d"
DATETIME_PATTERN = "%Y-%m-%d@%H:%M:%S"

PRODUCT_PROPERTY_ORDER: tuple[str, ...] = (
    "ProductID",
    "ProductName",
    "ProductPrice",
    "DateOfProduction",
    "DateOfExpiry",
)


@dataclass(frozen=True, slots=True)
class JsonProperty(Marker):
    """External JSON name of a field."""

    name: str


@dataclass(frozen=True, slots=True)
class JsonFormat(Marker):
    """``strftime`` pattern used to render a date or datetime field."""

    pattern: str


@dataclass(slots=True, kw_only=True)
class ProductRecord:
    id: Annotated[Optional[int], JsonProperty("ProductID")] = None
    name: Annotated[Optional[str], JsonProperty("ProductName")] = None
    price: Annotated[Optional[Decimal], JsonProperty("ProductPrice")] = None
    production_date: Annotated[
        Optional[datetime], JsonProperty("DateOfProduction"), JsonFormat(DATETIME_PATTERN)
    ] = None
    expiry_date: Annotated[
        Optional[date], JsonProperty("DateOfExpiry"), JsonFormat(DATE_PATTERN)
    ] = None
