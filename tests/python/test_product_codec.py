"""Tests for the product record JSON codec."""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from typescope.introspection import list_marked_fields
from typescope.records import codec
from typescope.records.product import (
    PRODUCT_PROPERTY_ORDER,
    JsonFormat,
    JsonProperty,
    ProductRecord,
)


def _full_record() -> ProductRecord:
    return ProductRecord(
        id=42,
        name="Cheese",
        price=Decimal("12.50"),
        production_date=datetime(2024, 3, 1, 8, 30, 0),
        expiry_date=date(2025, 3, 1),
    )


def test_record_markers_are_discoverable() -> None:
    assert list_marked_fields(ProductRecord, JsonProperty) == [
        "id",
        "name",
        "price",
        "production_date",
        "expiry_date",
    ]
    assert list_marked_fields(ProductRecord, JsonFormat) == ["production_date", "expiry_date"]


def test_to_dict_uses_external_names_in_fixed_order() -> None:
    data = codec.to_dict(_full_record())
    assert tuple(data) == PRODUCT_PROPERTY_ORDER
    assert data["DateOfProduction"] == "2024-03-01@08:30:00"
    assert data["DateOfExpiry"] == "2025-03-01"


def test_to_json_renders_numbers() -> None:
    payload = json.loads(codec.to_json(_full_record()))
    assert payload["ProductID"] == 42
    assert payload["ProductPrice"] == 12.5
    assert list(payload) == list(PRODUCT_PROPERTY_ORDER)


def test_to_json_keeps_exact_decimal_digits() -> None:
    price = Decimal("12.345678901234567890123")
    text = codec.to_json(ProductRecord(price=price))
    assert text == '{"ProductPrice": 12.345678901234567890123}'
    assert json.loads(text, parse_float=Decimal)["ProductPrice"] == price


@pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity", "sNaN"])
def test_to_json_rejects_non_finite_prices(value: str) -> None:
    with pytest.raises(codec.CodecError):
        codec.to_json(ProductRecord(price=Decimal(value)))


@pytest.mark.parametrize("indent", [None, 0, 2])
def test_to_json_layout_matches_json_module(indent: int | None) -> None:
    record = ProductRecord(id=42, name="Cheese", expiry_date=date(2025, 3, 1))
    assert codec.to_json(record, indent=indent) == json.dumps(codec.to_dict(record), indent=indent)


def test_empty_values_are_omitted() -> None:
    record = ProductRecord(id=7, name="")
    assert codec.to_dict(record) == {"ProductID": 7}
    assert codec.to_json(ProductRecord()) == "{}"


def test_from_json_ignores_unknown_properties() -> None:
    payload = json.dumps(
        {
            "ProductName": "Milk",
            "Supplier": "Farm",
            "ProductPrice": 3.99,
            "DateOfProduction": "2024-05-06@07:08:09",
            "DateOfExpiry": "2024-05-20",
        }
    )
    record = codec.from_json(payload)
    assert record.id is None
    assert record.name == "Milk"
    assert record.price == Decimal("3.99")
    assert record.production_date == datetime(2024, 5, 6, 7, 8, 9)
    assert record.expiry_date == date(2024, 5, 20)


def test_decoded_record_encodes_back_to_same_document() -> None:
    original = codec.to_json(_full_record())
    assert codec.to_json(codec.from_json(original)) == original


@pytest.mark.parametrize(
    "payload",
    [
        '{"DateOfExpiry": "20-05-2024"}',
        '{"ProductID": "abc"}',
        '{"ProductID": 1.5}',
        '{"ProductPrice": "cheap"}',
        "[1, 2]",
        "{not json",
    ],
)
def test_malformed_payloads_raise_codec_error(payload: str) -> None:
    with pytest.raises(codec.CodecError):
        codec.from_json(payload)
