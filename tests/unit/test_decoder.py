from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from tripbench.domain.decoder import decode_row, decode_rows
from tripbench.domain.models import FlatJoinRow, Order, OrderItem, Payment, Shipping
from tripbench.errors import DecodeError


def test_decode_rows_builds_typed_records_in_input_order() -> None:
    rows = [
        {"product_name": "Keyboard", "quantity": 1, "unit_price": Decimal("49.90")},
        {"product_name": "Mouse", "quantity": 3, "unit_price": "9.99"},
    ]

    items = decode_rows(rows, OrderItem)

    assert [item.product_name for item in items] == ["Keyboard", "Mouse"]
    assert items[1].unit_price == Decimal("9.99")
    assert isinstance(items[1].unit_price, Decimal)


def test_decode_row_keeps_timestamps() -> None:
    order = decode_row(
        {"order_id": 7, "order_date": datetime(2024, 1, 2, 3, 4), "customer_name": "Grace"},
        Order,
    )
    assert order.order_id == 7
    assert order.order_date == datetime(2024, 1, 2, 3, 4)


def test_decode_rows_of_empty_result_is_empty() -> None:
    assert decode_rows([], Payment) == []


def test_missing_column_is_a_decode_error() -> None:
    with pytest.raises(DecodeError, match="city"):
        decode_row({"address": "1 Main St", "postal_code": "1000", "country": "GR"}, Shipping)


def test_unknown_column_is_a_decode_error() -> None:
    row = {"order_id": 1, "order_date": datetime(2024, 1, 1), "customer_name": "x", "extra": 1}
    with pytest.raises(DecodeError) as excinfo:
        decode_row(row, Order)
    assert excinfo.value.record_type == "Order"
    assert "extra" in excinfo.value.detail


def test_uncoercible_value_is_a_decode_error() -> None:
    with pytest.raises(DecodeError):
        decode_row({"product_name": "Mouse", "quantity": "many", "unit_price": "1"}, OrderItem)


def test_non_mapping_row_is_a_decode_error() -> None:
    with pytest.raises(DecodeError, match="column mapping"):
        decode_row(("Mouse", 1, Decimal("1")), OrderItem)  # type: ignore[arg-type]


def test_item_rows_are_rejected_as_shipping() -> None:
    # A result set read against the wrong record type must not be misassigned.
    rows = [{"product_name": "Mouse", "quantity": 1, "unit_price": Decimal("5.00")}]
    with pytest.raises(DecodeError):
        decode_rows(rows, Shipping)


def test_flat_join_row_accepts_nulls_on_the_joined_side() -> None:
    row = decode_row(
        {
            "order_id": 1,
            "order_date": datetime(2024, 1, 1),
            "customer_name": "Ada",
            "product_name": None,
            "quantity": None,
            "unit_price": None,
            "address": None,
            "city": None,
            "postal_code": None,
            "country": None,
            "payment_date": None,
            "amount": None,
            "payment_method": None,
        },
        FlatJoinRow,
    )
    assert row.product_name is None
    assert row.payment_date is None
