"""
Shared fixtures for returnsync tests.

The catalog fixtures are ordered on purpose: tie-breaks depend on catalog
order, so tests rely on the positions below.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from returnsync.observability.telemetry import reset_counters
from returnsync.returns.models import AuthoritativeProduct, ProductRecord, ReturnRecord


@pytest.fixture(autouse=True)
def _reset_telemetry():
    reset_counters()
    yield
    reset_counters()


@pytest.fixture
def make_return() -> Callable[..., ReturnRecord]:
    """Factory for ReturnRecords with sensible defaults."""

    def _make(**overrides: Any) -> ReturnRecord:
        fields: dict[str, Any] = {
            "customer_name": "홍길동",
            "order_number": "A1",
            "product_name": "Blue Shirt",
            "option_name": "",
            "quantity": 1,
            "return_reason_raw": "단순변심",
            "return_reason_normalized": "단순 변심",
        }
        fields.update(overrides)
        return ReturnRecord(**fields)

    return _make


@pytest.fixture
def catalog() -> list[ProductRecord]:
    return [
        ProductRecord(
            barcode="8800000000017",
            product_name="Blue Shirt",
            purchase_name="블루 셔츠",
            option_name="Blue/L",
            vendor_product_code="BS-100",
        ),
        ProductRecord(
            barcode="8800000000024",
            product_name="LSD-01 원피스",
            purchase_name="Linen Summer Dres",
            option_name="Black/S",
            vendor_product_code="LSD-01",
        ),
        ProductRecord(
            barcode="8800000000031",
            product_name="LSD-01 원피스",
            purchase_name="Linen Summer Dres",
            option_name="Ivory/M",
            vendor_product_code="LSD-01",
        ),
        ProductRecord(
            barcode="8800000000048",
            product_name="Cotton Hoodie Gray",
            purchase_name="HD-7788",
            option_name="Gray/M",
            vendor_product_code="HD-7788",
        ),
    ]


@pytest.fixture
def storefront() -> list[AuthoritativeProduct]:
    return [
        AuthoritativeProduct(product_code="SS-1", product_name="오버핏 코튼 셔츠"),
        AuthoritativeProduct(product_code="SS-2", product_name="린넨 와이드 팬츠", barcode="8809999000001"),
    ]


@pytest.fixture
def fulfillment_catalog() -> list[ProductRecord]:
    # Names live in the storefront catalog; these rows only carry codes and options.
    return [
        ProductRecord(barcode="F1", option_name="블랙/L", custom_product_code="SS-1"),
        ProductRecord(barcode="F2", option_name="화이트/M", custom_product_code="SS-1"),
        ProductRecord(barcode="F3", option_name="화이트/L", custom_product_code="SS-1"),
    ]
