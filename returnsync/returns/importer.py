"""
Shape column-mapped import rows into ReturnRecords.

Header detection and synonym mapping happen upstream; a row arrives as a
mapping with canonical keys (camelCase as produced by the upload parser, or
snake_case). This module validates it, normalizes the option and reason
display values, and produces a Pending record.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from returnsync.config import IMPORT_MAX_ROWS
from returnsync.matching.normalizer import simplify_option, simplify_return_reason
from returnsync.observability.logging import get_logger
from returnsync.returns.models import ReturnRecord, ReturnStatus
from returnsync.utils.validators import (
    InputShapeError,
    clean_text,
    ensure_mapping,
    from_pydantic_error,
)

logger = get_logger(__name__)

# canonical field -> accepted row keys
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "customer_name": ("customerName", "customer_name"),
    "order_number": ("orderNumber", "order_number"),
    "product_name": ("productName", "product_name"),
    "option_name": ("optionName", "option_name"),
    "quantity": ("quantity",),
    "return_reason": ("returnReason", "return_reason"),
    "tracking_number": ("trackingNumber", "tracking_number", "returnTrackingNumber"),
    "vendor_product_code": ("vendorProductCode", "vendor_product_code"),
    "detail_reason": ("detailReason", "detail_reason"),
    "barcode": ("barcode",),
}

REQUIRED_FIELDS: tuple[str, ...] = ("order_number", "product_name", "quantity")


def _pick(raw: Mapping[str, Any], field: str) -> Any:
    for key in _FIELD_KEYS[field]:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _optional(value: Any) -> str | None:
    text = clean_text(value)
    return text or None


def build_return_record(
    raw: Mapping[str, Any], record_id: str | None = None, *, row_index: int | None = None
) -> ReturnRecord:
    """
    Validate one raw row and build a Pending ReturnRecord.

    Args:
        raw: Column-mapped row
        record_id: Caller-supplied identifier (never generated here)
        row_index: Position in the upload, used in error messages

    Raises:
        InputShapeError: If a required field is missing or a value is invalid
    """
    ensure_mapping(raw, row_index)

    missing = tuple(
        field for field in REQUIRED_FIELDS if clean_text(_pick(raw, field)) == ""
    )
    if missing:
        raise InputShapeError(
            f"missing required field(s): {', '.join(missing)}",
            row_index=row_index,
            fields=missing,
        )

    option_name = clean_text(_pick(raw, "option_name"))
    reason = clean_text(_pick(raw, "return_reason"))

    try:
        return ReturnRecord(
            record_id=record_id,
            customer_name=clean_text(_pick(raw, "customer_name")),
            order_number=clean_text(_pick(raw, "order_number")),
            product_name=clean_text(_pick(raw, "product_name")),
            option_name=option_name,
            option_display=simplify_option(option_name),
            quantity=_pick(raw, "quantity"),
            return_reason_raw=reason,
            return_reason_normalized=simplify_return_reason(reason),
            tracking_number=_optional(_pick(raw, "tracking_number")),
            vendor_product_code=_optional(_pick(raw, "vendor_product_code")),
            detail_reason=_optional(_pick(raw, "detail_reason")),
            barcode=_optional(_pick(raw, "barcode")),
            status=ReturnStatus.PENDING,
        )
    except ValidationError as exc:
        raise from_pydantic_error(exc, row_index) from exc


def build_return_records(
    rows: Iterable[Mapping[str, Any]], record_ids: Iterable[str | None] | None = None
) -> list[ReturnRecord]:
    """
    Build records for a whole upload; the first malformed row aborts the batch.

    Raises:
        InputShapeError: On the first malformed row (with its index)
    """
    if rows is None:
        raise TypeError("rows must be an iterable of mappings")

    rows = list(rows)
    if len(rows) > IMPORT_MAX_ROWS:
        raise InputShapeError(f"upload has {len(rows)} rows, limit is {IMPORT_MAX_ROWS}")

    ids = list(record_ids) if record_ids is not None else [None] * len(rows)
    if len(ids) != len(rows):
        raise InputShapeError(f"got {len(ids)} record ids for {len(rows)} rows")

    records = [
        build_return_record(raw, record_id, row_index=index)
        for index, (raw, record_id) in enumerate(zip(rows, ids))
    ]
    logger.info("Built %d return record(s) from upload", len(records))
    return records
