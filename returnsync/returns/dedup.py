"""
Identity keys and duplicate suppression for return and catalog batches.

The same logical return shows up in every overlapping export a seller
downloads, and again after it has been completed. Keys:

- composite: (order, product, option, quantity, normalized reason)
- barcode:   ("barcode", barcode, quantity), only when a barcode is set
- tracking:  ("tracking", tracking number), only when a tracking number is set

Keys are tuples so field values can never collide through a separator.
All functions return new lists and leave their inputs untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from returnsync.observability.logging import get_logger
from returnsync.returns.models import ProductRecord, ReturnRecord

logger = get_logger(__name__)

CompositeKey = tuple[str, str, str, int, str]
SecondaryKey = tuple[str, ...]


def composite_key(record: ReturnRecord) -> CompositeKey:
    return (
        record.order_number,
        record.product_name,
        record.option_name,
        record.quantity,
        record.return_reason_normalized,
    )


def barcode_key(record: ReturnRecord) -> SecondaryKey | None:
    if not record.barcode:
        return None
    return ("barcode", record.barcode, str(record.quantity))


def tracking_key(record: ReturnRecord) -> SecondaryKey | None:
    if not record.tracking_number:
        return None
    return ("tracking", record.tracking_number)


def identity_keys(record: ReturnRecord) -> list[tuple]:
    """Every key a record can collide on, composite first."""
    keys: list[tuple] = [composite_key(record)]
    for key in (barcode_key(record), tracking_key(record)):
        if key is not None:
            keys.append(key)
    return keys


def filter_against_completed(
    incoming: Iterable[ReturnRecord], completed: Iterable[ReturnRecord]
) -> list[ReturnRecord]:
    """
    Drop incoming records that were already completed.

    A record is dropped when its composite, barcode, or tracking key matches
    the corresponding key of any completed record.

    Side Effects:
        None (pure function - returns a new list)
    """
    if incoming is None or completed is None:
        raise TypeError("incoming and completed must be iterables of ReturnRecord")

    completed_keys: set[tuple] = set()
    for record in completed:
        completed_keys.update(identity_keys(record))

    kept: list[ReturnRecord] = []
    dropped = 0
    for record in incoming:
        if any(key in completed_keys for key in identity_keys(record)):
            dropped += 1
            continue
        kept.append(record)

    if dropped:
        logger.info("Dropped %d record(s) already present in the completed set", dropped)
    return kept


def _prefer(existing: ReturnRecord, candidate: ReturnRecord) -> ReturnRecord:
    # A matched record beats an unmatched one; otherwise the later record wins.
    if existing.barcode and not candidate.barcode:
        return existing
    # The first record id seen for a key is kept.
    if existing.record_id and candidate.record_id != existing.record_id:
        return candidate.model_copy(update={"record_id": existing.record_id})
    return candidate


def dedup_within_set(records: Iterable[ReturnRecord]) -> list[ReturnRecord]:
    """
    Collapse records sharing a composite key.

    On collision the record with a barcode is kept over one without; if both
    or neither have a barcode the later record wins. The winner keeps the
    record id of the first record seen with an id. Output order is the
    first-seen order of each key, so the function is idempotent.
    """
    if records is None:
        raise TypeError("records must be an iterable of ReturnRecord")

    by_key: dict[CompositeKey, ReturnRecord] = {}
    for record in records:
        key = composite_key(record)
        existing = by_key.get(key)
        by_key[key] = record if existing is None else _prefer(existing, record)
    return list(by_key.values())


def dedup_products(records: Iterable[ProductRecord]) -> list[ProductRecord]:
    """
    Collapse catalog entries sharing a barcode; the later entry wins.

    Entries without a barcode have no identity and are always kept, each in
    its original position.
    """
    if records is None:
        raise TypeError("records must be an iterable of ProductRecord")

    slots: list[ProductRecord] = []
    slot_by_barcode: dict[str, int] = {}
    for product in records:
        if not product.barcode:
            slots.append(product)
            continue
        index = slot_by_barcode.get(product.barcode)
        if index is None:
            slot_by_barcode[product.barcode] = len(slots)
            slots.append(product)
        else:
            slots[index] = product
    return slots


def merge_catalog(
    existing: Sequence[ProductRecord], incoming: Sequence[ProductRecord]
) -> list[ProductRecord]:
    """Merge a catalog upload into the current catalog (barcode identity)."""
    merged = dedup_products([*existing, *incoming])
    logger.info(
        "Catalog merge: %d existing + %d incoming -> %d (%d duplicates collapsed)",
        len(existing),
        len(incoming),
        len(merged),
        len(existing) + len(incoming) - len(merged),
    )
    return merged
