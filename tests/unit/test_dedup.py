"""Tests for return and catalog duplicate suppression."""

from __future__ import annotations

from returnsync.returns.dedup import (
    barcode_key,
    composite_key,
    dedup_products,
    dedup_within_set,
    filter_against_completed,
    identity_keys,
    merge_catalog,
    tracking_key,
)
from returnsync.returns.importer import build_return_record
from returnsync.returns.models import ProductRecord, ReturnStatus


class TestKeys:
    def test_composite_key_uses_normalized_reason(self, make_return):
        record = make_return(option_name="블랙/L", quantity=2)
        assert composite_key(record) == ("A1", "Blue Shirt", "블랙/L", 2, "단순 변심")

    def test_separator_in_values_cannot_collide(self, make_return):
        a = make_return(order_number="A|B", product_name="C")
        b = make_return(order_number="A", product_name="B|C")
        assert composite_key(a) != composite_key(b)

    def test_optional_keys(self, make_return):
        bare = make_return()
        assert barcode_key(bare) is None
        assert tracking_key(bare) is None
        assert identity_keys(bare) == [composite_key(bare)]

        full = make_return(barcode="B1", tracking_number="T1", quantity=3)
        assert barcode_key(full) == ("barcode", "B1", "3")
        assert tracking_key(full) == ("tracking", "T1")
        assert len(identity_keys(full)) == 3


class TestDedupWithinSet:
    def test_same_upload_twice_collapses(self):
        row = {"orderNumber": "A1", "productName": "P", "quantity": 1, "returnReason": "단순변심"}
        first = build_return_record(row)
        second = build_return_record(dict(row, returnReason="단순 변심"))

        assert len(dedup_within_set([first, second])) == 1

    def test_barcoded_record_beats_later_unmatched(self, make_return):
        matched = make_return(barcode="B1")
        unmatched = make_return(customer_name="later")
        assert dedup_within_set([matched, unmatched]) == [matched]

    def test_later_barcoded_record_replaces_unmatched(self, make_return):
        unmatched = make_return()
        matched = make_return(barcode="B1")
        assert dedup_within_set([unmatched, matched]) == [matched]

    def test_later_wins_otherwise(self, make_return):
        a = make_return(customer_name="first")
        b = make_return(customer_name="second")
        assert dedup_within_set([a, b]) == [b]

        c = make_return(barcode="B1", customer_name="first")
        d = make_return(barcode="B2", customer_name="second")
        assert dedup_within_set([c, d]) == [d]

    def test_first_seen_order_and_idempotence(self, make_return):
        records = [
            make_return(order_number="1"),
            make_return(order_number="2"),
            make_return(order_number="1", customer_name="again"),
            make_return(order_number="3"),
        ]
        once = dedup_within_set(records)
        assert [r.order_number for r in once] == ["1", "2", "3"]
        assert once[0].customer_name == "again"
        assert dedup_within_set(once) == once

    def test_stored_record_id_survives_a_reupload(self, make_return):
        stored = make_return(record_id="stored-1")
        reuploaded = make_return(customer_name="again")

        (kept,) = dedup_within_set([stored, reuploaded])

        assert kept.record_id == "stored-1"
        assert kept.customer_name == "again"

    def test_first_record_id_wins_over_later_id(self, make_return):
        first = make_return(record_id="a")
        second = make_return(record_id="b", barcode="B1")

        (kept,) = dedup_within_set([first, second])

        assert kept.record_id == "a"
        assert kept.barcode == "B1"

    def test_option_difference_keeps_both(self, make_return):
        records = [make_return(option_name="블랙"), make_return(option_name="화이트")]
        assert len(dedup_within_set(records)) == 2


class TestFilterAgainstCompleted:
    def test_composite_match_is_dropped(self, make_return):
        completed = [make_return(status=ReturnStatus.COMPLETED)]
        incoming = [make_return()]
        assert filter_against_completed(incoming, completed) == []

    def test_barcode_and_quantity_match_is_dropped(self, make_return):
        completed = [make_return(order_number="OLD", barcode="B1", quantity=1)]
        same_qty = make_return(order_number="NEW", barcode="B1", quantity=1)
        other_qty = make_return(order_number="NEW", barcode="B1", quantity=2)
        assert filter_against_completed([same_qty, other_qty], completed) == [other_qty]

    def test_tracking_match_is_dropped(self, make_return):
        completed = [make_return(order_number="OLD", tracking_number="T-1")]
        incoming = [make_return(order_number="NEW", product_name="Other", tracking_number="T-1")]
        assert filter_against_completed(incoming, completed) == []

    def test_unrelated_records_survive_and_inputs_untouched(self, make_return):
        completed = [make_return(order_number="OLD")]
        incoming = [make_return(order_number="NEW")]
        kept = filter_against_completed(incoming, completed)
        assert kept == incoming
        assert kept is not incoming
        assert len(completed) == 1


class TestCatalogDedup:
    def test_later_entry_wins_in_first_position(self):
        products = [
            ProductRecord(barcode="B1", product_name="old"),
            ProductRecord(barcode="B2", product_name="two"),
            ProductRecord(barcode="B1", product_name="new"),
        ]
        result = dedup_products(products)
        assert [(p.barcode, p.product_name) for p in result] == [("B1", "new"), ("B2", "two")]

    def test_entries_without_barcode_are_kept(self):
        products = [ProductRecord(product_name="a"), ProductRecord(product_name="a")]
        assert dedup_products(products) == products

    def test_merge_catalog(self):
        existing = [ProductRecord(barcode="B1", option_name="S")]
        incoming = [ProductRecord(barcode="B1", option_name="M"), ProductRecord(barcode="B3")]
        merged = merge_catalog(existing, incoming)
        assert [(p.barcode, p.option_name) for p in merged] == [("B1", "M"), ("B3", "")]
