"""
End-to-end ingest: upload rows -> match -> dedup -> completed filter.

Also covers the catalog upload and rematch flow an operator runs after
adding missing products.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from returnsync.observability.telemetry import get_timings
from returnsync.returns.importer import build_return_record
from returnsync.returns.lifecycle import complete_by_tracking, complete_return, receiving_summary
from returnsync.returns.models import MatchMethod, ProductRecord
from returnsync.returns.service import ReturnsService
from returnsync.utils.validators import InputShapeError

COMPLETED_ROW = {
    "orderNumber": "C1",
    "productName": "Cotton Hoodie Grey",
    "optionName": "Grey/M",
    "quantity": 1,
    "returnReason": "불량",
}


@pytest.fixture
def upload_rows():
    return [
        {"orderNumber": "A1", "productName": "Blue Shirt", "quantity": 1, "returnReason": "단순변심"},
        {"orderNumber": "A1", "productName": "Blue Shirt", "quantity": 1, "returnReason": "단순 변심"},
        {
            "orderNumber": "A2",
            "productName": "Wool Coat",
            "quantity": 2,
            "returnReason": "사이즈 안맞음",
            "trackingNumber": "T-200",
        },
        dict(COMPLETED_ROW),
    ]


@pytest.fixture
def completed():
    return [complete_return(build_return_record(COMPLETED_ROW, "done-1"), datetime(2024, 2, 1))]


class TestIngest:
    def test_full_upload(self, catalog, completed, make_return, upload_rows):
        previously_unmatched = make_return(order_number="P0", product_name="Linen Summer Dress")

        result = ReturnsService().ingest(
            upload_rows,
            catalog,
            completed,
            pending=[previously_unmatched],
            record_ids=["r1", "r2", "r3", "r4"],
        )

        assert result.imported == 4
        assert result.matched == 3
        assert result.unmatched == 1
        assert result.merged_duplicates == 1
        assert result.dropped_completed == 1

        assert [r.order_number for r in result.pending] == ["P0", "A1", "A2"]
        rematched, shirt, coat = result.pending
        assert rematched.barcode == "8800000000024"
        assert rematched.match_method == MatchMethod.NAME_SIMILARITY
        # Both duplicates were matched: the later one is kept under the first id.
        assert shirt.record_id == "r1"
        assert shirt.barcode == "8800000000017"
        assert coat.barcode is None
        assert get_timings("returns.ingest")

    def test_reingesting_the_same_upload_adds_nothing(self, catalog, completed, upload_rows):
        service = ReturnsService()
        first = service.ingest(upload_rows, catalog, completed)
        second = service.ingest(upload_rows, catalog, completed, pending=first.pending)

        assert second.pending == first.pending

    def test_reingest_keeps_stored_record_ids(self, catalog, completed, upload_rows):
        service = ReturnsService()
        first = service.ingest(upload_rows, catalog, completed, record_ids=["s1", "s2", "s3", "s4"])
        second = service.ingest(upload_rows, catalog, completed, pending=first.pending)

        assert [r.record_id for r in first.pending] == ["s1", "s3"]
        assert [r.record_id for r in second.pending] == ["s1", "s3"]
        assert second.pending == first.pending

    def test_malformed_row_aborts_batch(self, catalog, completed, upload_rows):
        upload_rows.append({"orderNumber": "X", "productName": "Y"})
        with pytest.raises(InputShapeError, match="^row 4: "):
            ReturnsService().ingest(upload_rows, catalog, completed)

    def test_storefront_catalog(self, storefront, fulfillment_catalog):
        rows = [{"orderNumber": "S1", "productName": "오버핏 코튼 셔츠", "optionName": "화이트/L", "quantity": 1}]
        result = ReturnsService().ingest(rows, fulfillment_catalog, [], authoritative=storefront)
        assert result.pending[0].barcode == "F3"
        assert result.pending[0].match_method == MatchMethod.TWO_CATALOG


class TestCatalogUploadAndRematch:
    def test_upload_then_rematch(self, catalog, completed, upload_rows):
        service = ReturnsService()
        ingest = service.ingest(upload_rows, catalog, completed)

        upload = service.upload_catalog(
            catalog,
            [
                {"barcode": "8800000000017", "productName": "Blue Shirt", "purchaseName": "블루 셔츠 v2"},
                {"barcode": "8800000000055", "productName": "Wool Coat", "optionName": "Charcoal"},
            ],
        )
        assert upload.duplicates_collapsed == 1
        assert len(upload.products) == 5
        assert upload.products[0].purchase_name == "블루 셔츠 v2"

        pending = service.rematch(ingest.pending, upload.products)
        coat = next(r for r in pending if r.order_number == "A2")
        assert coat.barcode == "8800000000055"

    def test_bad_catalog_item(self, catalog):
        with pytest.raises(InputShapeError, match="^row 1: "):
            ReturnsService.upload_catalog(catalog, [ProductRecord(barcode="ok"), "not a row"])


def test_receiving_after_completion(catalog, upload_rows):
    ingest = ReturnsService().ingest(upload_rows, catalog, [])
    done = complete_by_tracking(ingest.pending, [], "T-200", datetime(2024, 3, 1))

    assert [r.order_number for r in done.moved] == ["A2"]
    # The coat is unmatched, so nothing goes on the receiving sheet yet.
    assert receiving_summary(done.completed) == []
    assert receiving_summary(done.pending) == [("8800000000017", 1), ("8800000000048", 1)]
