"""Returns service layer: one entry point per batch operation.

Every call site that ingests a return upload or a catalog upload goes
through here, so matching and dedup run the same way everywhere.
Persistence is the caller's job; results are handed back as new lists.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from returnsync.matching.matcher import ProductMatcher
from returnsync.matching.policy import DEFAULT_POLICY, MatchPolicy
from returnsync.observability.logging import get_logger
from returnsync.observability.telemetry import log_event, time_block
from returnsync.returns.dedup import dedup_within_set, filter_against_completed, merge_catalog
from returnsync.returns.importer import build_return_records
from returnsync.returns.models import AuthoritativeProduct, ProductRecord, ReturnRecord
from returnsync.utils.validators import ensure_mapping, from_pydantic_error

logger = get_logger(__name__)


@dataclass
class IngestResult:
    """Outcome of ingesting one return upload."""

    pending: list[ReturnRecord]
    imported: int
    matched: int
    unmatched: int
    merged_duplicates: int
    dropped_completed: int


@dataclass
class CatalogMergeResult:
    """Outcome of merging a catalog upload."""

    products: list[ProductRecord]
    duplicates_collapsed: int


class ReturnsService:
    """Batch operations over in-memory snapshots of pending, completed and catalog data."""

    def __init__(self, policy: MatchPolicy = DEFAULT_POLICY):
        self.policy = policy

    def ingest(
        self,
        rows: Iterable[Mapping[str, Any]],
        catalog: Sequence[ProductRecord],
        completed: Sequence[ReturnRecord],
        pending: Sequence[ReturnRecord] = (),
        authoritative: Sequence[AuthoritativeProduct] | None = None,
        record_ids: Iterable[str | None] | None = None,
    ) -> IngestResult:
        """
        Import a return upload into the pending set.

        Steps: build records -> match against the catalog -> collapse
        duplicates across existing pending + new -> drop anything already
        completed.

        Raises:
            InputShapeError: If a row is malformed (nothing is returned)
        """
        with time_block("returns.ingest"):
            records = build_return_records(rows, record_ids)
            matcher = ProductMatcher(catalog, authoritative=authoritative, policy=self.policy)

            # Existing pending records may have been imported before the catalog
            # knew their product; give them another chance.
            rematched_pending = matcher.match_all(pending)
            matched_new = matcher.match_all(records)

            combined = [*rematched_pending, *matched_new]
            deduped = dedup_within_set(combined)
            result_pending = filter_against_completed(deduped, completed)

        matched = sum(1 for r in matched_new if r.barcode)
        result = IngestResult(
            pending=result_pending,
            imported=len(records),
            matched=matched,
            unmatched=len(records) - matched,
            merged_duplicates=len(combined) - len(deduped),
            dropped_completed=len(deduped) - len(result_pending),
        )
        log_event(
            "returns.ingest",
            imported=result.imported,
            matched=result.matched,
            unmatched=result.unmatched,
            merged_duplicates=result.merged_duplicates,
            dropped_completed=result.dropped_completed,
            pending_total=len(result.pending),
        )
        return result

    def rematch(
        self,
        pending: Sequence[ReturnRecord],
        catalog: Sequence[ProductRecord],
        authoritative: Sequence[AuthoritativeProduct] | None = None,
    ) -> list[ReturnRecord]:
        """Run the matcher over the current pending set (e.g. after a catalog upload)."""
        matcher = ProductMatcher(catalog, authoritative=authoritative, policy=self.policy)
        return matcher.match_all(pending)

    @staticmethod
    def upload_catalog(
        existing: Sequence[ProductRecord], incoming: Iterable[ProductRecord | Mapping[str, Any]]
    ) -> CatalogMergeResult:
        """Merge a catalog upload into the current catalog, barcode identity, later entry wins."""
        products: list[ProductRecord] = []
        for index, item in enumerate(incoming):
            if isinstance(item, ProductRecord):
                products.append(item)
                continue
            try:
                products.append(ProductRecord.model_validate(ensure_mapping(item, index)))
            except ValidationError as exc:
                raise from_pydantic_error(exc, index) from exc

        merged = merge_catalog(existing, products)
        log_event(
            "catalog.upload",
            existing=len(existing),
            incoming=len(products),
            merged=len(merged),
        )
        return CatalogMergeResult(
            products=merged,
            duplicates_collapsed=len(existing) + len(products) - len(merged),
        )
