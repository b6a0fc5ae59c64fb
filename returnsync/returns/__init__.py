"""
Return records: models, import shaping, deduplication and lifecycle.
"""

from returnsync.returns.dedup import (
    barcode_key,
    composite_key,
    dedup_products,
    dedup_within_set,
    filter_against_completed,
    merge_catalog,
    tracking_key,
)
from returnsync.returns.importer import build_return_record, build_return_records
from returnsync.returns.lifecycle import (
    CompletionResult,
    complete_by_tracking,
    complete_return,
    receiving_summary,
)
from returnsync.returns.models import (
    AuthoritativeProduct,
    MatchMethod,
    ProductRecord,
    ReturnRecord,
    ReturnStatus,
)

__all__ = [
    # Models
    "AuthoritativeProduct",
    "MatchMethod",
    "ProductRecord",
    "ReturnRecord",
    "ReturnStatus",
    # Import
    "build_return_record",
    "build_return_records",
    # Dedup
    "barcode_key",
    "composite_key",
    "dedup_products",
    "dedup_within_set",
    "filter_against_completed",
    "merge_catalog",
    "tracking_key",
    # Lifecycle
    "CompletionResult",
    "complete_by_tracking",
    "complete_return",
    "receiving_summary",
]
