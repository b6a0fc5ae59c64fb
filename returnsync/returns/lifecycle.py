"""Pending -> Completed transitions and the receiving sheet rows."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from returnsync.observability.logging import get_logger
from returnsync.returns.models import ReturnRecord, ReturnStatus
from returnsync.utils.validators import InputShapeError

logger = get_logger(__name__)


@dataclass
class CompletionResult:
    """New pending/completed lists after a completion action."""

    pending: list[ReturnRecord]
    completed: list[ReturnRecord]
    moved: list[ReturnRecord] = field(default_factory=list)


def complete_return(record: ReturnRecord, completed_at: datetime) -> ReturnRecord:
    """Completed copy of ``record``; completing twice keeps the first timestamp."""
    if record.status == ReturnStatus.COMPLETED:
        return record
    return record.model_copy(update={"status": ReturnStatus.COMPLETED, "completed_at": completed_at})


def complete_by_tracking(
    pending: Sequence[ReturnRecord],
    completed: Sequence[ReturnRecord],
    tracking_number: str,
    completed_at: datetime,
) -> CompletionResult:
    """
    Move every pending record with ``tracking_number`` to the completed list.

    No pending record with that tracking number is a normal outcome: nothing
    moves.

    Raises:
        InputShapeError: If tracking_number is empty
    """
    tracking_number = (tracking_number or "").strip()
    if not tracking_number:
        raise InputShapeError("tracking number is required to complete a return")

    still_pending: list[ReturnRecord] = []
    moved: list[ReturnRecord] = []
    for record in pending:
        if record.tracking_number == tracking_number:
            moved.append(complete_return(record, completed_at))
        else:
            still_pending.append(record)

    if not moved:
        logger.info("No pending return with tracking number %s", tracking_number)

    return CompletionResult(
        pending=still_pending,
        completed=[*completed, *moved],
        moved=moved,
    )


def receiving_summary(records: Sequence[ReturnRecord]) -> list[tuple[str, int]]:
    """(barcode, quantity) rows for the warehouse receiving sheet; unmatched rows are skipped."""
    return [(r.barcode, r.quantity) for r in records if r.barcode]
