"""
Product matcher: enrich return records with catalog identity.

Entry point: ProductMatcher.match(). A record that already has a barcode is
returned as-is (the same object); otherwise the stages from
strategies.default_strategies() run in order, followed by the two-catalog
stage when a storefront catalog is supplied. The first stage to propose a
candidate wins. No stage accepting is a normal outcome: the record comes back
unchanged, without confidence.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from returnsync.matching.policy import DEFAULT_POLICY, MatchPolicy
from returnsync.matching.strategies import MatchCandidate, MatchStrategy, default_strategies
from returnsync.matching.two_catalog import TwoCatalogStrategy
from returnsync.observability.logging import get_logger
from returnsync.observability.telemetry import counter
from returnsync.returns.models import (
    AuthoritativeProduct,
    MatchMethod,
    ProductRecord,
    ReturnRecord,
)

logger = get_logger(__name__)


def apply_candidate(record: ReturnRecord, candidate: MatchCandidate) -> ReturnRecord:
    """Copy catalog identity from a candidate onto a new record. The raw option is kept."""
    product = candidate.product
    update = {
        "barcode": product.barcode or None,
        "product_name": record.product_name or product.product_name,
        "purchase_name": product.display_name or None,
        "matched_product_name": product.product_name or None,
        "matched_option_name": product.option_name or None,
        "match_confidence": max(0.0, min(candidate.confidence, 1.0)),
        "match_method": candidate.method,
    }
    if product.custom_product_code:
        update["custom_product_code"] = product.custom_product_code
    return record.model_copy(update=update)


def apply_manual_match(record: ReturnRecord, product: ProductRecord) -> ReturnRecord:
    """
    Operator rematch: link ``record`` to ``product`` explicitly.

    Unlike automatic matching this replaces an existing barcode.
    """
    logger.info(
        "Manual rematch for order %s: %s -> %s",
        record.order_number,
        record.barcode or "-",
        product.barcode or "-",
    )
    return apply_candidate(record, MatchCandidate(product, 1.0, MatchMethod.MANUAL))


def search_catalog(query: str, catalog: Iterable[ProductRecord]) -> list[ProductRecord]:
    """Case-insensitive substring search over the catalog's identifying fields, in catalog order."""
    needle = (query or "").strip().casefold()
    if not needle:
        return list(catalog)
    return [
        product
        for product in catalog
        if any(
            needle in value.casefold()
            for value in (
                product.barcode,
                product.product_name,
                product.purchase_name,
                product.option_name,
                product.vendor_product_code,
            )
            if value
        )
    ]


class ProductMatcher:
    """
    Runs the ordered matcher stages against a catalog snapshot.

    The catalog is copied into a tuple at construction; its order decides
    ties and is never changed here.
    """

    def __init__(
        self,
        catalog: Iterable[ProductRecord],
        *,
        authoritative: Iterable[AuthoritativeProduct] | None = None,
        policy: MatchPolicy = DEFAULT_POLICY,
        strategies: Sequence[MatchStrategy] | None = None,
    ):
        if catalog is None:
            raise TypeError("catalog must be an iterable of ProductRecord")

        self.catalog: tuple[ProductRecord, ...] = tuple(catalog)
        self.policy = policy

        stages = list(strategies) if strategies is not None else default_strategies(policy)
        if authoritative is not None:
            stages.append(TwoCatalogStrategy(tuple(authoritative), policy))
        self.strategies: tuple[MatchStrategy, ...] = tuple(stages)

        logger.debug(
            "ProductMatcher initialized: %d catalog entries, stages=%s",
            len(self.catalog),
            [s.name for s in self.strategies],
        )

    def find(self, record: ReturnRecord) -> MatchCandidate | None:
        """First stage proposal for ``record``, or None."""
        for strategy in self.strategies:
            candidate = strategy.find(record, self.catalog)
            if candidate is not None:
                logger.debug(
                    "Matched order %s at stage %s (%s)",
                    record.order_number,
                    strategy.name,
                    candidate.detail or f"confidence={candidate.confidence:.3f}",
                )
                return candidate
        return None

    def match(self, record: ReturnRecord) -> ReturnRecord:
        """Enriched copy of ``record``; the record itself when already matched or unmatched."""
        if record.is_matched:
            return record

        candidate = self.find(record)
        if candidate is None:
            counter("match.unmatched")
            logger.debug("No catalog match for %r (order %s)", record.product_name, record.order_number)
            return record

        counter(f"match.{candidate.method.name.lower()}")
        return apply_candidate(record, candidate)

    def match_all(self, records: Iterable[ReturnRecord]) -> list[ReturnRecord]:
        if records is None:
            raise TypeError("records must be an iterable of ReturnRecord")

        records = list(records)
        matched = [self.match(record) for record in records]
        newly = sum(1 for before, after in zip(records, matched) if before is not after)
        logger.info(
            "Matched %d of %d record(s) against %d catalog entries",
            newly,
            len(records),
            len(self.catalog),
        )
        return matched
