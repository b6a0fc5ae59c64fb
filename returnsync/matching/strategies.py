"""
Matcher stages as an ordered list of strategy objects.

Each stage looks at one return record and the catalog and either proposes a
MatchCandidate or declines. ProductMatcher runs them in order and the first
proposal wins. Ties inside a stage always go to the catalog entry seen first,
so catalog order is part of the contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from returnsync.matching.policy import DEFAULT_POLICY, MatchPolicy
from returnsync.matching.similarity import keyword_overlap, similarity
from returnsync.observability.logging import get_logger
from returnsync.returns.models import MatchMethod, ProductRecord, ReturnRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class MatchCandidate:
    """A stage's proposal: which catalog entry, how sure, and why."""

    product: ProductRecord
    confidence: float
    method: MatchMethod
    detail: str = ""


class MatchStrategy(ABC):
    """One matcher stage."""

    name: str = "stage"
    method: MatchMethod

    def __init__(self, policy: MatchPolicy = DEFAULT_POLICY):
        self.policy = policy

    @abstractmethod
    def find(self, record: ReturnRecord, catalog: Sequence[ProductRecord]) -> MatchCandidate | None:
        """Propose a catalog entry for ``record`` or return None."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def refine_by_option(
    record: ReturnRecord,
    winner: ProductRecord,
    catalog: Sequence[ProductRecord],
    policy: MatchPolicy = DEFAULT_POLICY,
) -> ProductRecord:
    """
    Among entries of the same product as ``winner``, prefer the closest option.

    "Same product" means an equal (non-empty) purchase name or product name.
    A sibling replaces the current pick only when its option similarity is
    strictly higher and at least ``option_refine_min``. Nothing is refined
    unless both the return and the winner carry an option.
    """
    if not record.option_name or not winner.option_name:
        return winner

    best = winner
    best_sim = similarity(record.option_name, winner.option_name, policy=policy)
    for product in catalog:
        same_purchase = bool(winner.purchase_name) and product.purchase_name == winner.purchase_name
        same_name = bool(winner.product_name) and product.product_name == winner.product_name
        if not (same_purchase or same_name) or not product.option_name:
            continue
        option_sim = similarity(record.option_name, product.option_name, policy=policy)
        if option_sim > best_sim and option_sim >= policy.option_refine_min:
            best, best_sim = product, option_sim

    if best is not winner:
        logger.debug(
            "Option refinement: %r -> %r (option similarity %.2f)",
            winner.option_name,
            best.option_name,
            best_sim,
        )
    return best


class BarcodeExactStrategy(MatchStrategy):
    """Stage 1: record barcode equals a catalog barcode."""

    name = "barcode_exact"
    method = MatchMethod.BARCODE_EXACT

    def find(self, record: ReturnRecord, catalog: Sequence[ProductRecord]) -> MatchCandidate | None:
        if not record.barcode:
            return None
        for product in catalog:
            if product.barcode and product.barcode == record.barcode:
                return MatchCandidate(product, 1.0, self.method)
        return None


class VendorCodeExactStrategy(MatchStrategy):
    """Stage 2: vendor product code equals a catalog vendor code."""

    name = "vendor_code_exact"
    method = MatchMethod.VENDOR_CODE_EXACT

    def find(self, record: ReturnRecord, catalog: Sequence[ProductRecord]) -> MatchCandidate | None:
        if not record.has_vendor_code:
            return None
        for product in catalog:
            if product.has_vendor_code and product.vendor_product_code == record.vendor_product_code:
                return MatchCandidate(product, 1.0, self.method, detail=record.vendor_product_code or "")
        return None


class ProductNameExactStrategy(MatchStrategy):
    """Product name equals a catalog product name (case-folded, trimmed)."""

    name = "product_name_exact"
    method = MatchMethod.PRODUCT_NAME_EXACT

    def find(self, record: ReturnRecord, catalog: Sequence[ProductRecord]) -> MatchCandidate | None:
        wanted = record.product_name.strip().casefold()
        if not wanted:
            return None
        for product in catalog:
            if product.product_name and product.product_name.strip().casefold() == wanted:
                chosen = refine_by_option(record, product, catalog, self.policy)
                return MatchCandidate(chosen, 1.0, self.method)
        return None


class NameSimilarityStrategy(MatchStrategy):
    """Stage 3: product name vs catalog purchase name, gated by keyword overlap."""

    name = "name_similarity"
    method = MatchMethod.NAME_SIMILARITY

    def find(self, record: ReturnRecord, catalog: Sequence[ProductRecord]) -> MatchCandidate | None:
        best: ProductRecord | None = None
        best_ratio = 0.0
        for product in catalog:
            if not product.purchase_name:
                continue
            ratio = similarity(record.product_name, product.purchase_name, policy=self.policy)
            if ratio < self.policy.name_min_ratio or ratio <= best_ratio:
                continue
            if keyword_overlap(record.product_name, product.purchase_name, policy=self.policy):
                best, best_ratio = product, ratio

        if best is None:
            return None
        chosen = refine_by_option(record, best, catalog, self.policy)
        return MatchCandidate(chosen, best_ratio, self.method, detail=f"ratio={best_ratio:.3f}")


class CodeToNameStrategy(MatchStrategy):
    """Stage 4: vendor code vs catalog purchase name (sellers often put names in the code column)."""

    name = "code_to_name"
    method = MatchMethod.CODE_TO_NAME_SIMILARITY

    def find(self, record: ReturnRecord, catalog: Sequence[ProductRecord]) -> MatchCandidate | None:
        if not record.has_vendor_code:
            return None
        code = record.vendor_product_code or ""
        best: ProductRecord | None = None
        best_ratio = 0.0
        for product in catalog:
            ratio = similarity(code, product.purchase_name, policy=self.policy)
            if ratio >= self.policy.code_to_name_min_ratio and ratio > best_ratio:
                best, best_ratio = product, ratio

        if best is None:
            return None
        chosen = refine_by_option(record, best, catalog, self.policy)
        return MatchCandidate(chosen, best_ratio, self.method, detail=f"ratio={best_ratio:.3f}")


class WeightedSimilarityStrategy(MatchStrategy):
    """
    Stage 5: 0.7 x product-name similarity + 0.3 x option similarity.

    Walks the descending threshold ladder and stops at the first threshold
    where any keyword-overlapping candidate qualifies. Scores are computed
    once per candidate and reused across the ladder.
    """

    name = "weighted_similarity"
    method = MatchMethod.WEIGHTED_SIMILARITY

    def score(self, record: ReturnRecord, product: ProductRecord) -> float:
        return self.policy.product_weight * similarity(
            record.product_name, product.product_name, policy=self.policy
        ) + self.policy.option_weight * similarity(
            record.option_name, product.option_name, policy=self.policy
        )

    def find(self, record: ReturnRecord, catalog: Sequence[ProductRecord]) -> MatchCandidate | None:
        floor = self.policy.weighted_ladder[-1] if self.policy.weighted_ladder else 0.0
        scored: list[tuple[ProductRecord, float]] = []
        for product in catalog:
            combined = self.score(record, product)
            if combined < floor:
                continue
            if keyword_overlap(record.product_name, product.product_name, policy=self.policy):
                scored.append((product, combined))

        for threshold in self.policy.weighted_ladder:
            best: ProductRecord | None = None
            best_score = 0.0
            for product, combined in scored:
                if combined >= threshold and combined > best_score:
                    best, best_score = product, combined
            if best is not None:
                return MatchCandidate(
                    best,
                    min(best_score, 1.0),
                    self.method,
                    detail=f"score={best_score:.3f} threshold={threshold}",
                )
        return None


def default_strategies(policy: MatchPolicy = DEFAULT_POLICY) -> list[MatchStrategy]:
    """Single-catalog stages in matching order."""
    return [
        BarcodeExactStrategy(policy),
        VendorCodeExactStrategy(policy),
        ProductNameExactStrategy(policy),
        NameSimilarityStrategy(policy),
        CodeToNameStrategy(policy),
        WeightedSimilarityStrategy(policy),
    ]
