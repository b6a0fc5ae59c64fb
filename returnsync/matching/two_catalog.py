"""
Two-catalog matching: storefront listing names + fulfillment barcodes.

Some sellers keep product names in the storefront (authoritative) catalog
and barcodes in a separate fulfillment catalog keyed by the storefront
product code. The stage:

1. finds the storefront listing for the return (exact name, else
   similarity > 0.7),
2. narrows the fulfillment catalog to that listing's product code,
3. scores each candidate's option (exact 100, containment 80, same color 60,
   else similarity x 50) and takes the top score if it reaches 30, else the
   first candidate,
4. lets any candidate whose option equals the return's option verbatim
   override the pick.
"""

from __future__ import annotations

from collections.abc import Sequence

from returnsync.matching.normalizer import extract_color
from returnsync.matching.policy import DEFAULT_POLICY, MatchPolicy
from returnsync.matching.similarity import similarity
from returnsync.matching.strategies import MatchCandidate, MatchStrategy
from returnsync.observability.logging import get_logger
from returnsync.returns.models import (
    AuthoritativeProduct,
    MatchMethod,
    ProductRecord,
    ReturnRecord,
)

logger = get_logger(__name__)


def find_authoritative(
    product_name: str,
    authoritative: Sequence[AuthoritativeProduct],
    policy: MatchPolicy = DEFAULT_POLICY,
) -> tuple[AuthoritativeProduct, float] | None:
    """Best storefront listing for a product name: exact first, else best similarity above the floor."""
    wanted = product_name.strip().casefold()
    if not wanted:
        return None

    for listing in authoritative:
        if listing.product_name.strip().casefold() == wanted:
            return listing, 1.0

    best: AuthoritativeProduct | None = None
    best_ratio = 0.0
    for listing in authoritative:
        ratio = similarity(product_name, listing.product_name, policy=policy)
        if ratio > policy.authoritative_name_min and ratio > best_ratio:
            best, best_ratio = listing, ratio
    if best is None:
        return None
    return best, best_ratio


def score_option(return_option: str, product_option: str, policy: MatchPolicy = DEFAULT_POLICY) -> int:
    """Option agreement score on the 0-100 ladder."""
    wanted = return_option.strip().casefold()
    candidate = product_option.strip().casefold()
    if not candidate:
        return 0
    if candidate == wanted:
        return policy.option_score_exact
    if candidate in wanted or wanted in candidate:
        return policy.option_score_contains

    wanted_color = extract_color(wanted)
    if wanted_color and wanted_color == extract_color(candidate):
        return policy.option_score_color
    return round(similarity(wanted, candidate, policy=policy) * policy.option_similarity_scale)


def pick_by_option(
    return_option: str,
    candidates: Sequence[ProductRecord],
    policy: MatchPolicy = DEFAULT_POLICY,
) -> ProductRecord:
    """Top-scoring candidate (first seen on ties) if it reaches the floor, else the first candidate."""
    if not return_option or not return_option.strip():
        return candidates[0]

    best = candidates[0]
    best_score = -1
    for product in candidates:
        score = score_option(return_option, product.option_name, policy)
        if score > best_score:
            best, best_score = product, score

    if best_score >= policy.option_score_accept:
        return best
    return candidates[0]


class TwoCatalogStrategy(MatchStrategy):
    """Stage 6: storefront name -> product code -> fulfillment barcode."""

    name = "two_catalog"
    method = MatchMethod.TWO_CATALOG

    def __init__(
        self, authoritative: Sequence[AuthoritativeProduct], policy: MatchPolicy = DEFAULT_POLICY
    ):
        super().__init__(policy)
        self.authoritative = tuple(authoritative)

    def find(self, record: ReturnRecord, catalog: Sequence[ProductRecord]) -> MatchCandidate | None:
        found = find_authoritative(record.product_name, self.authoritative, self.policy)
        if found is None:
            return None
        listing, name_ratio = found
        code = listing.product_code

        filtered = [
            product
            for product in catalog
            if code and code in (product.custom_product_code, product.vendor_product_code)
        ]

        if not filtered:
            if not listing.barcode:
                logger.debug("Storefront listing %s has no fulfillment entries", code)
                return None
            # The listing carries its own barcode; use it directly.
            product = ProductRecord(
                barcode=listing.barcode,
                product_name=listing.product_name,
                purchase_name=listing.product_name,
                option_name=listing.option_name,
                custom_product_code=listing.product_code,
            )
            return MatchCandidate(product, name_ratio, self.method, detail=f"listing={code}")

        chosen = pick_by_option(record.option_name, filtered, self.policy)

        # A verbatim option match overrides the scored pick.
        wanted = record.option_name.strip()
        if wanted:
            for product in filtered:
                if product.option_name == wanted:
                    chosen = product
                    break

        return MatchCandidate(chosen, name_ratio, self.method, detail=f"listing={code}")
