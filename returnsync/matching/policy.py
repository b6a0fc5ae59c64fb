"""
Matching thresholds.

The defaults below are the contract; config/matching_policy.yaml may restate
them for operators but a missing or partial file always falls back to these
values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from returnsync.config import MATCHING_POLICY_PATH
from returnsync.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MatchPolicy:
    """Numeric thresholds used by the similarity scorer and the matcher stages."""

    length_gap_ratio: float = 0.3
    keyword_overlap_min: float = 0.3
    keyword_min_token_len: int = 2

    name_min_ratio: float = 0.6
    option_refine_min: float = 0.5

    code_to_name_min_ratio: float = 0.4

    weighted_ladder: tuple[float, ...] = (0.9, 0.8, 0.7, 0.6, 0.5)
    product_weight: float = 0.7
    option_weight: float = 0.3

    authoritative_name_min: float = 0.7
    option_score_accept: int = 30
    option_score_exact: int = 100
    option_score_contains: int = 80
    option_score_color: int = 60
    option_similarity_scale: int = 50

    def __post_init__(self) -> None:
        ladder = tuple(self.weighted_ladder)
        if list(ladder) != sorted(ladder, reverse=True):
            raise ValueError("weighted_ladder must be in descending order")
        object.__setattr__(self, "weighted_ladder", ladder)


# YAML section/key -> MatchPolicy attribute
_YAML_KEYS: dict[tuple[str, ...], str] = {
    ("similarity", "length_gap_ratio"): "length_gap_ratio",
    ("similarity", "keyword_overlap_min"): "keyword_overlap_min",
    ("similarity", "keyword_min_token_len"): "keyword_min_token_len",
    ("name_similarity", "min_ratio"): "name_min_ratio",
    ("name_similarity", "option_refine_min"): "option_refine_min",
    ("code_to_name", "min_ratio"): "code_to_name_min_ratio",
    ("weighted", "ladder"): "weighted_ladder",
    ("weighted", "product_weight"): "product_weight",
    ("weighted", "option_weight"): "option_weight",
    ("two_catalog", "authoritative_name_min"): "authoritative_name_min",
    ("two_catalog", "option_score_accept"): "option_score_accept",
    ("two_catalog", "option_scores", "exact"): "option_score_exact",
    ("two_catalog", "option_scores", "contains"): "option_score_contains",
    ("two_catalog", "option_scores", "color"): "option_score_color",
    ("two_catalog", "option_scores", "similarity_scale"): "option_similarity_scale",
}


def _dig(config: dict[str, Any], path: tuple[str, ...]) -> Any:
    node: Any = config
    for part in path:
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def policy_from_dict(config: dict[str, Any]) -> MatchPolicy:
    """Build a MatchPolicy from a parsed YAML document, keeping defaults for gaps."""
    overrides: dict[str, Any] = {}
    for path, attr in _YAML_KEYS.items():
        value = _dig(config, path)
        if value is None:
            continue
        if attr == "weighted_ladder":
            value = tuple(float(v) for v in value)
        overrides[attr] = value

    unknown = set(config) - {path[0] for path in _YAML_KEYS}
    if unknown:
        logger.warning("Ignoring unknown matching policy sections: %s", sorted(unknown))
    return replace(MatchPolicy(), **overrides)


def load_policy(path: Path | None = None) -> MatchPolicy:
    """
    Load matching thresholds from YAML.

    Side Effects:
        - Reads the policy YAML file from filesystem

    Returns:
        MatchPolicy; hardcoded defaults when the file is missing or empty
    """
    config_path = path or MATCHING_POLICY_PATH
    if not config_path.exists():
        logger.warning("Matching policy not found at %s, using defaults", config_path)
        return MatchPolicy()

    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(f"Matching policy at {config_path} must be a mapping")

    logger.debug("Loaded matching policy from %s", config_path)
    return policy_from_dict(config)


DEFAULT_POLICY = MatchPolicy()
