"""
returnsync-ingest: run one return upload through matching and dedup.

Reads JSON files (already column-mapped rows, catalog, completed returns,
optional current pending set and storefront catalog) and prints the new
pending set as JSON on stdout. A summary goes to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from dotenv import load_dotenv
from pydantic import ValidationError

from returnsync.config import CLI_JSON_INDENT
from returnsync.matching.policy import load_policy
from returnsync.observability.logging import get_logger
from returnsync.returns.models import AuthoritativeProduct, ProductRecord, ReturnRecord
from returnsync.returns.service import ReturnsService
from returnsync.utils.validators import InputShapeError

logger = get_logger(__name__)


def _read_json_list(path: Path | None) -> list[dict[str, Any]]:
    if path is None:
        return []
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise InputShapeError(f"{path} must contain a JSON array")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="returnsync-ingest",
        description="Match a return upload to the catalog and drop duplicates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ingest a new upload against the catalog and completed returns
  returnsync-ingest --rows upload.json --catalog products.json --completed completed.json

  # Merge into an existing pending set, with a storefront catalog
  returnsync-ingest --rows upload.json --catalog products.json \\
      --completed completed.json --pending pending.json --storefront listings.json
        """,
    )
    parser.add_argument("--rows", type=Path, required=True, help="Column-mapped return rows (JSON array)")
    parser.add_argument("--catalog", type=Path, required=True, help="Product catalog (JSON array)")
    parser.add_argument("--completed", type=Path, help="Completed returns (JSON array)")
    parser.add_argument("--pending", type=Path, help="Current pending returns (JSON array)")
    parser.add_argument("--storefront", type=Path, help="Storefront listings for two-catalog matching")
    parser.add_argument("--policy", type=Path, help="Matching policy YAML (default: config/matching_policy.yaml)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        policy = load_policy(args.policy)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        print(f"Invalid matching policy: {exc}", file=sys.stderr)
        return 2

    try:
        catalog = [ProductRecord.model_validate(p) for p in _read_json_list(args.catalog)]
        completed = [ReturnRecord.model_validate(r) for r in _read_json_list(args.completed)]
        pending = [ReturnRecord.model_validate(r) for r in _read_json_list(args.pending)]
        storefront = (
            [AuthoritativeProduct.model_validate(p) for p in _read_json_list(args.storefront)]
            if args.storefront
            else None
        )

        result = ReturnsService(policy).ingest(
            _read_json_list(args.rows),
            catalog,
            completed,
            pending=pending,
            authoritative=storefront,
        )
    except (InputShapeError, ValidationError) as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Could not read input: {exc}", file=sys.stderr)
        return 2

    payload = [r.model_dump(mode="json", by_alias=True) for r in result.pending]
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=CLI_JSON_INDENT)
    sys.stdout.write("\n")

    print(
        f"imported={result.imported} matched={result.matched} unmatched={result.unmatched} "
        f"merged_duplicates={result.merged_duplicates} dropped_completed={result.dropped_completed} "
        f"pending={len(result.pending)}",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
