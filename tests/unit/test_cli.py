"""Tests for the returnsync-ingest command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from returnsync.cli import build_parser, main


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def inputs(tmp_path: Path):
    rows = _write(
        tmp_path / "rows.json",
        [
            {"orderNumber": "A1", "productName": "Blue Shirt", "quantity": 1, "returnReason": "파손"},
            {"orderNumber": "A2", "productName": "Wool Coat", "quantity": 1},
        ],
    )
    catalog = _write(
        tmp_path / "catalog.json",
        [{"barcode": "8800000000017", "productName": "Blue Shirt", "purchaseName": "블루 셔츠"}],
    )
    completed = _write(
        tmp_path / "completed.json",
        [{"orderNumber": "A2", "productName": "Wool Coat", "quantity": 1, "status": "COMPLETED"}],
    )
    return rows, catalog, completed


def test_ingest_prints_pending_json(inputs, capsys):
    rows, catalog, completed = inputs

    exit_code = main(["--rows", str(rows), "--catalog", str(catalog), "--completed", str(completed)])

    assert exit_code == 0
    captured = capsys.readouterr()
    pending = json.loads(captured.out)
    assert len(pending) == 1
    assert pending[0]["orderNumber"] == "A1"
    assert pending[0]["barcode"] == "8800000000017"
    assert pending[0]["matchMethod"] == "product name exact"
    assert pending[0]["returnReasonNormalized"] == "파손 및 불량"
    assert "dropped_completed=1" in captured.err


def test_rows_must_be_a_list(inputs, tmp_path, capsys):
    _, catalog, _ = inputs
    rows = _write(tmp_path / "bad.json", {"orderNumber": "A1"})

    assert main(["--rows", str(rows), "--catalog", str(catalog)]) == 2
    assert "must contain a JSON array" in capsys.readouterr().err


def test_missing_file(inputs, tmp_path, capsys):
    rows, _, _ = inputs

    assert main(["--rows", str(rows), "--catalog", str(tmp_path / "missing.json")]) == 2
    assert "Could not read input" in capsys.readouterr().err


def test_invalid_row(inputs, tmp_path, capsys):
    _, catalog, _ = inputs
    rows = _write(tmp_path / "rows.json", [{"orderNumber": "A1", "productName": "P", "quantity": 0}])

    assert main(["--rows", str(rows), "--catalog", str(catalog)]) == 2
    assert "row 0" in capsys.readouterr().err


def test_rows_and_catalog_are_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--rows", "rows.json"])


@pytest.mark.parametrize(
    "policy_text",
    ["similarity: [unclosed\n", "- 0.9\n- 0.8\n", "weighted:\n  ladder: [0.5, 0.9]\n"],
)
def test_bad_policy_file(inputs, tmp_path, capsys, policy_text):
    rows, catalog, _ = inputs
    policy = tmp_path / "policy.yaml"
    policy.write_text(policy_text, encoding="utf-8")

    assert main(["--rows", str(rows), "--catalog", str(catalog), "--policy", str(policy)]) == 2
    assert "Invalid matching policy" in capsys.readouterr().err
