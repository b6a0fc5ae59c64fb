"""
Input validation utilities for column-mapped import rows.

Rows reach the engine already mapped to canonical field names; this module
only checks that they have the shape the engine needs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError


class InputShapeError(ValueError):
    """Raised when a raw record is missing a required field or has a bad value."""

    def __init__(self, message: str, *, row_index: int | None = None, fields: tuple[str, ...] = ()):
        self.row_index = row_index
        self.fields = fields
        if row_index is not None:
            message = f"row {row_index}: {message}"
        super().__init__(message)


def ensure_mapping(raw: Any, row_index: int | None = None) -> Mapping[str, Any]:
    """
    Check that a raw row is a mapping.

    Raises:
        InputShapeError: If ``raw`` is not a mapping
    """
    if not isinstance(raw, Mapping):
        raise InputShapeError(
            f"expected a mapping of column values, got {type(raw).__name__}",
            row_index=row_index,
        )
    return raw


def from_pydantic_error(exc: ValidationError, row_index: int | None = None) -> InputShapeError:
    """Translate a pydantic ValidationError into an InputShapeError."""
    fields = tuple(".".join(str(part) for part in err["loc"]) for err in exc.errors())
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return InputShapeError(f"invalid record ({details})", row_index=row_index, fields=fields)


def clean_text(value: Any) -> str:
    """Coerce a cell value to a stripped string; ``None`` becomes ``""``."""
    if value is None:
        return ""
    return str(value).strip()
