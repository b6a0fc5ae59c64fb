"""Centralized configuration for returnsync.

Typed constants with environment-variable overrides. Defaults are safe so the
library and CLI work without any env configuration.
"""

from __future__ import annotations

import os
from pathlib import Path

# --- Paths ---
PROJECT_ROOT: Path = Path(__file__).parent.parent
MATCHING_POLICY_PATH: Path = Path(
    os.getenv("RETURNSYNC_POLICY_PATH", str(PROJECT_ROOT / "config" / "matching_policy.yaml"))
)

# --- Logging ---
LOG_LEVEL: str = os.getenv("RETURNSYNC_LOG_LEVEL", "INFO")

# --- Import ---
# Vendor product code placeholder used by marketplace exports for "no code".
VENDOR_CODE_ABSENT: str = "-"
IMPORT_MAX_ROWS: int = int(os.getenv("RETURNSYNC_IMPORT_MAX_ROWS", "20000"))

# --- CLI ---
CLI_JSON_INDENT: int = int(os.getenv("RETURNSYNC_JSON_INDENT", "2"))
