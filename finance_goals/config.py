"""Configuration management for the finance goals engine.

This module centralizes all configuration values including paths,
display defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in finance_goals/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINANCE_GOALS_DATA_DIR", _PROJECT_ROOT / "data"))

# Snapshot of transactions, goals and recurrences used by the dashboard
SNAPSHOT_PATH = Path(
    os.getenv("FINANCE_GOALS_SNAPSHOT_PATH", DATA_DIR / "snapshot.json")
).resolve()

LOG_LEVEL = os.getenv("FINANCE_GOALS_LOG_LEVEL", "INFO").strip().upper()

# strftime pattern for human-facing dates; never used for comparisons
DISPLAY_DATE_FORMAT = os.getenv("FINANCE_GOALS_DISPLAY_DATE_FORMAT", "%b %d, %Y")

# Colour given to transactions materialized from a recurrence rule
RECURRING_TRANSACTION_COLOR = "#8b5cf6"

PRESET_COLORS = [
    '#10b981', '#3b82f6', '#8b5cf6', '#f59e0b', '#ef4444',
    '#ec4899', '#06b6d4', '#84cc16', '#f97316', '#6366f1',
]

DEFAULT_CATEGORIES = {
    'income': ['Salary', 'Freelance', 'Investments', 'Other'],
    'expense': ['Food', 'Transport', 'Entertainment', 'Services', 'Health', 'Education', 'Other'],
}


def ensure_data_directories() -> None:
    """Create the data directory if it doesn't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
