#!/usr/bin/env python3
"""Print the live progress of every goal in the snapshot."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finance_goals import config
from finance_goals.goals import progress_frame
from finance_goals.logging_config import setup_logging
from finance_goals.recurrence import check_due
from finance_goals.storage import apply_due_check, load_snapshot, save_snapshot

REPORT_COLUMNS = [
    'name', 'period', 'metric_value', 'effective_target',
    'progress_percent', 'deficit', 'effective_days', 'on_track',
]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--snapshot", type=Path, default=config.SNAPSHOT_PATH, help="Snapshot JSON file")
    parser.add_argument("--as-of", default=None, help="Reference date (YYYY-MM-DD), defaults to today")
    parser.add_argument("--apply-due", action="store_true", help="Materialize due recurrences and save")
    parser.add_argument("--catch-up", action="store_true", help="With --apply-due, fill every missed occurrence")
    args = parser.parse_args(argv)

    setup_logging(config.LOG_LEVEL)
    snapshot = load_snapshot(args.snapshot)

    if args.apply_due:
        due = check_due(snapshot.recurrences, args.as_of, catch_up=args.catch_up)
        if not due.is_empty:
            snapshot = apply_due_check(snapshot, due)
            save_snapshot(snapshot, args.snapshot)
            print(f"Materialized {len(due.transactions)} recurring transactions.")

    if not snapshot.goals:
        print("No goals defined.")
        return 0

    report = progress_frame(snapshot.goals, snapshot.transactions, args.as_of)
    print(report[REPORT_COLUMNS].round(2).to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
