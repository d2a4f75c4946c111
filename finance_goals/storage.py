"""JSON snapshot persistence for the dashboard.

The engine itself never touches storage; this module is the small file
based collaborator the dashboard uses to keep one owner's transactions,
goals and recurrence rules between runs.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List

from .config import SNAPSHOT_PATH
from .models import DueCheck, Goal, Recurrence, Transaction

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    transactions: List[Transaction] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)
    recurrences: List[Recurrence] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'transactions': [t.to_dict() for t in self.transactions],
            'goals': [g.to_dict() for g in self.goals],
            'recurrences': [r.to_dict() for r in self.recurrences],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Snapshot':
        return cls(
            transactions=[Transaction.from_dict(t) for t in data.get('transactions') or []],
            goals=[Goal.from_dict(g) for g in data.get('goals') or []],
            recurrences=[Recurrence.from_dict(r) for r in data.get('recurrences') or []],
        )


def load_snapshot(path: Path | None = None) -> Snapshot:
    """Read the snapshot file; a missing or unreadable file yields an empty snapshot.

    Records with malformed dates or amounts raise instead of being skipped.
    """
    target = path or SNAPSHOT_PATH
    if not target.exists():
        return Snapshot()
    try:
        with target.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("could not read snapshot %s: %s", target, exc)
        return Snapshot()
    if not isinstance(data, dict):
        logger.warning("snapshot %s is not a JSON object", target)
        return Snapshot()
    return Snapshot.from_dict(data)


def save_snapshot(snapshot: Snapshot, path: Path | None = None) -> None:
    target = path or SNAPSHOT_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open('w', encoding='utf-8') as handle:
        json.dump(snapshot.to_dict(), handle, indent=2, sort_keys=True)


def apply_due_check(snapshot: Snapshot, due: DueCheck) -> Snapshot:
    """Return a snapshot with the due transactions stored and rules advanced.

    Transactions whose id is already present are skipped, so applying the
    same check twice does not duplicate an occurrence.
    """
    known_ids = {t.id for t in snapshot.transactions}
    new_transactions = [t for t in due.transactions if t.id not in known_ids]
    recurrences = [
        replace(r, next_payment_date=due.updated_next_dates[r.id])
        if r.id in due.updated_next_dates else r
        for r in snapshot.recurrences
    ]
    if new_transactions:
        logger.info("materialized %d recurring transactions", len(new_transactions))
    return Snapshot(
        transactions=snapshot.transactions + new_transactions,
        goals=list(snapshot.goals),
        recurrences=recurrences,
    )
