"""Top-level package for the finance goals engine.

The engine measures progress toward savings goals from a ledger of
income and expense transactions.  The primary modules are:

* ``dates`` - strict calendar-date parsing and arithmetic
* ``amortization`` - spreading recurring amounts across goal periods
* ``ledger`` - selecting and summarising transactions
* ``goals`` - evaluating goal progress and closing periods
* ``recurrence`` - projecting and materializing recurring transactions
* ``visualization`` - Plotly figures for the dashboard
* ``dashboard`` - a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run finance_goals/dashboard.py
```

The dashboard is not imported here so the engine can be used without
Streamlit being loaded.
"""

from . import amortization  # noqa: F401  # re-exported for convenience
from . import dates  # noqa: F401
from . import goals  # noqa: F401
from . import ledger  # noqa: F401
from . import recurrence  # noqa: F401
from .amortization import amortize
from .dates import days_between_inclusive, parse_date
from .goals import close_period, evaluate
from .ledger import select_in_window
from .recurrence import check_due, materialize, next_occurrence

__all__ = [
    "amortization",
    "dates",
    "goals",
    "ledger",
    "recurrence",
    "amortize",
    "check_due",
    "close_period",
    "days_between_inclusive",
    "evaluate",
    "materialize",
    "next_occurrence",
    "parse_date",
    "select_in_window",
]
