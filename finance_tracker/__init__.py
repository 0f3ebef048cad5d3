"""Top‑level package for the Finance Tracker.

The primary modules are:

* ``models`` – transaction, category, budget and settings records
* ``ledger`` – the in-memory state with write-through persistence
* ``aggregation`` – budget spent/remaining/percentage calculations
* ``periods`` – month handling and the roll of planned budgets
* ``balancing`` – covering a budget overage from another budget
* ``reports`` – pandas summaries for dashboards and charts
* ``exchange`` – JSON and spreadsheet snapshot import/export

A session is normally started with :func:`open_session`, which loads the
last snapshot, builds a :class:`Ledger` and rolls the planned budgets.
"""

from .ledger import Ledger
from .models import AppData, Budget, Category, Settings, Transaction
from .session import open_session
from .storage import JsonFileStorage, MemoryStorage

__all__ = [
    "AppData",
    "Budget",
    "Category",
    "JsonFileStorage",
    "Ledger",
    "MemoryStorage",
    "Settings",
    "Transaction",
    "open_session",
]
