"""Session bootstrap: load the snapshot, build the ledger, roll budgets."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from .ledger import Ledger
from .periods import roll_planned_budgets
from .storage import JsonFileStorage, Storage

logger = logging.getLogger(__name__)


def open_session(storage: Optional[Storage] = None, today: Optional[date] = None) -> Ledger:
    """Create the ledger for one application session.

    The planned-budget roll happens here and only here, so a session kept
    open across a month boundary rolls on its next start.
    """
    storage = storage if storage is not None else JsonFileStorage()
    ledger = Ledger(storage.load(), storage=storage)
    created = roll_planned_budgets(ledger, today=today)
    logger.debug(
        "Session opened with %d transactions, %d budgets (%d rolled)",
        len(ledger.transactions), len(ledger.budgets), len(created),
    )
    return ledger
