"""In-memory ledger holding transactions, budgets, categories and settings.

The ledger is the only place the four collections are mutated.  It is
constructed once per session and handed to the services that need it.
After every successful mutation the new snapshot is written through to the
injected storage; a failing storage is logged and otherwise ignored.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Optional, Sequence, Tuple, TypeVar

from .models import AppData, Budget, Category, Settings, Transaction, find_category, new_id
from .storage import Storage

logger = logging.getLogger(__name__)

R = TypeVar('R', Transaction, Budget, Category)


def _replace_by_id(records: Tuple[R, ...], record: R) -> Optional[Tuple[R, ...]]:
    if not any(r.id == record.id for r in records):
        return None
    return tuple(record if r.id == record.id else r for r in records)


def _remove_by_id(records: Tuple[R, ...], record_id: str) -> Optional[Tuple[R, ...]]:
    remaining = tuple(r for r in records if r.id != record_id)
    if len(remaining) == len(records):
        return None
    return remaining


class Ledger:
    """Authoritative state of one tracker session."""

    def __init__(self, data: Optional[AppData] = None, storage: Optional[Storage] = None):
        self._data = data if data is not None else AppData.defaults()
        self._storage = storage

    # Read access ------------------------------------------------------------

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self._data.transactions

    @property
    def budgets(self) -> Tuple[Budget, ...]:
        return self._data.budgets

    @property
    def categories(self) -> Tuple[Category, ...]:
        return self._data.categories

    @property
    def settings(self) -> Settings:
        return self._data.settings

    def snapshot(self) -> AppData:
        return self._data

    def templates(self) -> List[Budget]:
        return [b for b in self._data.budgets if b.is_template]

    def instances(self) -> List[Budget]:
        return [b for b in self._data.budgets if not b.is_template]

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self._data.transactions if t.id == transaction_id), None)

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        return next((b for b in self._data.budgets if b.id == budget_id), None)

    def get_category(self, category_id: str) -> Optional[Category]:
        return find_category(self._data.categories, category_id)

    # Transactions -------------------------------------------------------------

    def add_transaction(self, **fields: Any) -> Transaction:
        transaction = Transaction(id=new_id(), **fields)
        self._commit(transactions=self._data.transactions + (transaction,))
        return transaction

    def update_transaction(self, transaction: Transaction) -> bool:
        updated = _replace_by_id(self._data.transactions, transaction)
        if updated is None:
            return False
        self._commit(transactions=updated)
        return True

    def delete_transaction(self, transaction_id: str) -> bool:
        remaining = _remove_by_id(self._data.transactions, transaction_id)
        if remaining is None:
            return False
        self._commit(transactions=remaining)
        return True

    # Budgets ------------------------------------------------------------------

    def add_budget(self, **fields: Any) -> Budget:
        budget = Budget(id=new_id(), **fields)
        if budget.amount <= 0:
            logger.warning("Budget %s created with non-positive amount %s", budget.label, budget.amount)
        self._commit(budgets=self._data.budgets + (budget,))
        return budget

    def insert_budgets(self, budgets: Sequence[Budget]) -> None:
        """Append budgets that already carry fresh ids (e.g. rolled templates)."""
        if not budgets:
            return
        self._commit(budgets=self._data.budgets + tuple(budgets))

    def update_budget(self, budget: Budget) -> bool:
        return self.update_budgets([budget])

    def update_budgets(self, budgets: Sequence[Budget]) -> bool:
        """Replace several budgets in one step.

        Either every budget is replaced and a single snapshot is saved, or
        (when any id is unknown) nothing changes.
        """
        current = self._data.budgets
        for budget in budgets:
            current = _replace_by_id(current, budget)
            if current is None:
                return False
        self._commit(budgets=current)
        return True

    def delete_budget(self, budget_id: str) -> bool:
        remaining = _remove_by_id(self._data.budgets, budget_id)
        if remaining is None:
            return False
        self._commit(budgets=remaining)
        return True

    # Categories ---------------------------------------------------------------

    def add_category(self, **fields: Any) -> Category:
        category = Category(id=new_id(), **fields)
        self._commit(categories=self._data.categories + (category,))
        return category

    def update_category(self, category: Category) -> bool:
        updated = _replace_by_id(self._data.categories, category)
        if updated is None:
            return False
        self._commit(categories=updated)
        return True

    def delete_category(self, category_id: str) -> bool:
        # Transactions and budgets keep the name; no cascade.
        remaining = _remove_by_id(self._data.categories, category_id)
        if remaining is None:
            return False
        self._commit(categories=remaining)
        return True

    # Whole state --------------------------------------------------------------

    def update_settings(self, settings: Settings) -> None:
        self._commit(settings=settings)

    def replace(self, data: AppData) -> None:
        """Swap in an imported snapshot.  The payload is assumed valid."""
        self._data = data
        self._persist()

    def reset(self) -> None:
        """Restore the seed categories and default settings."""
        self.replace(AppData.defaults())

    # Internal -----------------------------------------------------------------

    def _commit(self, **changes: Any) -> None:
        self._data = replace(self._data, **changes)
        self._persist()

    def _persist(self) -> None:
        if self._storage is None:
            return
        try:
            self._storage.save(self._data)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Persisting ledger snapshot failed: %s", exc)
