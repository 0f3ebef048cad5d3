"""Budget progress and transaction totals.

Spending always counts expense transactions only, matched by category
*name* against the budget's category set.  Deleting a category therefore
never changes what a budget has spent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from .models import Budget, Transaction

ZERO = Decimal('0')


@dataclass(frozen=True)
class BudgetProgress:
    """Computed spending state of one budget."""

    budget: Budget
    spent: Decimal
    remaining: Decimal
    percentage: float

    @property
    def is_over_budget(self) -> bool:
        return self.remaining < 0

    @property
    def is_finished(self) -> bool:
        return self.remaining == 0


def budget_categories(budget: Budget) -> Tuple[str, ...]:
    return budget.categories


def budget_transactions(budget: Budget, transactions: Iterable[Transaction]) -> List[Transaction]:
    """Expense transactions counted against ``budget``, newest first."""
    names = set(budget_categories(budget))
    matched = [t for t in transactions if t.is_expense and t.category in names]
    return sorted(matched, key=lambda t: t.date, reverse=True)


def budget_spent(budget: Budget, transactions: Iterable[Transaction]) -> Decimal:
    names = set(budget_categories(budget))
    return sum((t.amount for t in transactions if t.is_expense and t.category in names), ZERO)


def budget_remaining(budget: Budget, transactions: Iterable[Transaction]) -> Decimal:
    """Signed allowance left; negative means over budget."""
    return budget.amount - budget_spent(budget, transactions)


def spent_percentage(spent: Decimal, amount: Decimal) -> float:
    """Share of ``amount`` used, clamped to 0..100 for progress display.

    A zero (or negative) amount yields 0 instead of dividing by zero.
    """
    if amount <= 0:
        return 0.0
    ratio = spent / amount * 100
    return float(min(max(ratio, ZERO), Decimal(100)))


def budget_percentage(budget: Budget, transactions: Iterable[Transaction]) -> float:
    return spent_percentage(budget_spent(budget, transactions), budget.amount)


def budget_progress(budget: Budget, transactions: Iterable[Transaction]) -> BudgetProgress:
    spent = budget_spent(budget, transactions)
    return BudgetProgress(
        budget=budget,
        spent=spent,
        remaining=budget.amount - spent,
        percentage=spent_percentage(spent, budget.amount),
    )


def progress_for_budgets(
    budgets: Iterable[Budget],
    transactions: Sequence[Transaction],
) -> List[BudgetProgress]:
    """Progress for every budget, most used first."""
    progress = [budget_progress(budget, transactions) for budget in budgets]
    return sorted(progress, key=lambda p: p.percentage, reverse=True)


def period_end(budget: Budget) -> date:
    """Exclusive end of the period anchored at ``budget.start_date``."""
    step = relativedelta(years=1) if budget.period == 'yearly' else relativedelta(months=1)
    return budget.start_date + step


def transactions_in_period(budget: Budget, transactions: Iterable[Transaction]) -> List[Transaction]:
    """Transactions dated inside the budget's own period window.

    Aggregation itself never filters by date; callers that want per-period
    figures pass the result of this helper instead of the full list.
    """
    end = period_end(budget)
    return [t for t in transactions if budget.start_date <= t.date < end]


def transactions_total_by_type(transactions: Iterable[Transaction], kind: str) -> Decimal:
    return sum((t.amount for t in transactions if t.type == kind), ZERO)


def transactions_total_by_category(transactions: Iterable[Transaction], category: str) -> Decimal:
    return sum((t.amount for t in transactions if t.category == category), ZERO)


def net_balance(transactions: Sequence[Transaction]) -> Decimal:
    """Income minus expenses."""
    return transactions_total_by_type(transactions, 'income') - transactions_total_by_type(transactions, 'expense')
