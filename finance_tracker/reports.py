"""Tabular reports over the ledger for dashboards and charts.

All functions return pandas objects or plain dicts and never mutate the
ledger.  Amounts are converted to floats at this boundary; exact Decimal
arithmetic stays in :mod:`finance_tracker.aggregation`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd
from dateutil.relativedelta import relativedelta

from .aggregation import progress_for_budgets, transactions_total_by_type
from .defaults import fallback_color
from .models import Budget, Category, Settings, Transaction, find_category_by_name
from .periods import current_period_bounds

TRANSACTION_COLUMNS = ['id', 'Date', 'Type', 'Category', 'Description', 'Amount', 'Signed Amount']
OTHER_LABEL = 'Other'


@dataclass
class TransactionFilter:
    """Criteria for listing transactions; every field is optional."""

    kind: Optional[str] = None
    search: str = ''
    categories: List[str] = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None

    def matches(self, transaction: Transaction) -> bool:
        if self.kind and transaction.type != self.kind:
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in transaction.description.lower() and needle not in transaction.category.lower():
                return False
        if self.categories and transaction.category not in self.categories:
            return False
        if self.start_date and transaction.date < self.start_date:
            return False
        if self.end_date and transaction.date > self.end_date:
            return False
        if self.min_amount is not None and transaction.amount < self.min_amount:
            return False
        if self.max_amount is not None and transaction.amount > self.max_amount:
            return False
        return True


def filter_transactions(
    transactions: Iterable[Transaction],
    criteria: Optional[TransactionFilter] = None,
) -> List[Transaction]:
    """Transactions matching ``criteria``, newest first."""
    criteria = criteria or TransactionFilter()
    matched = [t for t in transactions if criteria.matches(t)]
    return sorted(matched, key=lambda t: t.date, reverse=True)


def recent_transactions(transactions: Iterable[Transaction], kind: str, limit: int = 5) -> List[Transaction]:
    return filter_transactions(transactions, TransactionFilter(kind=kind))[:limit]


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """DataFrame view of transactions with a signed amount column."""
    rows = [
        {
            'id': t.id,
            'Date': pd.Timestamp(t.date),
            'Type': t.type,
            'Category': t.category,
            'Description': t.description,
            'Amount': float(t.amount),
        }
        for t in transactions
    ]
    if not rows:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)
    df = pd.DataFrame(rows)
    df['Signed Amount'] = np.where(df['Type'] == 'income', df['Amount'], -df['Amount'])
    return df[TRANSACTION_COLUMNS]


def monthly_overview(
    transactions: Iterable[Transaction],
    months: int = 6,
    today: Optional[date] = None,
) -> pd.DataFrame:
    """Income, expenses and balance per calendar month.

    The window runs from ``months`` months before ``today`` up to
    ``today`` inclusive, with one row per month even when it is empty.

    Returns:
        DataFrame with columns: Month, Income, Expenses, Balance
    """
    today = today or date.today()
    start = today - relativedelta(months=months)
    periods = pd.period_range(start=pd.Timestamp(start), end=pd.Timestamp(today), freq='M')

    df = transactions_frame(transactions)
    if not df.empty:
        df = df[(df['Date'] >= pd.Timestamp(start)) & (df['Date'] <= pd.Timestamp(today))].copy()
    if df.empty:
        income = pd.Series(0.0, index=periods)
        expenses = pd.Series(0.0, index=periods)
    else:
        df['Month'] = df['Date'].dt.to_period('M')
        totals = df.pivot_table(index='Month', columns='Type', values='Amount', aggfunc='sum', fill_value=0.0)
        totals = totals.reindex(periods, fill_value=0.0)
        income = totals['income'] if 'income' in totals.columns else pd.Series(0.0, index=periods)
        expenses = totals['expense'] if 'expense' in totals.columns else pd.Series(0.0, index=periods)

    overview = pd.DataFrame({
        'Month': [str(p) for p in periods],
        'Income': income.to_numpy(dtype=float),
        'Expenses': expenses.to_numpy(dtype=float),
    })
    overview['Balance'] = overview['Income'] - overview['Expenses']
    return overview


def expenses_by_category(
    transactions: Iterable[Transaction],
    categories: Sequence[Category],
    top: int = 6,
) -> pd.DataFrame:
    """Expense totals per category, largest first.

    Categories beyond the ``top`` largest are folded into a single
    ``Other`` row.  Names without a matching category get the neutral
    fallback color.

    Returns:
        DataFrame with columns: Category, Amount, Color
    """
    df = transactions_frame(transactions)
    df = df[df['Type'] == 'expense']
    if df.empty:
        return pd.DataFrame(columns=['Category', 'Amount', 'Color'])

    totals = df.groupby('Category')['Amount'].sum().sort_values(ascending=False, kind='stable')
    head = totals.head(top)
    other = float(totals.iloc[top:].sum())

    neutral = fallback_color()
    rows: List[Dict[str, Any]] = []
    for name, amount in head.items():
        category = find_category_by_name(categories, name)
        rows.append({
            'Category': name,
            'Amount': float(amount),
            'Color': category.color if category else neutral,
        })
    if other > 0:
        rows.append({'Category': OTHER_LABEL, 'Amount': other, 'Color': neutral})
    return pd.DataFrame(rows)


def period_summary(
    transactions: Iterable[Transaction],
    settings: Settings,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Income, expenses and balance for the dashboard's custom month."""
    start, end = current_period_bounds(settings.first_day_of_month, today)
    in_period = [t for t in transactions if start <= t.date < end]
    income = transactions_total_by_type(in_period, 'income')
    expenses = transactions_total_by_type(in_period, 'expense')
    return {
        'start': start,
        'end': end,
        'income': income,
        'expenses': expenses,
        'balance': income - expenses,
        'transactions': len(in_period),
    }


def budget_overview(budgets: Iterable[Budget], transactions: Sequence[Transaction]) -> pd.DataFrame:
    """One row per budget with its progress, most used first."""
    rows = [
        {
            'id': p.budget.id,
            'Budget': p.budget.label,
            'Amount': float(p.budget.amount),
            'Spent': float(p.spent),
            'Remaining': float(p.remaining),
            'Percentage': p.percentage,
            'Over Budget': p.is_over_budget,
        }
        for p in progress_for_budgets(budgets, transactions)
    ]
    columns = ['id', 'Budget', 'Amount', 'Spent', 'Remaining', 'Percentage', 'Over Budget']
    return pd.DataFrame(rows, columns=columns)
