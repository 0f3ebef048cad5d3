"""Month handling and the roll of planned budgets into monthly budgets.

Two different notions of "month" live here and are intentionally kept
apart:

* the roller works on true calendar months (``first_day_of_month``,
  ``month_key``), independent of any user setting;
* the dashboard period (``current_period_bounds``) starts on the
  configurable ``Settings.first_day_of_month``.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from .ledger import Ledger
from .models import Budget, new_id

logger = logging.getLogger(__name__)


def first_day_of_month(day: date) -> date:
    return day.replace(day=1)


def month_key(day: date) -> str:
    """Key a date by calendar month, e.g. ``'2024-03'``."""
    return day.strftime('%Y-%m')


def recent_month_keys(count: int = 12, today: Optional[date] = None) -> List[str]:
    """The last ``count`` month keys, current month first."""
    start = first_day_of_month(today or date.today())
    return [month_key(start - relativedelta(months=offset)) for offset in range(count)]


def planned_budgets(budgets: Iterable[Budget]) -> List[Budget]:
    return [b for b in budgets if b.is_template]


def budgets_for_month(budgets: Iterable[Budget], key: str) -> List[Budget]:
    """Instance budgets whose period starts in the month ``key``."""
    return [b for b in budgets if not b.is_template and month_key(b.start_date) == key]


def has_budgets_for_month(budgets: Iterable[Budget], key: str) -> bool:
    return any(not b.is_template and month_key(b.start_date) == key for b in budgets)


def instantiate_templates(templates: Sequence[Budget], start_date: date) -> List[Budget]:
    """Copy each template into a live budget anchored at ``start_date``."""
    return [
        replace(template, id=new_id(), is_template=False, start_date=start_date)
        for template in templates
    ]


def roll_planned_budgets(ledger: Ledger, today: Optional[date] = None) -> List[Budget]:
    """Instantiate the planned budgets for the current calendar month.

    Runs once per session start.  When any instance budget already starts
    in this month nothing is created, so repeated calls are harmless.

    Returns:
        The budgets that were added (empty when the month was already rolled).
    """
    month_start = first_day_of_month(today or date.today())
    key = month_key(month_start)
    if has_budgets_for_month(ledger.budgets, key):
        logger.debug("Budgets for %s already exist; skipping roll", key)
        return []

    created = instantiate_templates(ledger.templates(), month_start)
    ledger.insert_budgets(created)
    if created:
        logger.info("Rolled %d planned budget(s) into %s", len(created), key)
    return created


def reset_to_plan(ledger: Ledger, today: Optional[date] = None) -> List[Budget]:
    """Discard every live budget and recreate one per template.

    Unlike the automatic roll, the new budgets are anchored at ``today``
    rather than at the first of the month, and any edits made to live
    budgets since the last roll are lost.
    """
    anchor = today or date.today()
    removed = 0
    for budget in ledger.instances():
        if ledger.delete_budget(budget.id):
            removed += 1

    created = instantiate_templates(ledger.templates(), anchor)
    ledger.insert_budgets(created)
    logger.info("Reset to plan: removed %d budget(s), created %d", removed, len(created))
    return created


def current_period_bounds(first_day: int = 1, today: Optional[date] = None) -> Tuple[date, date]:
    """Half-open ``[start, end)`` window of the user's custom month.

    The period starts on ``first_day`` of the current month, or of the
    previous month when today falls before that day.  Days beyond a
    month's length are clamped to its last day.
    """
    today = today or date.today()
    start_month = first_day_of_month(today)
    if today.day < _clamp_day(start_month, first_day):
        start_month -= relativedelta(months=1)
    start = start_month.replace(day=_clamp_day(start_month, first_day))
    next_month = start_month + relativedelta(months=1)
    end = next_month.replace(day=_clamp_day(next_month, first_day))
    return start, end


def _clamp_day(month_start: date, day: int) -> int:
    return min(day, calendar.monthrange(month_start.year, month_start.month)[1])
