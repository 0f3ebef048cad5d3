"""Covering a budget overage with allowance from another budget.

The full overage of the recipient is moved from the donor's amount to the
recipient's amount.  The total allocation is unchanged and no transaction
is touched.  A transfer the donor cannot cover is rejected, never applied
partially.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from .aggregation import ZERO, BudgetProgress, budget_progress
from .ledger import Ledger
from .models import Budget, Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceResult:
    accepted: bool
    transfer_amount: Decimal
    donor: Optional[Budget] = None
    recipient: Optional[Budget] = None
    reason: str = ''


def donor_candidates(
    recipient: Budget,
    budgets: Iterable[Budget],
    transactions: Sequence[Transaction],
) -> List[BudgetProgress]:
    """Live budgets with allowance left that could cover ``recipient``."""
    candidates = []
    for budget in budgets:
        if budget.id == recipient.id or budget.is_template:
            continue
        progress = budget_progress(budget, transactions)
        if progress.remaining > 0:
            candidates.append(progress)
    return candidates


def balance_budgets(
    ledger: Ledger,
    donor_id: str,
    recipient_id: str,
    transactions: Optional[Sequence[Transaction]] = None,
) -> BalanceResult:
    """Move the recipient's overage from the donor's amount to its own.

    Args:
        ledger: Ledger holding both budgets.
        donor_id: Budget giving up allowance.
        recipient_id: Over-spent budget being covered.
        transactions: Transactions of the viewing period; defaults to all
            ledger transactions.

    Returns:
        A :class:`BalanceResult`.  When ``accepted`` is false nothing was
        changed and ``reason`` says why.
    """
    txns = ledger.transactions if transactions is None else transactions
    donor = ledger.get_budget(donor_id)
    recipient = ledger.get_budget(recipient_id)

    if donor is None or recipient is None:
        return _reject(ZERO, donor, recipient, 'budget not found')
    if donor.id == recipient.id:
        return _reject(ZERO, donor, recipient, 'donor and recipient are the same budget')

    recipient_state = budget_progress(recipient, txns)
    if not recipient_state.is_over_budget:
        return _reject(ZERO, donor, recipient, 'recipient is not over budget')

    transfer = abs(recipient_state.remaining)
    if budget_progress(donor, txns).remaining <= 0:
        return _reject(transfer, donor, recipient, 'donor has no allowance left')
    if donor.amount - transfer < 0:
        return _reject(transfer, donor, recipient, 'donor amount cannot cover the overage')

    new_donor = replace(donor, amount=donor.amount - transfer)
    new_recipient = replace(recipient, amount=recipient.amount + transfer)
    if not ledger.update_budgets([new_donor, new_recipient]):
        return _reject(transfer, donor, recipient, 'budget not found')

    logger.info("Moved %s from %s to %s", transfer, donor.label, recipient.label)
    return BalanceResult(
        accepted=True,
        transfer_amount=transfer,
        donor=new_donor,
        recipient=new_recipient,
    )


def _reject(
    transfer: Decimal,
    donor: Optional[Budget],
    recipient: Optional[Budget],
    reason: str,
) -> BalanceResult:
    logger.info("Balance transfer rejected: %s", reason)
    return BalanceResult(
        accepted=False,
        transfer_amount=transfer,
        donor=donor,
        recipient=recipient,
        reason=reason,
    )
