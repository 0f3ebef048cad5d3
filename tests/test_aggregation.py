from datetime import date
from decimal import Decimal

from finance_tracker.aggregation import (
    budget_categories,
    budget_percentage,
    budget_progress,
    budget_remaining,
    budget_spent,
    budget_transactions,
    net_balance,
    progress_for_budgets,
    transactions_in_period,
    transactions_total_by_category,
    transactions_total_by_type,
)
from finance_tracker.ledger import Ledger
from finance_tracker.models import Budget, Transaction


def _txn(tid, amount, category, kind='expense', day=date(2024, 3, 5)):
    return Transaction(id=tid, amount=Decimal(amount), date=day, category=category,
                       description=f'{category} {tid}', type=kind)


def _budget(amount, categories, bid='b1', start=date(2024, 3, 1)):
    return Budget(id=bid, categories=categories, amount=Decimal(amount), start_date=start)


def _sample_transactions():
    return [
        _txn('t1', '40.25', 'Food'),
        _txn('t2', '19.75', 'Food', day=date(2024, 3, 9)),
        _txn('t3', '30.10', 'Transport'),
        _txn('t4', '500', 'Food', kind='income'),
        _txn('t5', '12', 'Shopping'),
    ]


def test_spent_counts_only_matching_expenses():
    budget = _budget('100', ('Food',))
    assert budget_spent(budget, _sample_transactions()) == Decimal('60.00')


def test_multi_category_budget_ignores_income():
    budget = _budget('200', ('Food', 'Transport'))
    # the income row in Food must not count toward spending
    assert budget_spent(budget, _sample_transactions()) == Decimal('90.10')


def test_spent_plus_remaining_equals_amount():
    txns = _sample_transactions()
    for amount in ('0.10', '60', '90.10', '1000.55'):
        budget = _budget(amount, ('Food', 'Transport'))
        assert budget_spent(budget, txns) == budget.amount - budget_remaining(budget, txns)


def test_percentage_is_clamped_but_remaining_is_not():
    budget = _budget('30', ('Food',))
    progress = budget_progress(budget, _sample_transactions())
    assert progress.percentage == 100.0
    assert progress.remaining == Decimal('-30.00')
    assert progress.is_over_budget
    assert not progress.is_finished


def test_percentage_partial_spend():
    budget = _budget('120', ('Food',))
    assert budget_percentage(budget, _sample_transactions()) == 50.0


def test_finished_budget_is_not_over_budget():
    progress = budget_progress(_budget('60', ('Food',)), _sample_transactions())
    assert progress.remaining == 0
    assert progress.is_finished
    assert not progress.is_over_budget
    assert progress.percentage == 100.0


def test_zero_amount_budget_does_not_divide_by_zero():
    budget = _budget('0', ('Shopping',))
    txns = [_txn('t1', '10', 'Shopping')]
    progress = budget_progress(budget, txns)
    assert progress.percentage == 0.0
    assert progress.remaining == Decimal('-10')
    assert progress.is_over_budget


def test_flags_are_mutually_exclusive():
    txns = _sample_transactions()
    for amount in ('10', '60', '500'):
        progress = budget_progress(_budget(amount, ('Food',)), txns)
        assert not (progress.is_over_budget and progress.is_finished)
        assert 0.0 <= progress.percentage <= 100.0


def test_deleting_category_does_not_change_spent():
    ledger = Ledger()
    food = next(c for c in ledger.categories if c.name == 'Food')
    ledger.add_transaction(amount='25', date=date(2024, 3, 2), category='Food', description='Lunch')
    budget = ledger.add_budget(categories=('Food',), amount='100', start_date=date(2024, 3, 1))

    before = budget_spent(budget, ledger.transactions)
    assert ledger.delete_category(food.id)
    assert budget_spent(budget, ledger.transactions) == before == Decimal('25')


def test_progress_for_budgets_sorted_by_usage():
    txns = _sample_transactions()
    budgets = [
        _budget('1000', ('Food',), bid='low'),
        _budget('20', ('Shopping',), bid='high'),
        _budget('60', ('Transport',), bid='mid'),
    ]
    ordered = [p.budget.id for p in progress_for_budgets(budgets, txns)]
    assert ordered == ['high', 'mid', 'low']


def test_budget_transactions_newest_first():
    budget = _budget('100', ('Food',))
    ids = [t.id for t in budget_transactions(budget, _sample_transactions())]
    assert ids == ['t2', 't1']


def test_transactions_in_period_uses_budget_window():
    budget = _budget('100', ('Food',), start=date(2024, 3, 15))
    txns = [
        _txn('a', '1', 'Food', day=date(2024, 3, 14)),
        _txn('b', '1', 'Food', day=date(2024, 3, 15)),
        _txn('c', '1', 'Food', day=date(2024, 4, 14)),
        _txn('d', '1', 'Food', day=date(2024, 4, 15)),
    ]
    assert [t.id for t in transactions_in_period(budget, txns)] == ['b', 'c']


def test_totals_and_net_balance():
    txns = _sample_transactions()
    assert transactions_total_by_type(txns, 'income') == Decimal('500')
    assert transactions_total_by_type(txns, 'expense') == Decimal('102.10')
    assert transactions_total_by_category(txns, 'Food') == Decimal('560.00')
    assert net_balance(txns) == Decimal('397.90')


def test_budget_categories_follow_legacy_single_category():
    legacy = Budget.from_dict({'id': 'b', 'category': 'Food', 'amount': 10, 'startDate': '2024-03-01'})
    assert budget_categories(legacy) == ('Food',)
    assert budget_spent(legacy, [_txn('t1', '4', 'Food')]) == Decimal('4')
