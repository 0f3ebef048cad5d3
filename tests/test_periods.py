from dataclasses import replace
from datetime import date
from decimal import Decimal

from finance_tracker.ledger import Ledger
from finance_tracker.models import AppData
from finance_tracker.periods import (
    budgets_for_month,
    current_period_bounds,
    first_day_of_month,
    has_budgets_for_month,
    instantiate_templates,
    month_key,
    recent_month_keys,
    reset_to_plan,
    roll_planned_budgets,
)
from finance_tracker.storage import MemoryStorage


def _ledger_with_templates():
    ledger = Ledger(AppData.defaults(), storage=MemoryStorage())
    ledger.add_budget(categories=('Food',), amount='300', start_date=date(2024, 1, 10),
                      is_template=True, notes='groceries')
    ledger.add_budget(categories=('Transport', 'Utilities'), amount='150',
                      start_date=date(2024, 1, 10), is_template=True, name='Bills')
    return ledger


def test_month_helpers():
    assert month_key(date(2024, 3, 31)) == '2024-03'
    assert first_day_of_month(date(2024, 3, 31)) == date(2024, 3, 1)
    assert recent_month_keys(3, today=date(2024, 1, 15)) == ['2024-01', '2023-12', '2023-11']


def test_instantiate_templates_copies_fields():
    ledger = _ledger_with_templates()
    templates = ledger.templates()
    created = instantiate_templates(templates, date(2024, 6, 1))

    for template, instance in zip(templates, created):
        assert instance.id != template.id
        assert not instance.is_template
        assert instance.start_date == date(2024, 6, 1)
        assert instance.categories == template.categories
        assert instance.amount == template.amount
        assert instance.name == template.name
        assert instance.notes == template.notes


def test_roll_creates_one_instance_per_template_at_month_start():
    ledger = _ledger_with_templates()
    created = roll_planned_budgets(ledger, today=date(2024, 6, 17))

    assert len(created) == 2
    assert all(b.start_date == date(2024, 6, 1) for b in created)
    assert has_budgets_for_month(ledger.budgets, '2024-06')
    assert len(budgets_for_month(ledger.budgets, '2024-06')) == 2


def test_roll_is_idempotent_within_a_month():
    ledger = _ledger_with_templates()
    roll_planned_budgets(ledger, today=date(2024, 6, 2))
    after_first = set(b.id for b in ledger.instances())

    assert roll_planned_budgets(ledger, today=date(2024, 6, 28)) == []
    assert set(b.id for b in ledger.instances()) == after_first


def test_roll_skips_month_that_already_has_a_manual_budget():
    ledger = _ledger_with_templates()
    ledger.add_budget(categories=('Food',), amount='50', start_date=date(2024, 6, 20))

    assert roll_planned_budgets(ledger, today=date(2024, 6, 25)) == []
    assert len(ledger.instances()) == 1


def test_roll_runs_again_in_next_month():
    ledger = _ledger_with_templates()
    roll_planned_budgets(ledger, today=date(2024, 6, 2))
    created = roll_planned_budgets(ledger, today=date(2024, 7, 1))

    assert len(created) == 2
    assert len(ledger.instances()) == 4


def test_templates_do_not_count_as_rolled():
    ledger = _ledger_with_templates()
    # templates were created with a start date in January
    assert not has_budgets_for_month(ledger.budgets, '2024-01')
    assert len(roll_planned_budgets(ledger, today=date(2024, 1, 20))) == 2


def test_reset_to_plan_replaces_all_instances():
    ledger = _ledger_with_templates()
    roll_planned_budgets(ledger, today=date(2024, 5, 1))
    edited = ledger.instances()[0]
    ledger.update_budget(replace(edited, amount=Decimal('999')))
    ledger.add_budget(categories=('Shopping',), amount='80', start_date=date(2024, 5, 3))

    created = reset_to_plan(ledger, today=date(2024, 5, 14))

    instances = ledger.instances()
    assert sorted(b.id for b in instances) == sorted(b.id for b in created)
    assert len(instances) == len(ledger.templates()) == 2
    assert all(b.start_date == date(2024, 5, 14) for b in instances)
    assert Decimal('999') not in [b.amount for b in instances]
    assert len(ledger.templates()) == 2


def test_reset_to_plan_without_templates_clears_instances():
    ledger = Ledger(AppData.defaults())
    ledger.add_budget(categories=('Food',), amount='50', start_date=date(2024, 5, 3))
    assert reset_to_plan(ledger, today=date(2024, 5, 4)) == []
    assert ledger.instances() == []


def test_current_period_bounds_default_is_calendar_month():
    assert current_period_bounds(1, today=date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 3, 1))


def test_current_period_bounds_before_start_day_uses_previous_month():
    assert current_period_bounds(25, today=date(2024, 1, 10)) == (date(2023, 12, 25), date(2024, 1, 25))
    assert current_period_bounds(25, today=date(2024, 1, 25)) == (date(2024, 1, 25), date(2024, 2, 25))


def test_current_period_bounds_clamps_short_months():
    assert current_period_bounds(31, today=date(2024, 2, 29)) == (date(2024, 2, 29), date(2024, 3, 31))
    assert current_period_bounds(31, today=date(2024, 3, 15)) == (date(2024, 2, 29), date(2024, 3, 31))
