"""Domain records for the finance tracker.

Every record is an immutable dataclass; edits always produce a new record
that replaces the old one by id.  Transactions and budgets refer to
categories by *name*, not by id, and nothing enforces that the name still
exists.  Dict conversion uses the camelCase keys of the JSON snapshot
(``startDate``, ``isTemplate``, ``firstDayOfMonth``) so older backups keep
loading.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .defaults import default_categories, default_settings

TRANSACTION_TYPES = ('expense', 'income')
CATEGORY_TYPES = ('expense', 'income', 'both')
BUDGET_PERIODS = ('monthly', 'yearly')
THEMES = ('light', 'dark', 'system')

AmountLike = Union[Decimal, int, float, str]
DateLike = Union[date, datetime, str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def new_id() -> str:
    """Return a fresh unique record id."""
    return str(uuid.uuid4())


def parse_amount(value: Any) -> Decimal:
    """Coerce ``value`` to a finite Decimal.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal('0.1')`` rather
    than its binary expansion.
    """
    if isinstance(value, Decimal):
        amount = value
    elif value is None or isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def parse_date(value: Any) -> date:
    """Coerce an ISO string, datetime or date to a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            # ISO timestamps are cut at the date part
            return date.fromisoformat(text[:10])
        except ValueError as exc:
            raise ValueError(f"Invalid date: {value!r}") from exc
    raise ValueError(f"Invalid date: {value!r}")


def amount_to_json(amount: Decimal) -> Union[int, float, str]:
    """Render an amount as a JSON number.

    Amounts a float cannot hold exactly (roughly more than 15 significant
    digits) are written as strings, which :func:`parse_amount` reads back.
    """
    if amount == amount.to_integral_value():
        return int(amount)
    as_float = float(amount)
    if Decimal(str(as_float)) == amount:
        return as_float
    return str(amount)


def normalize_budget_categories(categories: Any, category: Any = None) -> Tuple[str, ...]:
    """Resolve the legacy ``category`` / ``categories`` pair into one tuple.

    A non-empty ``categories`` list wins; otherwise the single ``category``
    name is used.  Non-string entries are dropped.
    """
    if isinstance(categories, str):
        categories = [categories]
    if isinstance(categories, (list, tuple)) and categories:
        names = tuple(name for name in categories if isinstance(name, str))
        if names:
            return names
    if isinstance(category, str) and category:
        return (category,)
    raise ValueError("Budget must reference at least one category")


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: Decimal
    date: date
    category: str
    description: str = ''
    type: str = 'expense'
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, 'amount', parse_amount(self.amount))
        object.__setattr__(self, 'date', parse_date(self.date))
        if self.amount < 0:
            raise ValueError(f"Transaction amount must be non-negative, got {self.amount}")
        if self.type not in TRANSACTION_TYPES:
            raise ValueError(f"Unknown transaction type: {self.type!r}")

    @property
    def is_expense(self) -> bool:
        return self.type == 'expense'

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Transaction':
        return cls(
            id=str(data.get('id') or new_id()),
            amount=data.get('amount'),
            date=data.get('date'),
            category=str(data.get('category') or ''),
            description=str(data.get('description') or ''),
            type=data.get('type', 'expense'),
            notes=_optional_text(data.get('notes')),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'amount': amount_to_json(self.amount),
            'date': self.date.isoformat(),
            'category': self.category,
            'description': self.description,
            'type': self.type,
        }
        if self.notes is not None:
            payload['notes'] = self.notes
        return payload


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: str = 'expense'
    color: str = '#6B7280'
    icon: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type not in CATEGORY_TYPES:
            raise ValueError(f"Unknown category type: {self.type!r}")

    def applies_to(self, kind: str) -> bool:
        """True when the category can be picked for ``kind`` transactions."""
        return self.type == kind or self.type == 'both'

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Category':
        return cls(
            id=str(data.get('id') or new_id()),
            name=str(data.get('name') or ''),
            type=data.get('type', 'expense'),
            color=str(data.get('color') or '#6B7280'),
            icon=_optional_text(data.get('icon')),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'color': self.color,
        }
        if self.icon is not None:
            payload['icon'] = self.icon
        return payload


@dataclass(frozen=True)
class Budget:
    """An allowance for one or more expense categories.

    ``is_template`` marks a planned (recurring) definition.  Only instance
    budgets are spendable, and only their ``start_date`` anchors a period.
    """

    id: str
    categories: Tuple[str, ...]
    amount: Decimal
    start_date: date
    period: str = 'monthly'
    name: Optional[str] = None
    notes: Optional[str] = None
    is_template: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, 'categories', normalize_budget_categories(self.categories))
        object.__setattr__(self, 'amount', parse_amount(self.amount))
        object.__setattr__(self, 'start_date', parse_date(self.start_date))
        if self.period not in BUDGET_PERIODS:
            raise ValueError(f"Unknown budget period: {self.period!r}")

    @property
    def category(self) -> str:
        """Primary category name, used where a single label is shown."""
        return self.categories[0]

    @property
    def label(self) -> str:
        return self.name or ', '.join(self.categories)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Budget':
        start = data.get('startDate', data.get('start_date'))
        is_template = data.get('isTemplate', data.get('is_template', False))
        return cls(
            id=str(data.get('id') or new_id()),
            categories=normalize_budget_categories(data.get('categories'), data.get('category')),
            amount=data.get('amount'),
            start_date=start,
            period=data.get('period') or 'monthly',
            name=_optional_text(data.get('name')) or None,
            notes=_optional_text(data.get('notes')),
            is_template=bool(is_template),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'category': self.category,
            'categories': list(self.categories),
            'amount': amount_to_json(self.amount),
            'period': self.period,
            'startDate': self.start_date.isoformat(),
            'isTemplate': self.is_template,
        }
        if self.name is not None:
            payload['name'] = self.name
        if self.notes is not None:
            payload['notes'] = self.notes
        return payload


@dataclass(frozen=True)
class Settings:
    currency: str = 'USD'
    first_day_of_month: int = 1
    theme: str = 'system'

    def __post_init__(self) -> None:
        day = int(self.first_day_of_month)
        if not 1 <= day <= 31:
            raise ValueError(f"firstDayOfMonth must be within 1..31, got {day}")
        object.__setattr__(self, 'first_day_of_month', day)
        if self.theme not in THEMES:
            raise ValueError(f"Unknown theme: {self.theme!r}")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]], fallback: Optional[Mapping[str, Any]] = None) -> 'Settings':
        base: Dict[str, Any] = dict(fallback or default_settings())
        base.update({k: v for k, v in (data or {}).items() if v is not None})
        return cls(
            currency=str(base.get('currency')),
            first_day_of_month=base.get('firstDayOfMonth', base.get('first_day_of_month', 1)),
            theme=base.get('theme', 'system'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'currency': self.currency,
            'firstDayOfMonth': self.first_day_of_month,
            'theme': self.theme,
        }


@dataclass(frozen=True)
class AppData:
    """Full snapshot of the tracker state."""

    transactions: Tuple[Transaction, ...] = ()
    budgets: Tuple[Budget, ...] = ()
    categories: Tuple[Category, ...] = ()
    settings: Settings = field(default_factory=Settings)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'transactions', tuple(self.transactions))
        object.__setattr__(self, 'budgets', tuple(self.budgets))
        object.__setattr__(self, 'categories', tuple(self.categories))

    @classmethod
    def defaults(cls) -> 'AppData':
        """Starter snapshot used on first run and by reset."""
        return cls(
            categories=tuple(Category.from_dict(row) for row in default_categories()),
            settings=Settings.from_dict(default_settings()),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'AppData':
        return cls(
            transactions=tuple(Transaction.from_dict(row) for row in data.get('transactions') or []),
            budgets=tuple(Budget.from_dict(row) for row in data.get('budgets') or []),
            categories=tuple(Category.from_dict(row) for row in data.get('categories') or []),
            settings=Settings.from_dict(data.get('settings')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'transactions': [t.to_dict() for t in self.transactions],
            'budgets': [b.to_dict() for b in self.budgets],
            'categories': [c.to_dict() for c in self.categories],
            'settings': self.settings.to_dict(),
        }


# ---------------------------------------------------------------------------
# Category lookups
# ---------------------------------------------------------------------------


def find_category(categories: Iterable[Category], category_id: str) -> Optional[Category]:
    return next((c for c in categories if c.id == category_id), None)


def find_category_by_name(categories: Iterable[Category], name: str) -> Optional[Category]:
    """Return the first category called ``name``; duplicates are not detected."""
    return next((c for c in categories if c.name == name), None)


def categories_for_type(categories: Sequence[Category], kind: str) -> List[Category]:
    """Categories usable for ``kind`` transactions, sorted by name."""
    return sorted((c for c in categories if c.applies_to(kind)), key=lambda c: c.name)
