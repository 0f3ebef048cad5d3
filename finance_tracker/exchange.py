"""Snapshot export and import.

Two payload shapes are accepted: the native JSON snapshot and a
spreadsheet-derived shape (one list of row dicts per sheet, with human
column headers).  Validation happens here; :meth:`Ledger.replace` assumes
it receives a well-formed :class:`AppData`.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from .defaults import default_categories, spreadsheet_default_settings
from .ledger import Ledger
from .models import AppData, Budget, Category, Settings, Transaction, new_id

logger = logging.getLogger(__name__)


class InvalidImportPayload(ValueError):
    """Raised when an import payload cannot be turned into a snapshot."""


# Spreadsheet headers, keyed by their normalised form
TRANSACTION_HEADERS = {
    'id': 'id',
    'type': 'type',
    'amount': 'amount',
    'date': 'date',
    'category': 'category',
    'description': 'description',
    'notes': 'notes',
}
BUDGET_HEADERS = {
    'id': 'id',
    'name': 'name',
    'category': 'category',
    'categories': 'categories',
    'amount': 'amount',
    'period': 'period',
    'startdate': 'startDate',
    'notes': 'notes',
    'planned': 'isTemplate',
    'istemplate': 'isTemplate',
    'template': 'isTemplate',
}
CATEGORY_HEADERS = {
    'id': 'id',
    'name': 'name',
    'type': 'type',
    'color': 'color',
    'icon': 'icon',
}
SETTINGS_HEADERS = {
    'currency': 'currency',
    'firstdayofmonth': 'firstDayOfMonth',
    'theme': 'theme',
}
TRUE_VALUES = {'true', 'yes', 'y', '1', 'x'}


def export_snapshot(data: AppData) -> str:
    """Serialize a snapshot to the native JSON backup format."""
    return json.dumps(data.to_dict(), indent=2)


def import_snapshot(text: str) -> AppData:
    """Parse a native JSON backup.

    Raises:
        InvalidImportPayload: If the text is not JSON or not snapshot-shaped.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidImportPayload('Invalid file format') from exc
    if not isinstance(payload, dict):
        raise InvalidImportPayload('Snapshot must be a JSON object')
    for key in ('transactions', 'budgets', 'categories'):
        if key in payload and not isinstance(payload[key], list):
            raise InvalidImportPayload(f"'{key}' must be a list")
    if 'settings' in payload and not isinstance(payload['settings'], dict):
        raise InvalidImportPayload("'settings' must be an object")
    try:
        return AppData.from_dict(payload)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidImportPayload(str(exc)) from exc


def snapshot_from_spreadsheet(
    sheets: Mapping[str, Iterable[Mapping[str, Any]]],
    today: Optional[date] = None,
) -> AppData:
    """Build a snapshot from spreadsheet rows.

    Args:
        sheets: Mapping of sheet name (``Transactions``, ``Budgets``,
            ``Categories``, ``Settings``; case-insensitive) to row dicts.
        today: Start date used for budget rows that carry none.

    Raises:
        InvalidImportPayload: If a row cannot be converted.
    """
    by_name = {_normalise_header(name): rows for name, rows in sheets.items()}
    today = today or date.today()

    try:
        transactions = [
            Transaction.from_dict(_transaction_row(row))
            for row in _rows(by_name.get('transactions'), TRANSACTION_HEADERS)
        ]
        budgets = [
            Budget.from_dict(_budget_row(row, today))
            for row in _rows(by_name.get('budgets'), BUDGET_HEADERS)
        ]
        category_rows = list(_rows(by_name.get('categories'), CATEGORY_HEADERS))
        categories = [Category.from_dict(row) for row in category_rows or default_categories()]
        settings_rows = list(_rows(by_name.get('settings'), SETTINGS_HEADERS))
        settings = Settings.from_dict(
            settings_rows[0] if settings_rows else None,
            fallback=spreadsheet_default_settings(),
        )
    except (TypeError, ValueError) as exc:
        raise InvalidImportPayload(str(exc)) from exc

    logger.info(
        "Spreadsheet import: %d transactions, %d budgets, %d categories",
        len(transactions), len(budgets), len(categories),
    )
    return AppData(
        transactions=tuple(transactions),
        budgets=tuple(budgets),
        categories=tuple(categories),
        settings=settings,
    )


def apply_import(ledger: Ledger, data: AppData) -> None:
    """Replace the whole ledger state with an imported snapshot."""
    ledger.replace(data)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalise_header(name: Any) -> str:
    """Normalise a header for comparison (lowercase alphanumerics only)."""
    return ''.join(ch for ch in str(name).lower() if ch.isalnum())


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return False
    return bool(pd.isna(value))


def _rows(rows: Optional[Iterable[Mapping[str, Any]]], headers: Dict[str, str]) -> Iterable[Dict[str, Any]]:
    """Rename headers to snapshot keys and drop empty cells and rows."""
    for raw in rows or []:
        if not isinstance(raw, Mapping):
            raise InvalidImportPayload(f"Expected a row mapping, got {type(raw).__name__}")
        row: Dict[str, Any] = {}
        for header, value in raw.items():
            if _is_blank(value):
                continue
            key = headers.get(_normalise_header(header), header)
            row[key] = value
        if row:
            yield row


def _transaction_row(row: Dict[str, Any]) -> Dict[str, Any]:
    row.setdefault('id', new_id())
    row['type'] = str(row.get('type', 'expense')).strip().lower()
    return row


def _budget_row(row: Dict[str, Any], today: date) -> Dict[str, Any]:
    row.setdefault('id', new_id())
    row.setdefault('startDate', today)
    row['period'] = str(row.get('period', 'monthly')).strip().lower()
    categories = row.get('categories')
    if isinstance(categories, str):
        row['categories'] = _split_names(categories)
    flag = row.get('isTemplate', False)
    if isinstance(flag, str):
        row['isTemplate'] = flag.strip().lower() in TRUE_VALUES
    return row


def _split_names(text: str) -> List[str]:
    return [part.strip() for part in text.split(',') if part.strip()]
