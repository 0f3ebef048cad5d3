"""Persistence providers for the ledger snapshot.

The ledger only knows the :class:`Storage` protocol: ``load`` returns the
last saved snapshot (or the seed defaults) and ``save`` is best-effort.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, List, Optional, Protocol, Tuple

from .config import DATA_FILE
from .models import AppData, Budget, Category, Settings, Transaction

logger = logging.getLogger(__name__)


class Storage(Protocol):
    """Anything that can load and save an :class:`AppData` snapshot."""

    def load(self) -> AppData:  # pragma: no cover - interface
        ...

    def save(self, data: AppData) -> None:  # pragma: no cover - interface
        ...


class JsonFileStorage:
    """Stores the snapshot as a single JSON document on disk."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else DATA_FILE

    def load(self) -> AppData:
        """Load the snapshot, falling back to the seed defaults.

        A missing file is a first run.  An unreadable file is moved aside
        to ``<name>.corrupt`` so the next save cannot overwrite it.  Records
        that fail to parse are skipped with a warning; the untouched file is
        then copied to ``<name>.corrupt`` before anything is saved over it.
        """
        if not self.path.exists():
            return AppData.defaults()
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Error loading data from %s: %s", self.path, exc)
            self._set_aside(move=True)
            return AppData.defaults()
        if not isinstance(data, dict):
            logger.error("Ignoring snapshot at %s: expected an object", self.path)
            self._set_aside(move=True)
            return AppData.defaults()

        skipped: List[str] = []
        snapshot = AppData(
            transactions=_load_records(data.get('transactions'), Transaction, 'transaction', skipped),
            budgets=_load_records(data.get('budgets'), Budget, 'budget', skipped),
            categories=_load_records(data.get('categories'), Category, 'category', skipped),
            settings=_load_settings(data.get('settings'), skipped),
        )
        if skipped:
            logger.warning("Skipped %d invalid entries in %s: %s", len(skipped), self.path, '; '.join(skipped))
            self._set_aside(move=False)
        return snapshot

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_name(self.path.name + '.corrupt')

    def _set_aside(self, move: bool) -> None:
        try:
            if move:
                self.path.replace(self.corrupt_path)
            else:
                shutil.copy2(self.path, self.corrupt_path)
        except OSError as exc:
            logger.error("Could not keep a copy of %s: %s", self.path, exc)
            return
        logger.warning("Original data kept at %s", self.corrupt_path)

    def save(self, data: AppData) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open('w', encoding='utf-8') as handle:
                json.dump(data.to_dict(), handle, indent=2)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Error saving data to %s: %s", self.path, exc)


class MemoryStorage:
    """Keeps the last saved snapshot in memory."""

    def __init__(self, initial: Optional[AppData] = None):
        self.saved: Optional[AppData] = initial
        self.save_count = 0

    def load(self) -> AppData:
        return self.saved if self.saved is not None else AppData.defaults()

    def save(self, data: AppData) -> None:
        self.saved = data
        self.save_count += 1


def _load_records(rows: Any, record_type: Any, label: str, skipped: List[str]) -> Tuple[Any, ...]:
    """Parse a stored collection, dropping the entries that do not parse."""
    if rows is None:
        return ()
    if not isinstance(rows, list):
        skipped.append(f"{label} collection is not a list")
        return ()
    records = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            skipped.append(f"{label} #{index} is not an object")
            continue
        try:
            records.append(record_type.from_dict(row))
        except (TypeError, ValueError, AttributeError) as exc:
            skipped.append(f"{label} #{index}: {exc}")
    return tuple(records)


def _load_settings(raw: Any, skipped: List[str]) -> Settings:
    if raw is not None and not isinstance(raw, dict):
        skipped.append("settings is not an object")
        raw = None
    try:
        return Settings.from_dict(raw)
    except (TypeError, ValueError) as exc:
        skipped.append(f"settings: {exc}")
        return Settings.from_dict(None)
