"""In-memory catalog store.

The store holds one immutable snapshot (records in source order plus an id index). `load()`
builds a complete new snapshot before swapping the reference, so concurrent readers observe
either the old catalog or the new one, never a mix. A failed load leaves the old snapshot in place.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from os import PathLike
from typing import IO

import pandas as pd

from src.catalog.coerce import record_from_row
from src.catalog.schema import PropertyRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMN = "listing_id"

CatalogSource = str | PathLike[str] | IO[str]


class LoadError(RuntimeError):
    """Raised when a catalog source cannot be read or parsed."""


@dataclass(frozen=True)
class _Snapshot:
    records: tuple[PropertyRecord, ...] = ()
    by_id: dict[str, PropertyRecord] = field(default_factory=dict)


def _build_snapshot(records: Iterable[PropertyRecord]) -> _Snapshot:
    ordered = tuple(records)
    by_id: dict[str, PropertyRecord] = {}
    for record in ordered:
        # First occurrence wins for duplicated ids.
        by_id.setdefault(record.listing_id.strip(), record)
    return _Snapshot(records=ordered, by_id=by_id)


def _read_rows(source: CatalogSource) -> list[dict[str, str]]:
    try:
        frame = pd.read_csv(
            source,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise LoadError(f"Cannot read catalog source: {exc}") from exc

    frame.columns = [str(column).strip() for column in frame.columns]
    if REQUIRED_COLUMN not in frame.columns:
        raise LoadError(f"Catalog source is missing the required column {REQUIRED_COLUMN!r}")

    return frame.fillna("").to_dict("records")


class CatalogStore:
    """Read-mostly catalog of `PropertyRecord`s."""

    def __init__(self, records: Iterable[PropertyRecord] = ()) -> None:
        self._snapshot = _build_snapshot(records)
        self._write_lock = threading.Lock()

    def load(self, source: CatalogSource) -> int:
        """Load a CSV catalog and replace the current one atomically.

        Rows without a `listing_id` are dropped. Returns the number of loaded records.

        Raises:
            LoadError: If the source is unreadable, unparsable, or lacks `listing_id`.
        """

        rows = _read_rows(source)
        records = [record for record in map(record_from_row, rows) if record is not None]
        self.replace(records)

        logger.info(
            "catalog loaded records=%d dropped=%d",
            len(records),
            len(rows) - len(records),
        )
        return len(records)

    def replace(self, records: Iterable[PropertyRecord]) -> None:
        """Swap in a new set of records (single writer)."""

        snapshot = _build_snapshot(records)
        with self._write_lock:
            self._snapshot = snapshot

    def all(self) -> tuple[PropertyRecord, ...]:
        """All records in source order."""

        return self._snapshot.records

    def get_by_id(self, listing_id: str | None) -> PropertyRecord | None:
        """Exact lookup after trimming; `None` when absent."""

        if listing_id is None:
            return None
        key = str(listing_id).strip()
        if not key:
            return None
        return self._snapshot.by_id.get(key)

    def __len__(self) -> int:
        return len(self._snapshot.records)
