"""Deterministic matching engine.

The engine converts validated `PlanFilters` into an ordered list of catalog records:
    1) keep records satisfying every non-null filter (logical AND),
    2) rank them with a fixed multi-key heuristic,
    3) cut to the requested limit.

Unknown record values never satisfy an active constraint. An empty result is not an error.
"""

from __future__ import annotations

import logging
import math
from functools import cmp_to_key

from src.catalog.schema import PropertyRecord
from src.catalog.store import CatalogStore
from src.intent.dictionaries import is_rental
from src.intent.normalize import fold_text
from src.intent.schema import PlanFilters
from src.search.fields import BOOLEAN_FILTER_FIELDS, RANGE_FILTER_FIELDS, STRING_FILTER_FIELDS

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


def normalize_limit(limit: int | None) -> int:
    """Clamp a caller-supplied limit; unusable limits (missing, NaN, infinite, <= 0) fall back to 10."""

    if limit is None or (isinstance(limit, float) and not math.isfinite(limit)) or limit <= 0:
        return DEFAULT_LIMIT
    return max(1, int(limit))


def _string_matches(value: str | None, expected: str) -> bool:
    folded_expected = fold_text(expected)
    if not folded_expected:
        return True
    if value is None:
        return False
    return fold_text(value) == folded_expected


def _range_matches(value: float | None, low: float | None, high: float | None) -> bool:
    if low is None and high is None:
        return True
    if value is None:
        return False
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def matches_filters(record: PropertyRecord, filters: PlanFilters | None) -> bool:
    """Whether a record satisfies every active filter."""

    if filters is None:
        return True

    for filter_key, field_name in STRING_FILTER_FIELDS.items():
        expected = getattr(filters, filter_key)
        if expected is not None and not _string_matches(getattr(record, field_name), expected):
            return False

    for field_name, (min_key, max_key) in RANGE_FILTER_FIELDS.items():
        low = getattr(filters, min_key)
        high = getattr(filters, max_key) if max_key else None
        if not _range_matches(getattr(record, field_name), low, high):
            return False

    for filter_key, field_name in BOOLEAN_FILTER_FIELDS.items():
        expected = getattr(filters, filter_key)
        if expected is not None and getattr(record, field_name) is not expected:
            return False

    return True


def _cmp(a: float, b: float) -> int:
    return (a > b) - (a < b)


def _compare_price(a: PropertyRecord, b: PropertyRecord) -> int:
    a_rental = is_rental(fold_text(a.operation_type))
    b_rental = is_rental(fold_text(b.operation_type))

    # Unknown prices sink: last among rentals (ascending), last among sales (descending).
    price_a = a.price if a.price is not None else (math.inf if a_rental else -math.inf)
    price_b = b.price if b.price is not None else (math.inf if b_rental else -math.inf)

    if a_rental and b_rental:
        return _cmp(price_a, price_b)
    if not a_rental and not b_rental:
        return _cmp(price_b, price_a)
    return _cmp(price_a, price_b)


def compare_records(a: PropertyRecord, b: PropertyRecord) -> int:
    """Ranking order: more photos, then the price heuristic, then larger area."""

    by_photos = _cmp(b.photo_count or 0, a.photo_count or 0)
    if by_photos:
        return by_photos

    by_price = _compare_price(a, b)
    if by_price:
        return by_price

    return _cmp(b.area_m2 or 0, a.area_m2 or 0)


def rank(records: list[PropertyRecord]) -> list[PropertyRecord]:
    """Sort records by the ranking heuristic; exact ties keep their catalog order."""

    return sorted(records, key=cmp_to_key(compare_records))


class MatchingEngine:
    """Filters and ranks catalog records for a plan."""

    def __init__(self, catalog: CatalogStore) -> None:
        self._catalog = catalog

    def search(self, filters: PlanFilters | None, limit: int | None = None) -> list[PropertyRecord]:
        """Return up to `limit` ranked records matching `filters`."""

        effective_limit = normalize_limit(limit)
        matched = [record for record in self._catalog.all() if matches_filters(record, filters)]
        results = rank(matched)[:effective_limit]

        logger.debug(
            "search matched=%d returned=%d limit=%d",
            len(matched),
            len(results),
            effective_limit,
        )
        return results
