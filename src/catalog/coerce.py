"""Cell-to-field coercion table for catalog rows.

Every canonical field maps to one pure function `raw cell -> typed value | None`. The table is
applied exactly once per row at load time; nothing downstream re-interprets raw cells.

Keeping the conversion here prevents drift between the loader and test fixtures.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any

from src.catalog.schema import AMENITY_FIELDS, PropertyRecord
from src.intent.normalize import clean_string, parse_bool_token, parse_number

Coercer = Callable[[Any], Any]


def cell_string(raw: Any) -> str | None:
    """Trimmed text; blank cells are unknown."""

    return clean_string(raw)


def cell_number(raw: Any) -> float | None:
    """Lenient number (comma decimal accepted); blank or garbage is unknown."""

    return parse_number(raw)


def cell_count(raw: Any) -> int | None:
    """Non-negative whole count; fractional values are truncated."""

    number = parse_number(raw)
    if number is None or number < 0:
        return None
    return int(number)


def cell_bool(raw: Any) -> bool | None:
    """Tri-state flag from yes/no tokens."""

    return parse_bool_token(raw)


def cell_photos(raw: Any) -> tuple[str, ...]:
    """Photo URLs from a JSON array or a delimiter-joined list.

    The delimiter is `|` when present, else `,`, else whitespace. Order is kept and duplicates
    are dropped.
    """

    text = clean_string(raw)
    if text is None:
        return ()

    urls: list[str] | None = None
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            urls = [str(item).strip() for item in parsed if item is not None]

    if urls is None:
        if "|" in text:
            urls = text.split("|")
        elif "," in text:
            urls = text.split(",")
        else:
            urls = text.split()

    return tuple(dict.fromkeys(url.strip() for url in urls if url.strip()))


FIELD_COERCERS: dict[str, Coercer] = {
    "listing_id": cell_string,
    "title": cell_string,
    "description": cell_string,
    "operation_type": cell_string,
    "property_type": cell_string,
    "price": cell_number,
    "area_m2": cell_number,
    "bedrooms": cell_number,
    "bathrooms": cell_number,
    "address_municipality": cell_string,
    "neighborhood": cell_string,
    **{field: cell_bool for field in AMENITY_FIELDS},
    "reference_url": cell_string,
    "primary_image_url": cell_string,
    "photo_count": cell_count,
    "price_per_m2": cell_number,
}

# Older exports name these columns differently.
PHOTOS_COLUMNS: tuple[str, ...] = ("photos", "photo_urls")
PRIMARY_IMAGE_FALLBACK_COLUMN = "main_image"


def _derive_price_per_m2(price: float | None, area_m2: float | None) -> float | None:
    if price is None or area_m2 is None or area_m2 <= 0:
        return None
    return price / area_m2


def _raw_photos(row: Mapping[str, Any]) -> Any:
    for column in PHOTOS_COLUMNS:
        if clean_string(row.get(column)) is not None:
            return row[column]
    return None


def record_from_row(row: Mapping[str, Any]) -> PropertyRecord | None:
    """Build a `PropertyRecord` from one raw row.

    Returns `None` for rows without a usable `listing_id` (dropped by the loader).

    Derived fields:
        - `photo_count`: explicit column, else the number of photos (unknown if none).
        - `price_per_m2`: explicit column, else `price / area_m2` when area is positive.
        - `primary_image_url`: explicit column, else `main_image`, else the first photo.
    """

    values = {field: coerce(row.get(field)) for field, coerce in FIELD_COERCERS.items()}
    if values["listing_id"] is None:
        return None

    photos = cell_photos(_raw_photos(row))
    values["photos"] = photos

    if values["photo_count"] is None and photos:
        values["photo_count"] = len(photos)

    if values["price_per_m2"] is None:
        values["price_per_m2"] = _derive_price_per_m2(values["price"], values["area_m2"])

    if values["primary_image_url"] is None:
        values["primary_image_url"] = cell_string(row.get(PRIMARY_IMAGE_FALLBACK_COLUMN)) or (
            photos[0] if photos else None
        )

    return PropertyRecord(**values)
