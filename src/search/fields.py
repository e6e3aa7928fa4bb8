"""Allowlisted filter-to-record field mappings.

Every record attribute the engine reads while filtering comes from these mappings; filter keys
never address record attributes dynamically.
"""

from __future__ import annotations

from src.intent.schema import BOOLEAN_FILTER_KEYS

STRING_FILTER_FIELDS: dict[str, str] = {
    "operation_type": "operation_type",
    "property_type": "property_type",
    "address_municipality": "address_municipality",
    "neighborhood": "neighborhood",
}

# record field -> (min filter key, max filter key or None)
RANGE_FILTER_FIELDS: dict[str, tuple[str, str | None]] = {
    "price": ("price_min", "price_max"),
    "area_m2": ("area_min", "area_max"),
    "bedrooms": ("bedrooms_min", None),
    "bathrooms": ("bathrooms_min", None),
}

# Amenity filters share their name with the record flag.
BOOLEAN_FILTER_FIELDS: dict[str, str] = {key: key for key in BOOLEAN_FILTER_KEYS}
