"""Pytest configuration.

The repository uses a flat `src/` layout without an installed package. This conftest ensures tests
can import from the `src.*` namespace when running `pytest` locally, and provides catalog fixtures.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Ensure `import src...` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from src.catalog.schema import PropertyRecord  # noqa: E402
from src.catalog.store import CatalogStore  # noqa: E402

RecordFactory = Callable[..., PropertyRecord]


def _make_record(listing_id: str, **fields: Any) -> PropertyRecord:
    return PropertyRecord(listing_id=listing_id, **fields)


@pytest.fixture
def make_record() -> RecordFactory:
    return _make_record


@pytest.fixture
def sample_records() -> list[PropertyRecord]:
    return [
        _make_record(
            "A-1",
            title="Piso con terraza",
            operation_type="alquiler",
            property_type="piso",
            price=850,
            area_m2=70,
            bedrooms=2,
            bathrooms=1,
            address_municipality="Granada",
            neighborhood="Centro",
            has_elevator=True,
            has_parking=False,
            furnished=True,
            terrace=True,
            photos=("https://img.example/a-1/1.jpg", "https://img.example/a-1/2.jpg"),
            photo_count=2,
        ),
        _make_record(
            "B-1",
            title="Dúplex familiar",
            operation_type="venta",
            property_type="duplex",
            price=280000,
            area_m2=120,
            bedrooms=4,
            bathrooms=3,
            address_municipality="Málaga",
            neighborhood="La Trinidad",
            has_elevator=True,
            has_parking=True,
            photos=(
                "https://img.example/b-1/1.jpg",
                "https://img.example/b-1/2.jpg",
                "https://img.example/b-1/3.jpg",
            ),
            photo_count=3,
        ),
        _make_record(
            "C-1",
            title="Estudio céntrico",
            operation_type="alquiler",
            property_type="estudio",
            price=550,
            area_m2=35,
            bedrooms=0,
            bathrooms=1,
            address_municipality="Málaga",
            neighborhood="Centro Histórico",
            has_elevator=False,
            has_parking=False,
            photos=("https://img.example/c-1/1.jpg",),
            photo_count=1,
        ),
        _make_record(
            "D-1",
            title="Chalet con jardín",
            operation_type="venta",
            property_type="chalet",
            price=450000,
            area_m2=200,
            bedrooms=5,
            bathrooms=4,
            address_municipality="Sevilla",
            neighborhood="Los Remedios",
            has_elevator=None,
            has_parking=True,
            photos=("https://img.example/d-1/1.jpg", "https://img.example/d-1/2.jpg"),
            photo_count=2,
        ),
    ]


@pytest.fixture
def catalog(sample_records: list[PropertyRecord]) -> CatalogStore:
    return CatalogStore(sample_records)
