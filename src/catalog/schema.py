"""Property record model (Pydantic).

A `PropertyRecord` is the canonical, typed view of one catalog row. Unknown values are `None`,
never empty strings or zeros; matching relies on that distinction.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

AMENITY_FIELDS: tuple[str, ...] = (
    "has_elevator",
    "has_parking",
    "furnished",
    "exterior",
    "terrace",
    "storage_room",
    "air_conditioning",
    "pets_allowed",
)


class PropertyRecord(BaseModel):
    """One real-estate listing."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    listing_id: str = Field(min_length=1)
    title: str | None = None
    description: str | None = None
    operation_type: str | None = None
    property_type: str | None = None

    price: float | None = None
    area_m2: float | None = None
    bedrooms: float | None = None
    bathrooms: float | None = None

    address_municipality: str | None = None
    neighborhood: str | None = None

    has_elevator: bool | None = None
    has_parking: bool | None = None
    furnished: bool | None = None
    exterior: bool | None = None
    terrace: bool | None = None
    storage_room: bool | None = None
    air_conditioning: bool | None = None
    pets_allowed: bool | None = None

    reference_url: str | None = None
    primary_image_url: str | None = None
    photos: tuple[str, ...] = ()
    photo_count: int | None = None
    price_per_m2: float | None = None
