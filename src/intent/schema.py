"""Query plan JSON schema (Pydantic models).

This schema is the contract between the generation backend and the deterministic matching
engine. Raw backend output must validate against these models; otherwise the request is treated
as not understood. Validation is all-or-nothing: no partial plan is ever produced.

Normalization happens here, once, so that matching only ever needs `is None` checks:
    - string filters are trimmed and lowercased; blank means unconstrained,
    - numeric filters are parsed leniently; non-finite means unconstrained,
    - boolean filters accept yes/no tokens; unknown tokens mean unconstrained,
    - every filter key is always present on `PlanFilters`.
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from src.intent.normalize import parse_bool_token, parse_number, scalar_to_string


class PlanValidationError(ValueError):
    """Raised when raw backend output does not satisfy the plan schema."""


class IntentKind(StrEnum):
    """Supported user intents."""

    GET_BY_ID = "GET_BY_ID"
    SEARCH = "SEARCH"
    DETAILS = "DETAILS"
    PHOTOS_MORE = "PHOTOS_MORE"
    LOCATION = "LOCATION"
    PRICE = "PRICE"
    AVAILABILITY = "AVAILABILITY"
    CONTACT_AGENT = "CONTACT_AGENT"
    OTHER = "OTHER"


# Intents that are about one specific listing and need `listing_id`.
LISTING_SCOPED_INTENTS: frozenset[IntentKind] = frozenset(
    {
        IntentKind.GET_BY_ID,
        IntentKind.PHOTOS_MORE,
        IntentKind.DETAILS,
        IntentKind.LOCATION,
        IntentKind.PRICE,
        IntentKind.AVAILABILITY,
    }
)

STRING_FILTER_KEYS: tuple[str, ...] = (
    "operation_type",
    "property_type",
    "address_municipality",
    "neighborhood",
)

NUMERIC_FILTER_KEYS: tuple[str, ...] = (
    "price_min",
    "price_max",
    "bedrooms_min",
    "bathrooms_min",
    "area_min",
    "area_max",
)

BOOLEAN_FILTER_KEYS: tuple[str, ...] = (
    "has_elevator",
    "has_parking",
    "furnished",
    "exterior",
    "terrace",
    "storage_room",
    "air_conditioning",
    "pets_allowed",
)

DEFAULT_RESULT_COUNT = 3


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _shape_error(value: Any, expected: str) -> ValueError:
    return ValueError(f"expected {expected}, got {type(value).__name__}")


class PlanFilters(BaseModel):
    """Optional search constraints combined with logical AND; `None` means unconstrained."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    operation_type: str | None = None
    property_type: str | None = None
    address_municipality: str | None = None
    neighborhood: str | None = None

    price_min: float | None = None
    price_max: float | None = None
    bedrooms_min: float | None = None
    bathrooms_min: float | None = None
    area_min: float | None = None
    area_max: float | None = None

    has_elevator: bool | None = None
    has_parking: bool | None = None
    furnished: bool | None = None
    exterior: bool | None = None
    terrace: bool | None = None
    storage_room: bool | None = None
    air_conditioning: bool | None = None
    pets_allowed: bool | None = None

    @field_validator(*STRING_FILTER_KEYS, mode="before")
    @classmethod
    def normalize_string(cls, value: Any) -> str | None:
        """Trim and lowercase; blank values are unconstrained."""

        if value is None:
            return None
        if _is_number(value):
            value = scalar_to_string(value)
        if not isinstance(value, str):
            raise _shape_error(value, "string")
        normalized = value.strip().lower()
        return normalized or None

    @field_validator(*NUMERIC_FILTER_KEYS, mode="before")
    @classmethod
    def normalize_number(cls, value: Any) -> float | None:
        """Pass finite numbers, parse strings leniently; anything non-finite is unconstrained."""

        if value is None:
            return None
        if not (_is_number(value) or isinstance(value, str)):
            raise _shape_error(value, "number")
        return parse_number(value)

    @field_validator(*BOOLEAN_FILTER_KEYS, mode="before")
    @classmethod
    def normalize_boolean(cls, value: Any) -> bool | None:
        """Accept booleans and yes/no tokens; unknown tokens are unconstrained."""

        if value is None:
            return None
        if not (isinstance(value, (bool, str)) or _is_number(value)):
            raise _shape_error(value, "boolean")
        return parse_bool_token(value)


class Clarification(BaseModel):
    """Follow-up questions for an underspecified request."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    questions: tuple[str, ...] = ()

    @field_validator("questions", mode="after")
    @classmethod
    def drop_blank_questions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(q.strip() for q in value if q.strip())


class QueryPlan(BaseModel):
    """A fully validated, normalized plan for one user message."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    intent: IntentKind
    listing_id: str | None = None
    filters: PlanFilters = Field(default_factory=PlanFilters)
    need_fields: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("need_fields", "needed_fields"),
    )
    result_count: int = DEFAULT_RESULT_COUNT
    clarification: Clarification | None = None

    @field_validator("listing_id", mode="before")
    @classmethod
    def normalize_listing_id(cls, value: Any) -> str | None:
        """Stringify and trim a scalar reference; blank means no reference."""

        if value is None:
            return None
        if _is_number(value):
            value = scalar_to_string(value)
        if not isinstance(value, str):
            raise _shape_error(value, "string or number")
        return value.strip() or None

    @field_validator("filters", mode="before")
    @classmethod
    def default_filters(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("need_fields", mode="before")
    @classmethod
    def normalize_need_fields(cls, value: Any) -> Any:
        if value is None:
            return ()
        if not isinstance(value, (list, tuple)):
            raise _shape_error(value, "list of strings")
        for item in value:
            if not isinstance(item, str):
                raise _shape_error(item, "string")
        return tuple(dict.fromkeys(item.strip() for item in value if item.strip()))

    @field_validator("result_count", mode="before")
    @classmethod
    def validate_result_count(cls, value: Any) -> int:
        """Default to 3 when absent; otherwise require a positive integer (no clamping)."""

        if value is None:
            return DEFAULT_RESULT_COUNT
        if not _is_number(value):
            raise _shape_error(value, "integer")
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError("result_count must be an integer")
            value = int(value)
        if value <= 0:
            raise ValueError("result_count must be positive")
        return value

    @field_validator("clarification", mode="before")
    @classmethod
    def normalize_clarification(cls, value: Any) -> Any:
        if isinstance(value, list):
            value = {"questions": value}
        return value

    @field_validator("clarification", mode="after")
    @classmethod
    def drop_empty_clarification(cls, value: Clarification | None) -> Clarification | None:
        if value is not None and not value.questions:
            return None
        return value

    @property
    def needs_listing_id(self) -> bool:
        """Whether the intent is listing-scoped but no reference was resolved."""

        return self.intent in LISTING_SCOPED_INTENTS and self.listing_id is None

    @property
    def questions(self) -> tuple[str, ...]:
        return self.clarification.questions if self.clarification else ()


def plan_from_obj(obj: Any) -> QueryPlan:
    """Validate and normalize a plan from an arbitrary decoded JSON object.

    Raises:
        PlanValidationError: If the object does not satisfy the plan schema.
    """

    if not isinstance(obj, dict):
        raise PlanValidationError(f"plan must be a JSON object, got {type(obj).__name__}")
    try:
        return QueryPlan.model_validate(obj)
    except ValueError as exc:
        raise PlanValidationError(str(exc)) from exc


def validate_plan(raw: str | bytes | dict[str, Any]) -> QueryPlan:
    """Validate raw structured data (JSON text or an already decoded object) into a plan."""

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise PlanValidationError("plan is not valid JSON") from exc
    return plan_from_obj(raw)
