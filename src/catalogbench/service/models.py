"""Product schema and document helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from catalogbench._internal.errors import ProductValidationError
from catalogbench._internal.types import DEFAULT_CATEGORY

if TYPE_CHECKING:
    from catalogbench._internal.types import JsonDict

# Largest integer a BSON document can hold (signed 64-bit).
MAX_STOCK = 2**63 - 1


class ProductFields(BaseModel):
    """Writable fields of a product record.

    Unknown keys are dropped. Numeric strings are coerced, booleans are not
    accepted as numbers, and non-string names are not cast to text.
    ``category`` is free text; ``SUGGESTED_CATEGORIES`` lists what the test
    client offers.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0, allow_inf_nan=False)
    stock: int = Field(ge=0, le=MAX_STOCK)
    category: str = DEFAULT_CATEGORY
    image_url: str | None = Field(default=None, alias="imageUrl")

    @field_validator("price", "stock", mode="before")
    @classmethod
    def _reject_bool(cls, value: Any) -> Any:
        if isinstance(value, bool):
            msg = "must be a number"
            raise ValueError(msg)
        return value

    def to_document(self) -> JsonDict:
        """Return the fields as stored, using wire names and omitting nulls."""
        return self.model_dump(by_alias=True, exclude_none=True)


# Wire names accepted from request bodies.
FIELD_NAMES: frozenset[str] = frozenset(
    field.alias or name for name, field in ProductFields.model_fields.items()
)


def _format_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "body"
        parts.append(f"{location}: {error['msg']}")
    return "Product validation failed: " + "; ".join(parts)


def validate_fields(payload: Any) -> ProductFields:
    """Validate a candidate product payload.

    Args:
        payload: Decoded JSON request body.

    Returns:
        The validated fields.

    Raises:
        ProductValidationError: If the payload is not an object or any
            field fails schema checks.
    """
    if not isinstance(payload, dict):
        msg = "Request body must be a JSON object"
        raise ProductValidationError(msg)
    try:
        return ProductFields.model_validate(payload)
    except ValidationError as exc:
        raise ProductValidationError(_format_errors(exc)) from exc


def merge_fields(existing: JsonDict, changes: Any) -> ProductFields:
    """Overlay ``changes`` onto a stored record and validate the result.

    Keys missing from ``changes`` keep their stored value. Keys outside the
    product schema (including ``_id``) are ignored.

    Args:
        existing: The stored record, as returned by the store.
        changes: Decoded JSON request body with a partial or full field set.

    Returns:
        The validated merged fields.

    Raises:
        ProductValidationError: If ``changes`` is not an object or the merged
            record fails schema checks.
    """
    if not isinstance(changes, dict):
        msg = "Request body must be a JSON object"
        raise ProductValidationError(msg)
    merged = {key: value for key, value in existing.items() if key in FIELD_NAMES}
    merged.update({key: value for key, value in changes.items() if key in FIELD_NAMES})
    return validate_fields(merged)
