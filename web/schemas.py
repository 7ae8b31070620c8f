"""Request body models for the JSON API."""

import datetime
from decimal import Decimal
from typing import Literal, Optional
import pydantic
from pydantic import BaseModel, ConfigDict, Field
from errors import ValidationError

_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CategoryCreate(_Payload):
    name: str = Field(min_length=1)
    user_id: str = Field(alias="userId", min_length=1)
    color: str = Field(min_length=1)
    type: Literal["expense", "income"] = "expense"


class CategoryUpdate(_Payload):
    """Omitted fields stay unchanged; an explicit null is rejected."""

    name: str = Field(default=None, min_length=1)
    color: str = Field(default=None, min_length=1)
    type: Literal["expense", "income"] = None


class ExpenseCreate(_Payload):
    """Only the owner is required; the rest is stored as given."""

    user_id: str = Field(alias="userId", min_length=1)
    amount: Optional[Decimal] = None
    description: str = ""
    date: Optional[datetime.date] = None
    category_id: Optional[str] = Field(default=None, alias="categoryId")


class ExpenseUpdate(_Payload):
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    date: Optional[datetime.date] = None
    category_id: Optional[str] = Field(default=None, alias="categoryId")


def parse_payload(model, data):
    """Validate a JSON body against a model.

    Raises:
        ValidationError: Listing missing fields, or invalid ones when nothing
            is missing.
    """
    try:
        return model.model_validate(data or {})
    except pydantic.ValidationError as e:
        missing, invalid = [], []
        for error in e.errors():
            field_name = ".".join(str(part) for part in error["loc"]) or "body"
            target = missing if error["type"] in _MISSING_ERROR_TYPES else invalid
            if field_name not in target:
                target.append(field_name)
        if missing:
            raise ValidationError(missing) from e
        raise ValidationError(invalid, f"Invalid fields: {', '.join(invalid)}") from e


def patch_fields(payload: BaseModel) -> dict:
    """Fields the caller actually sent, keyed by Python attribute name."""
    return payload.model_dump(exclude_unset=True)
