"""Pydantic schemas for the four resource kinds.

Separate "Write" schemas (request bodies for POST and PUT) from "Read"
schemas (what the API returns). Write schemas never include id or
user_id: ids are generated by the store and ownership comes from the
token. PUT replaces every mutable field, so it takes the same body as
POST.
"""

import datetime as dt
import uuid
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

_write_config = {"str_strip_whitespace": True}

# Largest value a NUMERIC(12, 2) column holds.
MAX_AMOUNT = 9_999_999_999.99


def _whole_cents(value: float) -> float:
    if round(value, 2) != value:
        raise ValueError("must have at most 2 decimal places")
    return value


Amount = Annotated[
    float,
    Field(gt=0, le=MAX_AMOUNT, allow_inf_nan=False),
    AfterValidator(_whole_cents),
]
SavedAmount = Annotated[
    float,
    Field(ge=0, le=MAX_AMOUNT, allow_inf_nan=False),
    AfterValidator(_whole_cents),
]


# ─── Categories ─────────────────────────────────────────

class CategoryWrite(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    model_config = _write_config


class CategoryRead(BaseModel):
    id: uuid.UUID
    name: str
    user_id: uuid.UUID

    model_config = {"from_attributes": True}


# ─── Transactions ───────────────────────────────────────

class TransactionWrite(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    amount: Amount = Field(..., description="Always positive; type gives the direction")
    date: dt.date
    type: str = Field(..., pattern=r"^(income|expense)$")
    category: Optional[str] = Field(None, max_length=100)

    model_config = _write_config


class TransactionRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    description: str
    amount: float
    date: dt.date
    type: str
    category: Optional[str] = None

    model_config = {"from_attributes": True}


# ─── Goals ──────────────────────────────────────────────

class GoalWrite(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    amount: Amount
    saved: SavedAmount = 0
    target_date: Optional[dt.date] = None

    model_config = _write_config


class GoalRead(BaseModel):
    id: uuid.UUID
    name: str
    amount: float
    saved: float
    target_date: Optional[dt.date] = None
    user_id: uuid.UUID

    model_config = {"from_attributes": True}


# ─── Bills ──────────────────────────────────────────────

class BillWrite(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    amount: Amount
    due_date: dt.date
    paid: bool = False

    model_config = _write_config


class BillRead(BaseModel):
    id: uuid.UUID
    description: str
    amount: float
    due_date: dt.date
    paid: bool
    user_id: uuid.UUID

    model_config = {"from_attributes": True}


# ─── Shared ─────────────────────────────────────────────

class DeleteResult(BaseModel):
    """Confirmation returned by every DELETE route."""
    message: str
    id: uuid.UUID
