"""Pydantic schemas for credit balances and admin top-ups."""

from datetime import date

from pydantic import BaseModel, Field


class AddCredits(BaseModel):
    """Request body for POST /admin/credits."""

    owner_id: str = Field(..., min_length=1, max_length=64)
    credits: int = Field(..., gt=0, le=100_000)


class CreditAccountResponse(BaseModel):
    owner_id: str
    free: int
    paid: int
    used: int
    total: int
    last_reset: date
    resets_in: str  # e.g. "5h 12m" until 00:00 UTC

    model_config = {"from_attributes": True}
