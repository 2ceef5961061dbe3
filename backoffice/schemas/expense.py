from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ExpenseCreate(BaseModel):
    name: str
    amount: float = Field(gt=0)
    category: str = "other"
    date: Optional[str] = None
    recurring: bool = False
    notes: Optional[str] = None


class ExpenseOut(BaseModel):
    id: str
    name: str
    amount: float
    category: str
    date: str
    recurring: bool
    notes: Optional[str] = None
    created_at: str

    class Config:
        from_attributes = True
