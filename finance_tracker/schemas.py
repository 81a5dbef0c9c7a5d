"""
API Schemas

Pydantic models for request validation and response serialization.
- TransactionIn / TransactionOut -> "transactions" table
- UserRegister / UserOut -> "users" table
- DateRange, LedgerDay, TrendSummary -> computed views, never persisted
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, constr, model_validator

from finance_tracker.ranges import DateRange, RangeSelector


class TransactionType(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"
    INVESTMENT = "Investment"
    SAVING = "Saving"

    @property
    def sign(self) -> int:
        """+1 or -1: the direction this type moves the running balance."""
        if self is TransactionType.EXPENSE:
            return -1
        if self in (TransactionType.INCOME, TransactionType.INVESTMENT, TransactionType.SAVING):
            return 1
        raise ValueError(f"Unhandled transaction type: {self!r}")


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRegister(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1)] = Field(None, description="Full name")
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserOut(BaseModel):
    id: int
    name: str
    email: EmailStr

    class Config:
        from_attributes = True


class TransactionIn(BaseModel):
    type: TransactionType = Field(..., description="Income, Expense, Investment or Saving")
    category: Optional[str] = Field(None, description="Required for expenses")
    amount: float = Field(..., gt=0, description="Positive amount; sign comes from type")
    date: date
    description: Optional[str] = Field(None, description="Optional note")

    @model_validator(mode="after")
    def check_expense_category(self) -> "TransactionIn":
        if self.type is TransactionType.EXPENSE and not (self.category or "").strip():
            raise ValueError("Category is required for expenses")
        return self


class TransactionOut(BaseModel):
    id: int
    user_id: int
    type: TransactionType
    category: str
    amount: float
    description: str
    date: date
    created_at: datetime

    class Config:
        from_attributes = True


class LedgerDay(BaseModel):
    transactions: List[TransactionOut]
    amount: float = Field(..., description="Signed total; expenses count negative")


class TrendSummary(BaseModel):
    type: TransactionType
    current_amount: float
    previous_amount: float
    percent_change: float
    direction: Literal["up", "down"]


class Dashboard(BaseModel):
    range: DateRange
    trends: List[TrendSummary]
    transactions: Dict[str, LedgerDay]


class SettingsIn(BaseModel):
    full_name: constr(strip_whitespace=True, min_length=1)
    default_view: RangeSelector


class SettingsOut(BaseModel):
    full_name: str
    default_view: Optional[str] = None
    has_avatar: bool = False


class Message(BaseModel):
    message: str
