"""Expense domain models."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.settlement import DebtSplit


class Expense(BaseModel):
    """Expense data transfer object. Expenses are never updated once recorded."""

    id: str = Field(..., description="Unique expense ID from the record store")
    participant_id: str = Field(..., description="Stable identity of the payer (E.164 phone number)")
    participant_name: str = Field(..., description="Payer display name at the time of recording")
    amount: float = Field(..., ge=0, description="Amount paid, in currency units")
    description: str = Field(default="", description="Free-text description (e.g., 'Milk')")
    created_at: datetime = Field(..., description="When the expense was recorded")


class ExpenseReceipt(BaseModel):
    """Outcome of recording an expense, used to build the confirmation reply."""

    expense: Expense
    split: DebtSplit
    removed_grocery: str | None = Field(default=None, description="Grocery item removed because it matched")
