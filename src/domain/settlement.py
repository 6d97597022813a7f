"""Value types produced by the settlement engine."""

from pydantic import BaseModel, Field


class Balance(BaseModel):
    """Net position of one participant against an even split."""

    participant_id: str
    total_paid: float = Field(..., description="Sum of everything this participant paid")
    balance: float = Field(..., description="Positive when owed money, negative when owing")


class Transfer(BaseModel):
    """One debtor -> creditor payment that moves balances toward zero."""

    debtor_id: str
    creditor_id: str
    amount: float = Field(..., gt=0)


class SettlementPlan(BaseModel):
    """Ordered transfers settling all balances.

    ``settled`` is True only when nobody owes and nobody is owed; in that case
    ``transfers`` is always empty.
    """

    transfers: list[Transfer] = Field(default_factory=list)
    settled: bool = False


class DebtSplit(BaseModel):
    """How a new payment divides between covering the payer's own debt and the shared pool."""

    prior_balance: float = Field(..., description="Payer balance before the new payment")
    debt_reduction: float = Field(..., ge=0)
    remaining_split_amount: float = Field(..., ge=0)
