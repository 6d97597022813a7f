"""Expense service: recording payments and producing balance reports."""

import logging
from datetime import datetime

from pydantic import BaseModel, Field

from src.core.config import Settings
from src.core.db_client import RecordStore
from src.core.errors import DatabaseError
from src.core.logging import span
from src.domain.expense import Expense, ExpenseReceipt
from src.domain.settlement import Balance, SettlementPlan
from src.services import grocery_service, settlement_engine, user_service


logger = logging.getLogger(__name__)

COLLECTION = "expenses"


class BalanceReport(BaseModel):
    """Everything needed to render the /balance reply."""

    total: float
    share_per_person: float
    balances: list[Balance] = Field(default_factory=list)
    plan: SettlementPlan
    emojis: dict[str, str] = Field(default_factory=dict, description="participant ID -> emoji")
    names: dict[str, str] = Field(default_factory=dict, description="participant ID -> display name")


async def list_expenses(*, store: RecordStore) -> list[Expense]:
    """Return every recorded expense, oldest first."""
    with span("expense_service.list_expenses"):
        records = await store.list_records(collection=COLLECTION, sort="created_at")
        return [Expense.model_validate(record) for record in records]


async def _get_roster(*, store: RecordStore, settings: Settings) -> list[str]:
    if not settings.include_non_payers:
        return []
    return await user_service.get_roster(store=store)


async def record_expense(
    *,
    store: RecordStore,
    settings: Settings,
    participant_id: str,
    participant_name: str,
    amount: float,
    description: str,
) -> ExpenseReceipt:
    """Record a new expense and report how much of it still needs splitting.

    The split is computed against the expenses recorded before this one. The full
    amount is always stored. If the description exactly matches a grocery item,
    that item is removed from the list afterwards; a failure there does not undo
    the recorded expense.

    Args:
        store: Record store
        settings: Application settings (household size, roster policy)
        participant_id: Payer participant ID
        participant_name: Payer display name
        amount: Amount paid
        description: What was paid for

    Returns:
        ExpenseReceipt with the stored expense, the debt split and any removed grocery

    Raises:
        DatabaseError: If reading prior expenses or storing the new one fails
    """
    with span("expense_service.record_expense"):
        existing = await list_expenses(store=store)
        roster = await _get_roster(store=store, settings=settings)

        split = settlement_engine.apply_new_expense(
            existing,
            settings.household_size,
            participant_id,
            amount,
            roster=roster,
        )

        record = await store.create_record(
            collection=COLLECTION,
            data={
                "participant_id": participant_id,
                "participant_name": participant_name,
                "amount": amount,
                "description": description,
                "created_at": datetime.now().isoformat(),
            },
        )
        expense = Expense.model_validate(record)
        logger.info(
            "Recorded expense",
            extra={
                "participant_id": participant_id,
                "amount": amount,
                "remaining_split_amount": split.remaining_split_amount,
            },
        )

        removed = None
        if description:
            try:
                if await grocery_service.remove_grocery_by_name(store=store, name=description):
                    removed = description
            except DatabaseError:
                logger.error(
                    "Expense recorded but grocery item could not be removed",
                    exc_info=True,
                    extra={"participant_id": participant_id, "grocery": description},
                )

        return ExpenseReceipt(expense=expense, split=split, removed_grocery=removed)


async def get_balance_report(*, store: RecordStore, settings: Settings) -> BalanceReport:
    """Compute balances and the transfers that settle them.

    Args:
        store: Record store
        settings: Application settings (household size, roster policy)

    Returns:
        BalanceReport with per-member balances, settlement plan and display lookups
    """
    with span("expense_service.get_balance_report"):
        expenses = await list_expenses(store=store)
        users = await user_service.list_users(store=store)
        roster = [user.participant_id for user in users] if settings.include_non_payers else []

        balances = settlement_engine.compute_balances(expenses, settings.household_size, roster=roster)
        plan = settlement_engine.settle_debts({pid: b.balance for pid, b in balances.items()})

        total = sum(expense.amount for expense in expenses)

        # Latest name a member paid under, overridden by their stored preference
        names = {expense.participant_id: expense.participant_name for expense in expenses}
        names.update({user.participant_id: user.display_name for user in users})

        return BalanceReport(
            total=total,
            share_per_person=total / settings.household_size,
            balances=list(balances.values()),
            plan=plan,
            emojis={user.participant_id: user.emoji for user in users},
            names=names,
        )
