"""Pure expense-splitting and settlement functions.

Every function here works on a snapshot of expenses passed in by the caller and
keeps no state between calls. Participants are identified by their stable
participant ID; display names and emojis are resolved when formatting replies.

Balances use an even split: each participant's share is the total of all
expenses divided by the household size, and their balance is what they paid
minus that share. A positive balance means the participant is owed money.
"""

from collections.abc import Iterable, Mapping

from src.core.config import constants
from src.domain.expense import Expense
from src.domain.settlement import Balance, DebtSplit, SettlementPlan, Transfer


def compute_balances(
    expenses: Iterable[Expense],
    household_size: int,
    *,
    roster: Iterable[str] = (),
) -> dict[str, Balance]:
    """Compute each participant's net balance against an even split.

    Participants are enumerated in order of first appearance as payers, followed by
    any ``roster`` entries that never paid. Without a roster, members who never paid
    do not appear at all, so they can never show up as debtors.

    Args:
        expenses: All recorded expenses
        household_size: Number of people sharing the costs (>= 1)
        roster: Additional participant IDs to include with zero paid

    Returns:
        Mapping of participant ID to Balance, in enumeration order
    """
    if household_size < 1:
        msg = f"household_size must be at least 1, got {household_size}"
        raise ValueError(msg)

    totals: dict[str, float] = {}
    for expense in expenses:
        totals[expense.participant_id] = totals.get(expense.participant_id, 0.0) + expense.amount

    for participant_id in roster:
        totals.setdefault(participant_id, 0.0)

    share_per_person = sum(totals.values()) / household_size

    return {
        participant_id: Balance(
            participant_id=participant_id,
            total_paid=total_paid,
            balance=total_paid - share_per_person,
        )
        for participant_id, total_paid in totals.items()
    }


def settle_debts(balances: Mapping[str, float]) -> SettlementPlan:
    """Greedily match debtors to creditors, both in the order they were discovered.

    Each debtor pays creditors in turn until their debt is gone; a creditor is
    skipped once fully repaid. Balances within half a cent of zero count as settled.

    Args:
        balances: Participant ID -> net balance (negative owes, positive is owed)

    Returns:
        SettlementPlan with ordered transfers, or ``settled=True`` if nobody owes anything
    """
    epsilon = constants.BALANCE_EPSILON
    debtors = [(pid, -balance) for pid, balance in balances.items() if balance < -epsilon]
    creditors = [[pid, balance] for pid, balance in balances.items() if balance > epsilon]

    if not debtors and not creditors:
        return SettlementPlan(settled=True)

    transfers: list[Transfer] = []
    creditor_index = 0

    for debtor_id, owed in debtors:
        while owed > epsilon and creditor_index < len(creditors):
            creditor_id, credit = creditors[creditor_index]
            amount = min(owed, credit)

            transfers.append(Transfer(debtor_id=debtor_id, creditor_id=creditor_id, amount=amount))
            owed -= amount
            creditors[creditor_index][1] = credit - amount

            if credit - amount <= epsilon:
                creditor_index += 1

    return SettlementPlan(transfers=transfers)


def apply_new_expense(
    existing_expenses: Iterable[Expense],
    household_size: int,
    payer_id: str,
    new_amount: float,
    *,
    roster: Iterable[str] = (),
) -> DebtSplit:
    """Work out how much of a new payment covers the payer's own debt.

    The payer's balance is computed over ``existing_expenses`` only (a payer who has
    not paid before starts at minus one share). If it is negative,
    the new payment first reduces that debt and only the rest goes to the shared pool.
    The result is informational; the caller still records the full ``new_amount``.

    Args:
        existing_expenses: Expenses recorded before this one
        household_size: Number of people sharing the costs
        payer_id: Participant ID of the payer
        new_amount: Amount of the new expense
        roster: Additional participant IDs, as for compute_balances

    Returns:
        DebtSplit with the prior balance, the debt reduction and the remaining split amount
    """
    # A payer with no earlier expenses still owes a full share
    balances = compute_balances(existing_expenses, household_size, roster=[*roster, payer_id])
    prior_balance = balances[payer_id].balance

    debt_reduction = 0.0
    if prior_balance < 0:
        debt_reduction = min(new_amount, abs(prior_balance))

    return DebtSplit(
        prior_balance=prior_balance,
        debt_reduction=debt_reduction,
        remaining_split_amount=new_amount - debt_reduction,
    )
