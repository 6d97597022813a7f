"""Centralized message templates for chat replies.

All user-facing message strings are defined here so wording can be changed
in one place.
"""

from datetime import datetime

from src.core.config import constants
from src.domain.chore import Chore
from src.domain.expense import ExpenseReceipt
from src.domain.grocery import GroceryItem
from src.domain.user import UserPreference


def money(amount: float) -> str:
    if abs(amount) < constants.BALANCE_EPSILON:
        amount = 0.0
    return f"{amount:.{constants.AMOUNT_DECIMAL_PLACES}f}"


def ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def _date(value: datetime) -> str:
    return value.strftime("%d.%m.%Y")


def _date_time(value: datetime) -> str:
    return value.strftime("%d.%m.%Y %H:%M")


USAGE_SETEMOJI = "Please enter the emoji in the format: /setemoji <emoji>"
USAGE_ADDGROCERY = "Please enter the grocery item in the format: /addgrocery <item name>"
USAGE_ADDEXPENSE = "Please enter the expense in the format: /addexpense <amount> <description>"
USAGE_ADDCHORE = "Please enter the chore in the format: /addchore <chore description>"
USAGE_ASSIGNCHORE = "Please enter the chore assignment in the format: /assignchore @username <chore description>"
USAGE_COMPLETECHORE = "Please specify the chore description to complete."


def emoji_set(*, emoji: str) -> str:
    return f'✅ Emoji set to "{emoji}"'


def grocery_added(*, name: str) -> str:
    return f'🛒 Grocery item added: "{name}"'


def grocery_list(*, items: list[GroceryItem], emojis_by_name: dict[str, str], default_emoji: str) -> str:
    if not items:
        return "No grocery items have been added yet."

    lines = ["🛒 Grocery List 🛒"]
    for item in items:
        emoji = emojis_by_name.get(item.added_by_name, default_emoji)
        lines.append(f"• {item.name} (added by {emoji} on {_date(item.added_at)})")
    return "\n".join(lines)


def expense_recorded(*, receipt: ExpenseReceipt) -> str:
    expense = receipt.expense
    lines = [f'✅ Expense recorded: {money(expense.amount)} for "{expense.description}"']

    if receipt.split.remaining_split_amount > 0:
        lines.append(f"Remaining amount to be split: {money(receipt.split.remaining_split_amount)}")
    else:
        lines.append("No remaining amount to split after covering personal debt.")

    if receipt.removed_grocery:
        lines.append(f'🛒 Grocery item "{receipt.removed_grocery}" has been removed from the list.')

    return "\n".join(lines)


def chore_recorded(*, description: str) -> str:
    return f'✅ Chore recorded: "{description}"'


def chore_assigned(*, assignee_name: str, description: str) -> str:
    return f'✅ Chore assigned to @{assignee_name}: "{description}"'


def chore_completed(*, description: str) -> str:
    return f'✅ Chore marked as completed: "{description}"'


def chore_not_found(*, description: str) -> str:
    return f'❌ Could not find a pending chore with the description: "{description}"'


def chore_list(*, chores: list[Chore], users: list[UserPreference], default_emoji: str) -> str:
    if not chores:
        return "No pending chores available."

    by_id = {user.participant_id: user.emoji for user in users}
    by_name = {user.display_name: user.emoji for user in users}

    lines = ["📝 Chore List:"]
    for index, chore in enumerate(chores, start=1):
        if chore.assigned_to_id in by_id:
            emoji = by_id[chore.assigned_to_id]
        else:
            emoji = by_name.get(chore.assigned_to_name, default_emoji)
        lines.append(f"{index}. {chore.description} - {emoji} (Assigned on {_date_time(chore.assigned_at)})")
    return "\n".join(lines)


def user_list(*, users: list[UserPreference]) -> str:
    if not users:
        return "📋 No user settings found."

    lines = ["👥 User Emoji List:"]
    lines.extend(f"{user.emoji} - @{user.display_name} - {user.participant_id}" for user in users)
    return "\n".join(lines)


def balance_report(
    *,
    total: float,
    share_per_person: float,
    rows: list[tuple[str, float, float]],
    transfers: list[tuple[str, str, float]],
    settled: bool,
) -> str:
    """Build the balance reply.

    Args:
        total: Sum of all expenses
        share_per_person: Even share per household member
        rows: (member label, total paid, balance) per member
        transfers: (debtor label, creditor label, amount) in settlement order
        settled: True if nobody owes anything
    """
    lines = [
        f"💰 Total Expenses: {money(total)}",
        f"📊 Share per person: {money(share_per_person)}",
        "",
    ]
    lines.extend(f"💼 {label} Paid {money(paid)}, Balance: {money(balance)}" for label, paid, balance in rows)
    lines.append("")
    lines.append("🧮 Who owes whom:")
    lines.extend(f"🔗 {debtor} owes {creditor} {money(amount)}" for debtor, creditor, amount in transfers)
    if settled:
        lines.append("Everyone is settled! 🎉")
    return "\n".join(lines)


def rent_days(*, days: int, rent_day: int) -> str:
    if days == 0:
        return f"Rent is due today (the {ordinal(rent_day)})!"
    return f"There are {days} days left until the {ordinal(rent_day)}."


def help_text() -> str:
    return "\n".join(
        [
            "🏠 Available commands:",
            "/setemoji <emoji> - set your emoji",
            "/addgrocery <item> - add to the grocery list",
            "/grocerylist - show the grocery list",
            "/addexpense <amount> <description> - record something you paid for",
            "/balance - show who owes whom",
            "/addchore <chore> - take on a chore",
            "/assignchore @name <chore> - assign a chore",
            "/completechore <chore> - mark your chore as done",
            "/chorelist - show pending chores",
            "/showuser - list members and their emojis",
            "/rentdays - days until rent is due",
        ]
    )
