"""Domain models and DTOs."""

from src.domain.chore import Chore, ChoreStatus
from src.domain.expense import Expense, ExpenseReceipt
from src.domain.grocery import GroceryItem
from src.domain.settlement import Balance, DebtSplit, SettlementPlan, Transfer
from src.domain.user import UserPreference


__all__ = [
    "Balance",
    "Chore",
    "ChoreStatus",
    "DebtSplit",
    "Expense",
    "ExpenseReceipt",
    "GroceryItem",
    "SettlementPlan",
    "Transfer",
    "UserPreference",
]
