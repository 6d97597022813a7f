"""Parsing of slash commands and their arguments."""

import re

from pydantic import BaseModel, Field

from src.core import message_templates
from src.core.errors import CommandUsageError


_COMMAND_RE = re.compile(r"^/(?P<name>[A-Za-z_]+)(?:@\S+)?(?:\s+(?P<args>.*))?$", re.DOTALL)
_EXPENSE_RE = re.compile(r"(?P<amount>\d+(?:[.,]\d{1,2}(?!\d))?)(?P<description>.*)", re.DOTALL)
# Thousands separators and a third decimal digit are ambiguous
_AMBIGUOUS_TAIL_RE = re.compile(r"^[.,]?\d")
_ASSIGN_RE = re.compile(r"^@(?P<mention>\w+)\s+(?P<description>.+)$", re.DOTALL)


class ChatCommand(BaseModel):
    """A slash command addressed to the bot."""

    name: str = Field(..., description="Lower-cased command name without the slash")
    args: str = Field(default="", description="Trimmed raw argument string")
    sender_id: str = Field(..., description="Participant ID of the sender")
    sender_name: str = Field(..., description="Display name of the sender")


class ExpenseArgs(BaseModel):
    """Parsed /addexpense arguments."""

    amount: float
    description: str


class AssignArgs(BaseModel):
    """Parsed /assignchore arguments."""

    mention: str = Field(..., description="Text after the @: phone digits when tagged, otherwise a typed name")
    description: str


def parse_command(text: str | None, *, sender_id: str, sender_name: str) -> ChatCommand | None:
    """Parse ``/name args`` (or ``/name@botname args``) into a ChatCommand.

    Returns:
        ChatCommand, or None when the text is not a command
    """
    if not text:
        return None

    match = _COMMAND_RE.match(text.strip())
    if not match:
        return None

    return ChatCommand(
        name=match.group("name").lower(),
        args=(match.group("args") or "").strip(),
        sender_id=sender_id,
        sender_name=sender_name,
    )


def parse_expense_args(args: str) -> ExpenseArgs:
    """Split ``<amount><description>`` into its parts.

    The amount is the first run of digits, optionally followed by a decimal part of
    one or two digits (``.`` or ``,``); everything after it is the description.
    Amounts such as ``1,250`` or ``12.500`` are rejected rather than guessed.

    Raises:
        CommandUsageError: If no amount is present, it is zero, or it is ambiguous
    """
    match = _EXPENSE_RE.search(args.strip())
    if not match:
        raise CommandUsageError(message_templates.USAGE_ADDEXPENSE)
    if _AMBIGUOUS_TAIL_RE.match(match.group("description")):
        raise CommandUsageError(message_templates.USAGE_ADDEXPENSE)

    amount = float(match.group("amount").replace(",", "."))
    if amount <= 0:
        raise CommandUsageError(message_templates.USAGE_ADDEXPENSE)

    return ExpenseArgs(amount=amount, description=match.group("description").strip())


def parse_assign_args(args: str) -> AssignArgs:
    """Split ``@name <chore text>`` into the mention and description.

    Raises:
        CommandUsageError: If the argument does not start with a mention followed by text
    """
    match = _ASSIGN_RE.match(args.strip())
    if not match:
        raise CommandUsageError(message_templates.USAGE_ASSIGNCHORE)

    return AssignArgs(mention=match.group("mention"), description=match.group("description").strip())


def require_args(args: str, usage: str) -> str:
    """Return the trimmed argument, raising CommandUsageError with ``usage`` when empty."""
    value = args.strip()
    if not value:
        raise CommandUsageError(usage)
    return value
