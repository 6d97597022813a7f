"""Dispatch of chat commands to services and formatting of replies."""

import logging
from collections.abc import Awaitable, Callable
from datetime import date

from src.core import message_templates
from src.core.config import Settings
from src.core.db_client import RecordStore
from src.core.errors import CommandUsageError, DatabaseError, classify_command_error
from src.core.logging import log_with_context
from src.interface.command_parser import ChatCommand, parse_assign_args, parse_expense_args, require_args
from src.services import chore_service, expense_service, grocery_service, rent_service, user_service


logger = logging.getLogger(__name__)

Handler = Callable[[ChatCommand], Awaitable[str]]

# Wording for the generic failure reply, per command
_ACTIONS = {
    "setemoji": "setting the emoji",
    "addgrocery": "adding the grocery item",
    "grocerylist": "fetching the grocery list",
    "addexpense": "saving the expense",
    "addchore": "saving the chore",
    "assignchore": "assigning the chore",
    "completechore": "updating the chore status",
    "chorelist": "retrieving the chore list",
    "showuser": "fetching user settings",
    "balance": "calculating the balance",
    "rentdays": "calculating the days until rent",
    "help": "listing the commands",
}


class CommandRouter:
    """Routes a parsed ChatCommand to its handler and returns the reply text.

    Each command runs independently against the injected record store; nothing is
    kept between commands.
    """

    def __init__(self, *, store: RecordStore, settings: Settings, today: Callable[[], date] = date.today) -> None:
        self.store = store
        self.settings = settings
        self._today = today
        self._handlers: dict[str, Handler] = {
            "setemoji": self._set_emoji,
            "addgrocery": self._add_grocery,
            "grocerylist": self._grocery_list,
            "addexpense": self._add_expense,
            "addchore": self._add_chore,
            "assignchore": self._assign_chore,
            "completechore": self._complete_chore,
            "chorelist": self._chore_list,
            "showuser": self._show_user,
            "balance": self._balance,
            "rentdays": self._rent_days,
            "help": self._help,
        }

    @property
    def commands(self) -> list[str]:
        return list(self._handlers)

    async def handle(self, command: ChatCommand) -> str | None:
        """Run a command and return its reply, or None for commands this bot does not know.

        Failures never propagate: malformed input yields the usage hint, store
        failures are logged and answered with a generic message.
        """
        handler = self._handlers.get(command.name)
        if handler is None:
            logger.debug("Ignoring unknown command", extra={"command": command.name})
            return None

        log_with_context(
            logger, "info", "Handling command", command=command.name, participant_id=command.sender_id
        )
        try:
            return await handler(command)
        except CommandUsageError as e:
            return classify_command_error(e).message
        except DatabaseError as e:
            logger.error(
                "Command failed with storage error: %s",
                e,
                exc_info=True,
                extra={"command": command.name, "participant_id": command.sender_id},
            )
            return classify_command_error(e, action=_ACTIONS[command.name]).message
        except Exception as e:
            logger.error(
                "Unexpected command error (%s): %s",
                type(e).__name__,
                e,
                exc_info=True,
                extra={"command": command.name, "participant_id": command.sender_id},
            )
            return classify_command_error(e, action=_ACTIONS[command.name]).message

    async def _set_emoji(self, command: ChatCommand) -> str:
        emoji = require_args(command.args, message_templates.USAGE_SETEMOJI)
        try:
            preference = await user_service.set_emoji(
                store=self.store,
                participant_id=command.sender_id,
                display_name=command.sender_name,
                emoji=emoji,
            )
        except ValueError as e:
            raise CommandUsageError(message_templates.USAGE_SETEMOJI) from e
        return message_templates.emoji_set(emoji=preference.emoji)

    async def _add_grocery(self, command: ChatCommand) -> str:
        name = require_args(command.args, message_templates.USAGE_ADDGROCERY)
        item = await grocery_service.add_grocery(
            store=self.store,
            name=name,
            added_by_name=command.sender_name,
            added_by_id=command.sender_id,
        )
        return message_templates.grocery_added(name=item.name)

    async def _grocery_list(self, command: ChatCommand) -> str:
        items = await grocery_service.list_groceries(store=self.store)
        emojis = await user_service.get_emoji_by_name(store=self.store)
        return message_templates.grocery_list(
            items=items, emojis_by_name=emojis, default_emoji=self.settings.default_emoji
        )

    async def _add_expense(self, command: ChatCommand) -> str:
        args = parse_expense_args(command.args)
        receipt = await expense_service.record_expense(
            store=self.store,
            settings=self.settings,
            participant_id=command.sender_id,
            participant_name=command.sender_name,
            amount=args.amount,
            description=args.description,
        )
        return message_templates.expense_recorded(receipt=receipt)

    async def _add_chore(self, command: ChatCommand) -> str:
        description = require_args(command.args, message_templates.USAGE_ADDCHORE)
        chore = await chore_service.add_chore(
            store=self.store,
            description=description,
            participant_id=command.sender_id,
            participant_name=command.sender_name,
        )
        return message_templates.chore_recorded(description=chore.description)

    async def _assign_chore(self, command: ChatCommand) -> str:
        args = parse_assign_args(command.args)
        chore = await chore_service.assign_chore(
            store=self.store,
            description=args.description,
            mention=args.mention,
        )
        return message_templates.chore_assigned(assignee_name=chore.assigned_to_name, description=chore.description)

    async def _complete_chore(self, command: ChatCommand) -> str:
        description = require_args(command.args, message_templates.USAGE_COMPLETECHORE)
        chore = await chore_service.complete_chore(
            store=self.store,
            description=description,
            participant_id=command.sender_id,
            participant_name=command.sender_name,
        )
        if chore is None:
            return message_templates.chore_not_found(description=description)
        return message_templates.chore_completed(description=description)

    async def _chore_list(self, command: ChatCommand) -> str:
        chores = await chore_service.list_pending_chores(store=self.store)
        users = await user_service.list_users(store=self.store)
        return message_templates.chore_list(chores=chores, users=users, default_emoji=self.settings.default_emoji)

    async def _show_user(self, command: ChatCommand) -> str:
        users = await user_service.list_users(store=self.store)
        return message_templates.user_list(users=users)

    async def _balance(self, command: ChatCommand) -> str:
        report = await expense_service.get_balance_report(store=self.store, settings=self.settings)

        def label(participant_id: str) -> str:
            emoji = report.emojis.get(participant_id, self.settings.default_emoji)
            name = report.names.get(participant_id)
            return f"{emoji} {name}" if name else emoji

        return message_templates.balance_report(
            total=report.total,
            share_per_person=report.share_per_person,
            rows=[(label(b.participant_id), b.total_paid, b.balance) for b in report.balances],
            transfers=[(label(t.debtor_id), label(t.creditor_id), t.amount) for t in report.plan.transfers],
            settled=report.plan.settled,
        )

    async def _rent_days(self, command: ChatCommand) -> str:
        days = rent_service.days_until_rent(today=self._today(), rent_day=self.settings.rent_day)
        return message_templates.rent_days(days=days, rent_day=self.settings.rent_day)

    async def _help(self, command: ChatCommand) -> str:
        return message_templates.help_text()
