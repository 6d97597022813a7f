"""Unit tests for command routing and replies."""

import pytest

from src.core import message_templates
from tests.unit.mocks import ANNA, BEN, CARL


@pytest.mark.unit
class TestRouting:
    """Tests for dispatch and failure handling."""

    def test_all_commands_registered(self, router):
        assert set(router.commands) == {
            "setemoji",
            "addgrocery",
            "grocerylist",
            "addexpense",
            "addchore",
            "assignchore",
            "completechore",
            "chorelist",
            "showuser",
            "balance",
            "rentdays",
            "help",
        }

    async def test_unknown_command_is_ignored(self, router, make_command):
        assert await router.handle(make_command("start")) is None

    async def test_help_lists_commands(self, router, make_command):
        reply = await router.handle(make_command("help"))

        assert "/addexpense <amount> <description>" in reply
        assert "/rentdays" in reply

    async def test_storage_failure_gives_generic_reply(self, router, make_command, in_memory_store):
        """Test a failing store is answered with a generic message naming the action."""
        in_memory_store.failing_operations.add("create_record")

        reply = await router.handle(make_command("addexpense", "12 Milk"))

        assert reply == "❌ An error occurred while saving the expense."

    async def test_unexpected_failure_gives_generic_reply(self, router, make_command, monkeypatch):
        """Test an unexpected exception never escapes the router."""

        async def _boom(**kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("src.services.grocery_service.list_groceries", _boom)

        reply = await router.handle(make_command("grocerylist"))

        assert reply == "❌ An unexpected error occurred while fetching the grocery list."

    async def test_failure_does_not_affect_next_command(self, router, make_command, in_memory_store):
        """Test the bot keeps working after a failed command."""
        in_memory_store.failing_operations.add("create_record")
        await router.handle(make_command("addgrocery", "Milk"))
        in_memory_store.failing_operations.clear()

        reply = await router.handle(make_command("addgrocery", "Milk"))

        assert reply == '🛒 Grocery item added: "Milk"'


@pytest.mark.unit
class TestUsageHints:
    """Tests for commands called without or with malformed arguments."""

    @pytest.mark.parametrize(
        ("name", "args", "usage"),
        [
            ("setemoji", "", message_templates.USAGE_SETEMOJI),
            ("setemoji", "x" * 17, message_templates.USAGE_SETEMOJI),
            ("addgrocery", "  ", message_templates.USAGE_ADDGROCERY),
            ("addexpense", "", message_templates.USAGE_ADDEXPENSE),
            ("addexpense", "Milk", message_templates.USAGE_ADDEXPENSE),
            ("addexpense", "1,250 rent", message_templates.USAGE_ADDEXPENSE),
            ("addchore", "", message_templates.USAGE_ADDCHORE),
            ("assignchore", "Ben trash", message_templates.USAGE_ASSIGNCHORE),
            ("completechore", "", message_templates.USAGE_COMPLETECHORE),
        ],
    )
    async def test_usage_hint(self, router, make_command, in_memory_store, name, args, usage):
        reply = await router.handle(make_command(name, args))

        assert reply == usage
        assert in_memory_store.all("expenses") == []
        assert in_memory_store.all("groceries") == []
        assert in_memory_store.all("chores") == []
        assert in_memory_store.all("user_preferences") == []


@pytest.mark.unit
class TestEmojiAndUsers:
    """Tests for /setemoji and /showuser."""

    async def test_set_emoji(self, router, make_command):
        assert await router.handle(make_command("setemoji", "🐱")) == '✅ Emoji set to "🐱"'

    async def test_show_user(self, router, make_command):
        assert await router.handle(make_command("showuser")) == "📋 No user settings found."

        await router.handle(make_command("setemoji", "🐱"))
        await router.handle(make_command("setemoji", "🐶", member=BEN))

        reply = await router.handle(make_command("showuser"))

        assert reply.splitlines() == [
            "👥 User Emoji List:",
            "🐱 - @Anna - +4915100000001",
            "🐶 - @Ben - +4915100000002",
        ]


@pytest.mark.unit
class TestGroceries:
    """Tests for /addgrocery and /grocerylist."""

    async def test_empty_list(self, router, make_command):
        assert await router.handle(make_command("grocerylist")) == "No grocery items have been added yet."

    async def test_list_shows_adder_emoji(self, router, make_command):
        await router.handle(make_command("setemoji", "🐱"))
        await router.handle(make_command("addgrocery", "Milk"))
        await router.handle(make_command("addgrocery", "Eggs", member=BEN))

        lines = (await router.handle(make_command("grocerylist"))).splitlines()

        assert lines[0] == "🛒 Grocery List 🛒"
        assert lines[1].startswith("• Eggs (added by 🤔 on ")
        assert lines[2].startswith("• Milk (added by 🐱 on ")


@pytest.mark.unit
class TestExpenses:
    """Tests for /addexpense and /balance."""

    async def test_add_expense_removes_grocery(self, router, make_command):
        await router.handle(make_command("addgrocery", "Milk", member=BEN))

        reply = await router.handle(make_command("addexpense", "12.50 Milk"))

        assert reply.splitlines() == [
            '✅ Expense recorded: 12.50 for "Milk"',
            "Remaining amount to be split: 12.50",
            '🛒 Grocery item "Milk" has been removed from the list.',
        ]
        assert await router.handle(make_command("grocerylist")) == "No grocery items have been added yet."

    async def test_receipt_survives_failed_grocery_removal(self, router, make_command, in_memory_store):
        await router.handle(make_command("addgrocery", "Milk", member=BEN))
        in_memory_store.failing_operations.add("delete_record:groceries")

        reply = await router.handle(make_command("addexpense", "12 Milk"))

        assert reply.splitlines() == [
            '✅ Expense recorded: 12.00 for "Milk"',
            "Remaining amount to be split: 12.00",
        ]
        assert len(in_memory_store.all("expenses")) == 1

    async def test_debt_is_covered_before_splitting(self, router, make_command):
        await router.handle(make_command("addexpense", "45 Cleaning supplies"))

        partial = await router.handle(make_command("addexpense", "20 Pizza", member=BEN))
        covered = await router.handle(make_command("addexpense", "5 Beer", member=CARL))

        assert "Remaining amount to be split: 5.00" in partial
        assert "No remaining amount to split after covering personal debt." in covered

    async def test_balance(self, router, make_command):
        await router.handle(make_command("setemoji", "🐱"))
        await router.handle(make_command("addexpense", "60 Groceries"))
        await router.handle(make_command("addexpense", "20 Pizza", member=BEN))
        await router.handle(make_command("addexpense", "10 Beer", member=CARL))

        reply = await router.handle(make_command("balance"))

        assert reply.splitlines() == [
            "💰 Total Expenses: 90.00",
            "📊 Share per person: 30.00",
            "",
            "💼 🐱 Anna Paid 60.00, Balance: 30.00",
            "💼 🤔 Ben Paid 20.00, Balance: -10.00",
            "💼 🤔 Carl Paid 10.00, Balance: -20.00",
            "",
            "🧮 Who owes whom:",
            "🔗 🤔 Ben owes 🐱 Anna 10.00",
            "🔗 🤔 Carl owes 🐱 Anna 20.00",
        ]

    async def test_balance_without_expenses_is_settled(self, router, make_command):
        reply = await router.handle(make_command("balance"))

        assert reply.startswith("💰 Total Expenses: 0.00")
        assert reply.endswith("Everyone is settled! 🎉")


@pytest.mark.unit
class TestChores:
    """Tests for the chore commands."""

    async def test_add_and_list(self, router, make_command):
        assert await router.handle(make_command("addchore", "Vacuum")) == '✅ Chore recorded: "Vacuum"'

        lines = (await router.handle(make_command("chorelist"))).splitlines()

        assert lines[0] == "📝 Chore List:"
        assert lines[1].startswith("1. Vacuum - 🤔 (Assigned on ")

    async def test_assign_and_complete(self, router, make_command):
        assigned = await router.handle(make_command("assignchore", "@Ben Take out trash"))
        completed = await router.handle(make_command("completechore", "Take out trash", member=BEN))

        assert assigned == '✅ Chore assigned to @Ben: "Take out trash"'
        assert completed == '✅ Chore marked as completed: "Take out trash"'
        assert await router.handle(make_command("chorelist")) == "No pending chores available."

    async def test_tagged_member_sees_and_completes_their_chore(self, router, make_command):
        await router.handle(make_command("setemoji", "🐻", member=BEN))

        assigned = await router.handle(make_command("assignchore", "@4915100000002 Take out trash"))
        listed = await router.handle(make_command("chorelist"))
        completed = await router.handle(make_command("completechore", "Take out trash", member=BEN))

        assert assigned == '✅ Chore assigned to @Ben: "Take out trash"'
        assert listed.splitlines()[1].startswith("1. Take out trash - 🐻 ")
        assert completed == '✅ Chore marked as completed: "Take out trash"'

    async def test_cannot_complete_someone_elses_chore(self, router, make_command):
        await router.handle(make_command("assignchore", "@Ben Take out trash"))

        reply = await router.handle(make_command("completechore", "Take out trash", member=ANNA))

        assert reply == '❌ Could not find a pending chore with the description: "Take out trash"'


@pytest.mark.unit
class TestRentDays:
    """Tests for /rentdays."""

    async def test_days_left(self, router, make_command):
        assert await router.handle(make_command("rentdays")) == "There are 7 days left until the 27th."
