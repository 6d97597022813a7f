"""User preference service: member emojis and display names."""

import logging
from datetime import datetime

from src.core.db_client import RecordStore, sanitize_param
from src.core.logging import span
from src.domain.user import UserPreference


logger = logging.getLogger(__name__)

COLLECTION = "user_preferences"


async def set_emoji(
    *,
    store: RecordStore,
    participant_id: str,
    display_name: str,
    emoji: str,
) -> UserPreference:
    """Create or replace the emoji for a member.

    One record is kept per participant; the latest write wins and also refreshes
    the stored display name.

    Args:
        store: Record store
        participant_id: Stable identity of the member
        display_name: Current display name of the member
        emoji: Emoji glyph to show for the member

    Returns:
        The stored preference
    """
    with span("user_service.set_emoji"):
        data = {
            "participant_id": participant_id,
            "display_name": display_name,
            "emoji": emoji.strip(),
            "updated_at": datetime.now().isoformat(),
        }
        # Validate before writing so bad input never reaches the store
        UserPreference.model_validate({"id": "pending", **data})

        existing = await store.get_first_record(
            collection=COLLECTION,
            filter_query=f'participant_id = "{sanitize_param(participant_id)}"',
        )

        if existing:
            record = await store.update_record(collection=COLLECTION, record_id=existing["id"], data=data)
            logger.info("Updated emoji", extra={"participant_id": participant_id})
        else:
            record = await store.create_record(collection=COLLECTION, data=data)
            logger.info("Created user preference", extra={"participant_id": participant_id})

        return UserPreference.model_validate(record)


async def list_users(*, store: RecordStore) -> list[UserPreference]:
    """List all member preferences in the order they were first stored."""
    with span("user_service.list_users"):
        records = await store.list_records(collection=COLLECTION, sort="id")
        return [UserPreference.model_validate(record) for record in records]


async def get_emoji_by_name(*, store: RecordStore) -> dict[str, str]:
    """Map display name to emoji, for records that only carry a member's name."""
    users = await list_users(store=store)
    return {user.display_name: user.emoji for user in users}


async def get_roster(*, store: RecordStore) -> list[str]:
    """Participant IDs of every member who has stored a preference."""
    users = await list_users(store=store)
    return [user.participant_id for user in users]


async def get_user(*, store: RecordStore, participant_id: str) -> UserPreference | None:
    """Look up a member's preference by participant ID."""
    record = await store.get_first_record(
        collection=COLLECTION,
        filter_query=f'participant_id = "{sanitize_param(participant_id)}"',
    )
    return UserPreference.model_validate(record) if record else None


async def find_user_by_name(*, store: RecordStore, display_name: str) -> UserPreference | None:
    """Look up the member currently using ``display_name``, earliest stored first."""
    record = await store.get_first_record(
        collection=COLLECTION,
        filter_query=f'display_name = "{sanitize_param(display_name)}"',
        sort="id",
    )
    return UserPreference.model_validate(record) if record else None
