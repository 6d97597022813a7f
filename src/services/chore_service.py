"""Chore service for adding, assigning, completing and listing chores."""

import logging
from datetime import datetime

from src.core.db_client import RecordStore, sanitize_param
from src.core.logging import span
from src.domain.chore import Chore, ChoreStatus
from src.services import user_service


logger = logging.getLogger(__name__)

COLLECTION = "chores"


async def _create_chore(
    *,
    store: RecordStore,
    description: str,
    assigned_to_name: str,
    assigned_to_id: str | None,
    assigned_by_id: str | None,
) -> Chore:
    record = await store.create_record(
        collection=COLLECTION,
        data={
            "description": description,
            "assigned_to_name": assigned_to_name,
            "assigned_to_id": assigned_to_id,
            "assigned_by_id": assigned_by_id,
            "status": ChoreStatus.PENDING,
            "assigned_at": datetime.now().isoformat(),
        },
    )
    return Chore.model_validate(record)


async def add_chore(
    *,
    store: RecordStore,
    description: str,
    participant_id: str,
    participant_name: str,
) -> Chore:
    """Record a chore the issuer takes on themselves.

    Args:
        store: Record store
        description: What needs doing
        participant_id: Issuer participant ID
        participant_name: Issuer display name

    Returns:
        Created chore in PENDING status
    """
    with span("chore_service.add_chore"):
        chore = await _create_chore(
            store=store,
            description=description,
            assigned_to_name=participant_name,
            assigned_to_id=participant_id,
            assigned_by_id=participant_id,
        )
        logger.info(f"Added chore '{description}'", extra={"participant_id": participant_id})
        return chore


async def _resolve_assignee(*, store: RecordStore, mention: str) -> tuple[str | None, str]:
    """Map an @mention to (participant ID, display name).

    Tagging a member in WhatsApp puts their phone digits in the message text; a
    typed name is matched against stored display names.
    """
    if mention.isdigit():
        participant_id = f"+{mention}"
        user = await user_service.get_user(store=store, participant_id=participant_id)
        return participant_id, user.display_name if user else mention

    user = await user_service.find_user_by_name(store=store, display_name=mention)
    return (user.participant_id if user else None), mention


async def assign_chore(*, store: RecordStore, description: str, mention: str) -> Chore:
    """Assign a chore to the member named by an @mention.

    ``assigned_to_id`` is set whenever the mention resolves to a member, so the
    chore stays theirs across display name changes. ``assigned_by_id`` stays empty.

    Args:
        store: Record store
        description: What needs doing
        mention: Text after the ``@``, either phone digits or a display name

    Returns:
        Created chore in PENDING status
    """
    with span("chore_service.assign_chore"):
        assigned_to_id, assigned_to_name = await _resolve_assignee(store=store, mention=mention)
        chore = await _create_chore(
            store=store,
            description=description,
            assigned_to_name=assigned_to_name,
            assigned_to_id=assigned_to_id,
            assigned_by_id=None,
        )
        logger.info(
            f"Assigned chore '{description}' to {assigned_to_name}", extra={"participant_id": assigned_to_id}
        )
        return chore


async def complete_chore(
    *,
    store: RecordStore,
    description: str,
    participant_id: str,
    participant_name: str,
) -> Chore | None:
    """Mark the oldest pending chore with this description assigned to the member as completed.

    Chores are matched on the assignee's participant ID. Chores whose assignee was
    only known by name fall back to matching the member's display name.

    Args:
        store: Record store
        description: Exact chore description
        participant_id: Participant ID of the member completing the chore
        participant_name: Current display name of that member

    Returns:
        The completed chore, or None if no pending chore matched
    """
    with span("chore_service.complete_chore"):
        pending = f'description = "{sanitize_param(description)}" && status = "{ChoreStatus.PENDING}"'

        record = await store.get_first_record(
            collection=COLLECTION,
            filter_query=f'{pending} && assigned_to_id = "{sanitize_param(participant_id)}"',
            sort="assigned_at",
        )
        if not record:
            by_name = await store.list_records(
                collection=COLLECTION,
                filter_query=f'{pending} && assigned_to_name = "{sanitize_param(participant_name)}"',
                sort="assigned_at",
            )
            record = next((r for r in by_name if not r.get("assigned_to_id")), None)

        if not record:
            logger.info(f"No pending chore '{description}' for {participant_name}")
            return None

        updated = await store.update_record(
            collection=COLLECTION,
            record_id=record["id"],
            data={"status": ChoreStatus.COMPLETED},
        )
        logger.info(f"Completed chore '{description}'", extra={"participant_id": participant_id})
        return Chore.model_validate(updated)


async def list_pending_chores(*, store: RecordStore) -> list[Chore]:
    """List pending chores, most recently assigned first."""
    with span("chore_service.list_pending_chores"):
        records = await store.list_records(
            collection=COLLECTION,
            filter_query=f'status = "{ChoreStatus.PENDING}"',
            sort="-assigned_at",
        )
        logger.debug(f"Retrieved {len(records)} pending chores")
        return [Chore.model_validate(record) for record in records]
