"""Grocery list service."""

import logging
from datetime import datetime

from src.core.db_client import RecordStore, sanitize_param
from src.core.logging import span
from src.domain.grocery import GroceryItem


logger = logging.getLogger(__name__)

COLLECTION = "groceries"


async def add_grocery(
    *,
    store: RecordStore,
    name: str,
    added_by_name: str,
    added_by_id: str | None = None,
) -> GroceryItem:
    """Add an item to the grocery list.

    Duplicates are allowed; each call creates a separate entry.

    Args:
        store: Record store
        name: Item name
        added_by_name: Display name of the member adding the item
        added_by_id: Participant ID of the member adding the item

    Returns:
        Created grocery item
    """
    with span("grocery_service.add_grocery"):
        record = await store.create_record(
            collection=COLLECTION,
            data={
                "name": name,
                "added_by_name": added_by_name,
                "added_by_id": added_by_id,
                "added_at": datetime.now().isoformat(),
            },
        )
        logger.info(f"Added to grocery list: {name}", extra={"participant_id": added_by_id})
        return GroceryItem.model_validate(record)


async def list_groceries(*, store: RecordStore) -> list[GroceryItem]:
    """Get the grocery list, most recently added first."""
    with span("grocery_service.list_groceries"):
        records = await store.list_records(collection=COLLECTION, sort="-added_at")
        logger.debug(f"Retrieved {len(records)} grocery items")
        return [GroceryItem.model_validate(record) for record in records]


async def remove_grocery_by_name(*, store: RecordStore, name: str) -> bool:
    """Remove the first grocery item whose name matches exactly (case-sensitive).

    Args:
        store: Record store
        name: Exact item name

    Returns:
        True if an item was removed, False if none matched
    """
    with span("grocery_service.remove_grocery_by_name"):
        item = await store.get_first_record(
            collection=COLLECTION,
            filter_query=f'name = "{sanitize_param(name)}"',
        )
        if not item:
            return False

        await store.delete_record(collection=COLLECTION, record_id=item["id"])
        logger.info(f"Removed from grocery list: {name}")
        return True
