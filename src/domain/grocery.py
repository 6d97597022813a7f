"""Grocery list domain models."""

from datetime import datetime

from pydantic import BaseModel, Field


class GroceryItem(BaseModel):
    """Grocery list item data transfer object."""

    id: str = Field(..., description="Unique item ID from the record store")
    name: str = Field(..., description="Item name, matched exactly against expense descriptions")
    added_by_name: str = Field(..., description="Display name of the member who added the item")
    added_by_id: str | None = Field(default=None, description="Participant ID of the member who added the item")
    added_at: datetime = Field(..., description="When the item was added to the list")
