"""Chore domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class ChoreStatus(StrEnum):
    """Chore lifecycle status. The only transition is PENDING -> COMPLETED."""

    PENDING = "pending"
    COMPLETED = "completed"


class Chore(BaseModel):
    """Chore data transfer object."""

    id: str = Field(..., description="Unique chore ID from the record store")
    description: str = Field(..., description="What needs doing (e.g., 'Take out trash')")
    assigned_to_name: str = Field(..., description="Display name of the member responsible")
    assigned_to_id: str | None = Field(
        default=None, description="Participant ID of the member responsible, None when only a name is known"
    )
    assigned_by_id: str | None = Field(
        default=None, description="Issuer participant ID for self-assigned chores, None when assigned to someone else"
    )
    status: ChoreStatus = Field(default=ChoreStatus.PENDING, description="Current chore status")
    assigned_at: datetime = Field(..., description="When the chore was created")
