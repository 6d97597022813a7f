"""User preference domain models."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


# Constants for validation
MAX_EMOJI_LENGTH = 16


class UserPreference(BaseModel):
    """Per-member display preferences, one record per participant."""

    id: str = Field(..., description="Unique record ID from the record store")
    participant_id: str = Field(..., description="Stable identity of the member (E.164 phone number)")
    display_name: str = Field(..., description="Name shown in chat replies")
    emoji: str = Field(..., description="Emoji glyph identifying the member in lists and reports")
    updated_at: datetime = Field(..., description="When the preference was last written")

    @field_validator("emoji")
    @classmethod
    def validate_emoji_usable(cls, v: str) -> str:
        """Validate the emoji is a short, non-empty string."""
        v = v.strip()

        if not v:
            raise ValueError("Emoji cannot be empty")

        if len(v) > MAX_EMOJI_LENGTH:
            raise ValueError(f"Emoji too long (max {MAX_EMOJI_LENGTH} characters)")

        return v
