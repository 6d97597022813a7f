"""WhatsApp webhook payload parser."""

import re
from typing import Any

from pydantic import BaseModel, Field


def _clean_whatsapp_id(whatsapp_id: str) -> str | None:
    """Return cleaned phone number from a WhatsApp ID or None for non-phone IDs."""
    if not whatsapp_id:
        return None

    # Skip @lid format - these are linked IDs, not phone numbers
    if "@lid" in whatsapp_id:
        return None

    # Remove known WhatsApp suffixes
    clean = whatsapp_id
    for suffix in ("@c.us", "@s.whatsapp.net", "@g.us"):
        clean = clean.replace(suffix, "")

    # Validate it looks like a phone number (digits only, reasonable length)
    # E.164 numbers are 1-15 digits
    if not re.match(r"^\d{1,15}$", clean):
        return None

    return clean


class ParsedMessage(BaseModel):
    """Parsed WhatsApp message data."""

    message_id: str = Field(..., description="Unique message ID from WhatsApp")
    from_phone: str = Field(..., description="Chat the message came from, as E.164 phone (DMs) or group JID")
    sender_phone: str = Field(..., description="Phone of the member who wrote the message, in E.164 format")
    sender_name: str = Field(..., description="WhatsApp display name of the sender, falling back to the phone")
    text: str | None = Field(None, description="Text content of the message (None for media-only messages)")
    timestamp: str = Field(..., description="Message timestamp (Unix epoch as string)")
    is_group_message: bool = Field(False, description="True if message is from a group chat")
    group_id: str | None = Field(
        None, description="Group JID if this is a group message (e.g., 120363400136168625@g.us)"
    )


def _extract_sender_name(payload: dict[str, Any]) -> str | None:
    """Extract the sender's display name from the places WAHA engines put it."""
    data = payload.get("_data") or {}
    for candidate in (payload.get("notifyName"), data.get("notifyName"), data.get("pushName")):
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def parse_waha_webhook(data: dict[str, Any]) -> ParsedMessage | None:
    """Parse WAHA WhatsApp webhook JSON data.

    WAHA sends webhooks with structure:
    {
        "event": "message",
        "payload": {
            "id": "true_1234567890@c.us_ABC123",
            "from": "1234567890@c.us",
            "participant": "4915112345678@c.us",   # group messages only
            "body": "/balance",
            "timestamp": 1678900000,
            "_data": {"notifyName": "Anna", ...}
        }
    }

    Args:
        data: Parsed JSON webhook data

    Returns:
        ParsedMessage if valid webhook data, None otherwise
    """
    payload = data.get("payload", data)

    msg_id = payload.get("id")
    from_raw = payload.get("from")

    if not msg_id or not from_raw:
        return None

    if from_raw == "status@broadcast":
        return None

    # Our own outgoing messages are echoed back by some engines
    if payload.get("fromMe"):
        return None

    is_group_message = from_raw.endswith("@g.us")

    if is_group_message:
        clean_sender = _clean_whatsapp_id(payload.get("participant", ""))
        from_phone = from_raw
    else:
        clean_sender = _clean_whatsapp_id(from_raw)
        from_phone = f"+{clean_sender}" if clean_sender else ""

    if not clean_sender:
        return None

    sender_phone = f"+{clean_sender}"

    return ParsedMessage(
        message_id=msg_id,
        from_phone=from_phone,
        sender_phone=sender_phone,
        sender_name=_extract_sender_name(payload) or sender_phone,
        text=payload.get("body"),
        timestamp=str(payload.get("timestamp", "")),
        is_group_message=is_group_message,
        group_id=from_raw if is_group_message else None,
    )
