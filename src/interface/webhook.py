"""WhatsApp webhook endpoints."""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request

from src.core.config import constants
from src.core.db_client import sanitize_param
from src.core.errors import DatabaseError
from src.core.logging import log_with_context
from src.interface import webhook_security, whatsapp_parser
from src.interface.command_parser import parse_command
from src.interface.deps import Deps
from src.interface.whatsapp_sender import SendMessageResult


router = APIRouter(prefix="/webhook", tags=["webhook"])
logger = logging.getLogger(__name__)


def get_deps(request: Request) -> Deps:
    """Return the dependencies attached to the app at startup."""
    return request.app.state.deps


@router.post("")
async def receive_webhook(request: Request, background_tasks: BackgroundTasks) -> dict[str, str]:
    """Receive and validate WAHA webhook POST requests.

    This endpoint:
    1. Parses JSON payload
    2. Performs security checks (shared secret, timestamp age)
    3. Returns 200 OK immediately
    4. Dispatches message processing to background tasks

    Args:
        request: FastAPI request object containing JSON data
        background_tasks: FastAPI BackgroundTasks for async processing

    Returns:
        Success status dictionary

    Raises:
        HTTPException: If payload is invalid or security checks fail
    """
    deps = get_deps(request)

    try:
        payload = await request.json()
    except Exception as e:
        raise HTTPException(status_code=constants.HTTP_BAD_REQUEST, detail="Invalid JSON payload") from e

    message = whatsapp_parser.parse_waha_webhook(payload)
    if not message:
        # Ignore non-message events (e.g., status updates, qr codes)
        return {"status": "ignored"}

    check = webhook_security.verify_webhook_request(
        timestamp_str=message.timestamp,
        received_secret=request.headers.get("X-Webhook-Secret"),
        expected_secret=deps.settings.webhook_secret,
    )

    if not check.ok:
        logger.warning(
            "Webhook security check failed: %s",
            check.reason,
            extra={"message_id": message.message_id, "phone": message.sender_phone},
        )
        raise HTTPException(status_code=check.status_code or constants.HTTP_BAD_REQUEST, detail=check.reason)

    background_tasks.add_task(process_webhook_message, payload, deps)

    return {"status": "received"}


async def _send_response(
    *, deps: Deps, message: whatsapp_parser.ParsedMessage, text: str
) -> SendMessageResult:
    """Send a response to a message, routing to group or individual as appropriate."""
    if message.is_group_message and message.group_id:
        return await deps.sender.send_group_message(to_group_id=message.group_id, text=text)
    return await deps.sender.send_text_message(to_phone=message.sender_phone, text=text)


async def _check_duplicate_message(*, deps: Deps, message_id: str) -> bool:
    """Check if message has already been processed."""
    existing_log = await deps.store.get_first_record(
        collection="processed_messages",
        filter_query=f'message_id = "{sanitize_param(message_id)}"',
    )
    if existing_log:
        logger.info("Message %s already processed, skipping", message_id)
        return True
    return False


async def _log_message_start(*, deps: Deps, message: whatsapp_parser.ParsedMessage) -> str:
    """Record that processing of a message started and return the log record id."""
    record = await deps.store.create_record(
        collection="processed_messages",
        data={
            "message_id": message.message_id,
            "from_phone": message.sender_phone,
            "processed_at": datetime.now().isoformat(),
            "success": False,
            "error_message": "Processing started",
        },
    )
    return record["id"]


async def _update_message_status(*, deps: Deps, log_id: str, success: bool, error: str | None = None) -> None:
    """Update the processed message status in the database."""
    await deps.store.update_record(
        collection="processed_messages",
        record_id=log_id,
        data={"success": success, "error_message": error if not success else None},
    )


async def _handle_text_message(*, deps: Deps, message: whatsapp_parser.ParsedMessage) -> None:
    """Run a command message through the router and send the reply."""
    command = parse_command(message.text, sender_id=message.sender_phone, sender_name=message.sender_name)
    if command is None:
        logger.debug("Ignoring non-command message", extra={"message_id": message.message_id})
        return

    if await _check_duplicate_message(deps=deps, message_id=message.message_id):
        return

    log_with_context(
        logger,
        "info",
        "Processing command message",
        message_id=message.message_id,
        participant_id=message.sender_phone,
        command=command.name,
    )
    log_id = await _log_message_start(deps=deps, message=message)

    reply = await deps.router.handle(command)
    if reply is None:
        await _update_message_status(deps=deps, log_id=log_id, success=True)
        return

    result = await _send_response(deps=deps, message=message, text=reply)
    if not result.success:
        logger.error("Failed to send response to %s: %s", message.sender_phone, result.error)
    await _update_message_status(deps=deps, log_id=log_id, success=result.success, error=result.error)


async def process_webhook_message(params: dict[str, Any], deps: Deps) -> None:
    """Process WAHA webhook message in background.

    Args:
        params: JSON payload from WAHA webhook
        deps: Shared dependencies
    """
    try:
        message = whatsapp_parser.parse_waha_webhook(params)
        if message and message.text:
            await _handle_text_message(deps=deps, message=message)
    except DatabaseError as e:
        # Bookkeeping of processed messages failed; the bot keeps serving later messages
        logger.error("Error processing webhook message: %s", e, exc_info=True)
    except Exception as e:
        logger.error("Unexpected webhook error (%s): %s", type(e).__name__, e, exc_info=True)
