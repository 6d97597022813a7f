"""Checks applied to every incoming WAHA webhook before it is processed.

Two checks run in order: the shared secret header (when one is configured), then
the age of the message timestamp. Redelivered messages pass both checks; they are
skipped later by message ID.
"""

import logging
import secrets
from datetime import datetime
from typing import NamedTuple

from src.core.config import constants


logger = logging.getLogger(__name__)


class WebhookCheck(NamedTuple):
    """Outcome of a webhook check; ``status_code`` is the HTTP status to reject with."""

    ok: bool
    reason: str | None = None
    status_code: int | None = None


PASSED = WebhookCheck(ok=True)


def check_secret(received: str | None, expected: str | None) -> WebhookCheck:
    """Compare the X-Webhook-Secret header against the configured secret.

    No configured secret means every request passes.
    """
    if not expected:
        return PASSED

    if not received:
        logger.warning("Webhook rejected: secret header missing")
        return WebhookCheck(ok=False, reason="Missing webhook secret", status_code=401)

    if not secrets.compare_digest(received.encode(), expected.encode()):
        logger.warning("Webhook rejected: secret mismatch")
        return WebhookCheck(ok=False, reason="Invalid webhook secret", status_code=403)

    return PASSED


def check_message_age(
    timestamp_str: str | None,
    *,
    now: datetime | None = None,
    max_age_seconds: int = constants.WEBHOOK_MAX_AGE_SECONDS,
) -> WebhookCheck:
    """Reject messages older than ``max_age_seconds`` or that far in the future.

    Args:
        timestamp_str: Unix epoch seconds as sent by WAHA
        now: Reference time, defaults to the system clock
        max_age_seconds: Allowed distance from ``now`` in either direction

    Returns:
        WebhookCheck
    """
    try:
        sent_at = int(timestamp_str)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.warning("Webhook rejected: bad timestamp %r", timestamp_str)
        return WebhookCheck(ok=False, reason="Invalid timestamp format", status_code=constants.HTTP_BAD_REQUEST)

    age_seconds = int((now or datetime.now()).timestamp()) - sent_at

    if age_seconds < -max_age_seconds:
        logger.warning("Webhook rejected: timestamp %s is in the future", sent_at)
        return WebhookCheck(ok=False, reason="Timestamp is in the future", status_code=constants.HTTP_BAD_REQUEST)

    if age_seconds > max_age_seconds:
        logger.warning(
            "Webhook rejected: message is %ds old",
            age_seconds,
            extra={"webhook_age_seconds": age_seconds, "max_age_seconds": max_age_seconds},
        )
        return WebhookCheck(
            ok=False,
            reason=f"Webhook expired (age: {age_seconds}s)",
            status_code=constants.HTTP_BAD_REQUEST,
        )

    return PASSED


def verify_webhook_request(
    *,
    timestamp_str: str | None,
    received_secret: str | None,
    expected_secret: str | None,
    now: datetime | None = None,
) -> WebhookCheck:
    """Run the secret check, then the age check, returning the first failure."""
    secret_check = check_secret(received_secret, expected_secret)
    if not secret_check.ok:
        return secret_check
    return check_message_age(timestamp_str, now=now)
