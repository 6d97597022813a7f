"""Process-wide collaborators shared by the webhook handlers."""

from dataclasses import dataclass

from src.core.config import Settings
from src.core.db_client import RecordStore
from src.interface.command_router import CommandRouter
from src.interface.whatsapp_sender import WhatsAppSender


@dataclass
class Deps:
    """Dependencies constructed once at startup and handed to every request."""

    settings: Settings
    store: RecordStore
    router: CommandRouter
    sender: WhatsAppSender
