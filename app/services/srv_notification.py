import logging
from typing import List
from app.helpers.enums import NotificationVariant
from app.schemas.sche_base import ToastMessage

logger = logging.getLogger(__name__)


class NotificationService:
    """Collects user-facing toasts raised while serving one request."""

    def __init__(self):
        self.messages: List[ToastMessage] = []

    def notify(self, title: str, description: str, variant: NotificationVariant = NotificationVariant.SUCCESS) -> None:
        message = ToastMessage(title=title, description=description, variant=variant)
        self.messages.append(message)
        logger.info(f"notify [{variant.value}] {title}: {description}")

    def success(self, description: str) -> None:
        self.notify('Success', description, NotificationVariant.SUCCESS)

    def error(self, description: str) -> None:
        self.notify('Error', description, NotificationVariant.DESTRUCTIVE)
