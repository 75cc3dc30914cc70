"""Update notifications: the hub, the event type and the bundled observers."""

from stockpile.notify.base import Observer, ObserverCategory, UpdateEvent
from stockpile.notify.file_logger import FileLogger
from stockpile.notify.hub import NotificationHub
from stockpile.notify.mail import MailMessenger

__all__ = [
    "FileLogger",
    "MailMessenger",
    "NotificationHub",
    "Observer",
    "ObserverCategory",
    "UpdateEvent",
]
