"""Mailer abstraction layer."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    html: str
    sender: str


class AbstractMailer(ABC):
    """Interface for e-mail delivery backends."""

    def __init__(self, sender: str, logger: logging.Logger | None = None):
        self.sender = sender
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: Mapping, logger: logging.Logger | None = None) -> "AbstractMailer":
        return cls(sender=config.get("MAIL_DEFAULT_SENDER", "no-reply@blog.local"), logger=logger)

    def send(self, to: str, subject: str, html: str) -> MailMessage:
        """Build a message and hand it to the backend."""

        message = MailMessage(to=to, subject=subject, html=html, sender=self.sender)
        self.deliver(message)
        self.logger.info("Sent e-mail %r to %s", subject, to)
        return message

    @abstractmethod
    def deliver(self, message: MailMessage) -> None:
        """Deliver a fully built message."""
