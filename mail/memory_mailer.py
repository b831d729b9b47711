"""Mailer that keeps sent messages in memory."""

from __future__ import annotations

from .abstract_mailer import AbstractMailer, MailMessage


class MemoryMailer(AbstractMailer):
    """Record messages in ``outbox``; used by the test suite."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.outbox: list[MailMessage] = []

    def deliver(self, message: MailMessage) -> None:
        self.outbox.append(message)
