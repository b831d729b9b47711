"""SMTP mail delivery."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Mapping

from .abstract_mailer import AbstractMailer, MailMessage


class SmtpMailer(AbstractMailer):
    """Send HTML messages through an SMTP relay."""

    def __init__(
        self,
        sender: str,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        logger: logging.Logger | None = None,
    ):
        super().__init__(sender, logger=logger)
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls

    @classmethod
    def from_config(cls, config: Mapping, logger: logging.Logger | None = None) -> "SmtpMailer":
        return cls(
            sender=config.get("MAIL_DEFAULT_SENDER", "no-reply@blog.local"),
            host=config.get("MAIL_SERVER", "localhost"),
            port=int(config.get("MAIL_PORT", 587)),
            username=config.get("MAIL_USERNAME"),
            password=config.get("MAIL_PASSWORD"),
            use_tls=bool(config.get("MAIL_USE_TLS", True)),
            logger=logger,
        )

    def deliver(self, message: MailMessage) -> None:
        email = EmailMessage()
        email["From"] = message.sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.html, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(email)
