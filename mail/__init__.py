"""Outbound e-mail backends."""

from flask import Flask, current_app

from .abstract_mailer import AbstractMailer, MailMessage
from .console_mailer import ConsoleMailer
from .memory_mailer import MemoryMailer
from .smtp_mailer import SmtpMailer

_BACKENDS = {
    "console": ConsoleMailer,
    "memory": MemoryMailer,
    "smtp": SmtpMailer,
}


def init_mailer(app: Flask) -> AbstractMailer:
    """Create the configured mailer and register it on the application."""

    backend = str(app.config.get("MAIL_BACKEND", "console")).strip().lower()
    try:
        mailer_class = _BACKENDS[backend]
    except KeyError:
        raise ValueError(f"Unknown MAIL_BACKEND: {backend!r}")

    mailer = mailer_class.from_config(app.config, logger=app.logger)
    app.extensions["mailer"] = mailer
    return mailer


def get_mailer() -> AbstractMailer:
    return current_app.extensions["mailer"]


__all__ = [
    "AbstractMailer",
    "ConsoleMailer",
    "MailMessage",
    "MemoryMailer",
    "SmtpMailer",
    "get_mailer",
    "init_mailer",
]
