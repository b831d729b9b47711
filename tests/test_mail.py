"""Tests for the mail backends."""

from __future__ import annotations

import logging
from unittest import mock

import pytest
from flask import Flask

from mail import ConsoleMailer, MemoryMailer, SmtpMailer, init_mailer


def test_memory_mailer_records_messages():
    mailer = MemoryMailer(sender="blog@example.com")

    message = mailer.send("to@example.com", "Hello", "<p>Hi</p>")

    assert mailer.outbox == [message]
    assert message.sender == "blog@example.com"


def test_console_mailer_logs_body(caplog):
    logger = logging.getLogger("tests.mail")
    mailer = ConsoleMailer(sender="blog@example.com", logger=logger)

    with caplog.at_level(logging.INFO, logger="tests.mail"):
        mailer.send("to@example.com", "Subject line", "<p>Body</p>")

    assert "<p>Body</p>" in caplog.text
    assert "Subject line" in caplog.text


def test_smtp_mailer_sends_html_message():
    mailer = SmtpMailer(
        sender="blog@example.com",
        host="smtp.example.com",
        port=2525,
        username="user",
        password="pw",
    )

    with mock.patch("mail.smtp_mailer.smtplib.SMTP") as smtp_class:
        mailer.send("to@example.com", "Subject", "<p>Hi</p>")

    smtp_class.assert_called_once_with("smtp.example.com", 2525, timeout=30)
    smtp = smtp_class.return_value.__enter__.return_value
    smtp.starttls.assert_called_once()
    smtp.login.assert_called_once_with("user", "pw")
    sent = smtp.send_message.call_args[0][0]
    assert sent["To"] == "to@example.com"
    assert sent.get_content_type() == "text/html"


def test_init_mailer_rejects_unknown_backend():
    app = Flask(__name__)
    app.config["MAIL_BACKEND"] = "pigeon"

    with pytest.raises(ValueError):
        init_mailer(app)
