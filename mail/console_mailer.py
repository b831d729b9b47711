"""Mailer that writes messages to the application log."""

from .abstract_mailer import AbstractMailer, MailMessage


class ConsoleMailer(AbstractMailer):
    """Log messages instead of sending them; used in development."""

    def deliver(self, message: MailMessage) -> None:
        self.logger.info(
            "E-mail to=%s subject=%r\n%s", message.to, message.subject, message.html
        )
