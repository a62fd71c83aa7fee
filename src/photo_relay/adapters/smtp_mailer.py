"""SMTP mailer adapter."""

import asyncio
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from photo_relay.services.delivery import MailAttachment, Mailer


@dataclass
class SmtpMailer(Mailer):
    """Mailer that sends through an SMTP server over implicit TLS."""

    host: str
    port: int
    username: str
    password: str
    timeout: float = 20

    async def send(
        self, recipient: str, subject: str, body: str, attachment: MailAttachment
    ) -> None:
        """Send the email from a worker thread."""
        message = self.build_message(recipient, subject, body, attachment)
        await asyncio.to_thread(self._deliver, message)

    def build_message(
        self, recipient: str, subject: str, body: str, attachment: MailAttachment
    ) -> EmailMessage:
        """Build the MIME message with the attachment."""
        message = EmailMessage()
        message["From"] = self.username
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(body)
        message.add_attachment(
            attachment.content,
            maintype=attachment.maintype,
            subtype=attachment.subtype,
            filename=attachment.filename,
        )
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.login(self.username, self.password)
            smtp.send_message(message)
