import logging
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import List, Optional

import aiosmtplib

from src.common.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Mailer:
    """
    Sends email through the SMTP server described by the settings.

    Usage:
        mailer = Mailer(settings)
        message_id = await mailer.send_email(subject, body, ["ops@example.com"])
    """

    def __init__(self, app_settings: Settings = default_settings):
        self.settings = app_settings

    @property
    def sender(self) -> str:
        return formataddr((self.settings.SMTP_FROM_NAME, self.settings.SMTP_FROM))

    def build_message(
        self,
        subject: str,
        body: str,
        recipients: List[str],
        html_body: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = ", ".join(recipients)
        message["Subject"] = subject
        if reply_to:
            message["Reply-To"] = reply_to
        message["Message-ID"] = make_msgid(domain=self.settings.SMTP_FROM.rpartition("@")[2] or None)
        message.set_content(body)

        # If HTML content is provided, add it as an alternative.
        if html_body:
            message.add_alternative(html_body, subtype="html")
        return message

    async def send_email(
        self,
        subject: str,
        body: str,
        recipients: List[str],
        html_body: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> str:
        """
        Sends an email asynchronously using aiosmtplib.

        Args:
            subject (str): The subject of the email.
            body (str): The plain text content of the email.
            recipients (List[str]): List of recipient email addresses.
            html_body (str): Optional HTML alternative of the body.
            reply_to (str): Optional Reply-To address.

        Returns:
            str: The Message-ID assigned to the sent message.
        """
        message = self.build_message(subject, body, recipients, html_body=html_body, reply_to=reply_to)
        secure = self.settings.SMTP_SECURE

        await aiosmtplib.send(
            message,
            hostname=self.settings.SMTP_HOST,
            port=self.settings.SMTP_PORT,
            username=self.settings.SMTP_USER,
            password=self.settings.SMTP_PASS,
            use_tls=secure,
            # None upgrades with STARTTLS only when the server offers it
            start_tls=False if secure else None,
            timeout=self.settings.SMTP_TIMEOUT,
        )
        message_id = message["Message-ID"]
        logger.debug("Email %s sent to %s", message_id, recipients)
        return message_id


def get_mailer() -> Mailer:
    return Mailer(default_settings)
