"""SMTP delivery for member broadcast emails."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional, Protocol, Sequence

import aiosmtplib

from bookgroup.domain.errors import ConfigurationError, UpstreamError
from bookgroup.settings import Settings

logger = logging.getLogger(__name__)


def mask_email(email: str) -> str:
    return hashlib.sha256(email.lower().encode("utf-8")).hexdigest()[:12]


@dataclass(frozen=True)
class MailConfig:
    host: str
    from_address: str
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    tls: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "MailConfig":
        if not settings.smtp_host:
            raise ConfigurationError("smtp_host_not_configured")
        if not settings.email_from:
            raise ConfigurationError("email_from_not_configured")
        return cls(
            host=settings.smtp_host,
            from_address=settings.email_from,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            tls=settings.smtp_tls,
        )


@dataclass(frozen=True)
class OutgoingMessage:
    sender_name: str
    recipients: Sequence[str]
    subject: str
    body: str
    reply_to: Optional[str] = None


class Mailer(Protocol):
    async def send(self, message: OutgoingMessage) -> int:
        ...


class SmtpMailer:
    def __init__(self, config: MailConfig) -> None:
        self._config = config

    def build(self, message: OutgoingMessage) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((message.sender_name, self._config.from_address))
        msg["To"] = ", ".join(message.recipients)
        if message.reply_to:
            msg["Reply-To"] = message.reply_to
        msg["Subject"] = message.subject
        msg.set_content(message.body)
        return msg

    async def send(self, message: OutgoingMessage) -> int:
        """Hand the message to the relay; return the number of recipients."""
        # Resend uses STARTTLS on port 587; implicit TLS is port 465.
        start_tls = self._config.tls and self._config.port == 587
        use_tls = self._config.tls and self._config.port == 465
        try:
            await aiosmtplib.send(
                self.build(message),
                hostname=self._config.host,
                port=self._config.port,
                username=self._config.username,
                password=self._config.password,
                start_tls=start_tls,
                use_tls=use_tls,
            )
        except aiosmtplib.SMTPException as exc:
            logger.error("email relay rejected message error=%s", exc)
            raise UpstreamError(f"email_send_failed: {exc}") from exc
        logger.info(
            "email sent recipients=%s",
            [mask_email(address) for address in message.recipients],
        )
        return len(message.recipients)
