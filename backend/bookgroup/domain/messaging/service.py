from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from bookgroup.domain.books.service import upcoming_books
from bookgroup.domain.books.schemas import Book
from bookgroup.domain.errors import ValidationError
from bookgroup.domain.members.schemas import Member
from bookgroup.domain.members.service import MemberService
from bookgroup.domain.messaging import schemas
from bookgroup.domain.messaging.mailer import Mailer, OutgoingMessage
from bookgroup.domain.store import JsonCollectionStore
from bookgroup.obs import metrics as obs_metrics
from bookgroup.settings import settings

logger = logging.getLogger(__name__)


def message_footer(sender: Member) -> str:
    contact = f" please email the webmaster {settings.webmaster_email}" if settings.webmaster_email else " please reply to let us know"
    return (
        f"\n\n-- Sent by {sender.display_name} via {settings.group_name}.\n"
        f"We are a small but vibrant group of readers in {settings.group_location}, website {settings.site_url}.\n"
        "If you don't want to be contacted, think this has been sent in error, or maliciously,"
        f"{contact}.\n"
    )


class MessageService:
    """Compose and send emails from one member to the notifiable members."""

    def __init__(
        self,
        members: MemberService,
        books: JsonCollectionStore[Book],
        mailer_factory,
    ) -> None:
        self._members = members
        self._books = books
        # Mail settings are only required when a message is actually sent.
        self._mailer_factory = mailer_factory

    async def message_data(self, sender: Member, now: Optional[datetime] = None) -> schemas.MessageDataResponse:
        recipients = await self._members.notifiable_members()
        books, _ = await self._books.fetch()
        upcoming = upcoming_books(books, now)
        return schemas.MessageDataResponse(
            sender=sender,
            recipients=recipients,
            next_book=upcoming[0] if upcoming else None,
        )

    async def send_message(self, sender: Member, payload: schemas.SendMessageRequest) -> int:
        subject = payload.subject.strip()
        body = payload.body.strip()
        if not subject or not body:
            raise ValidationError("subject_and_body_required")
        recipients = [email.strip() for email in payload.recipient_emails if email.strip()]
        if not recipients:
            raise ValidationError("recipients_required")

        allowed = {m.email.strip().lower() for m in await self._members.notifiable_members() if m.email}
        invalid = [email for email in recipients if email.lower() not in allowed]
        if invalid:
            raise ValidationError(f"invalid_recipients: {', '.join(invalid)}")

        mailer: Mailer = self._mailer_factory()
        message = OutgoingMessage(
            sender_name=f"{sender.display_name} (a member of {settings.group_name})",
            recipients=recipients,
            subject=subject,
            body=body + message_footer(sender),
            reply_to=sender.email,
        )
        sent = await mailer.send(message)
        obs_metrics.inc_message_sent(sent)
        logger.info("member message sent recipients=%s", sent)
        return sent
