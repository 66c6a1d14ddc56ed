from __future__ import annotations

from typing import List, Optional

from bookgroup.domain.books.schemas import Book
from bookgroup.domain.common import CamelModel
from bookgroup.domain.members.schemas import Member


class MessageDataResponse(CamelModel):
    sender: Member
    recipients: List[Member]
    next_book: Optional[Book] = None


class SendMessageRequest(CamelModel):
    subject: str = ""
    body: str = ""
    recipient_emails: List[str] = []


class SendMessageResponse(CamelModel):
    sent: int
