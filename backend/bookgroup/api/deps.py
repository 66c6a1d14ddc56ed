"""FastAPI dependency providers wiring services to their collaborators."""

from __future__ import annotations

import httpx
from fastapi import Depends

from bookgroup.domain.books.schemas import Book
from bookgroup.domain.books.service import BookService
from bookgroup.domain.covers.finder import CoverFinder
from bookgroup.domain.covers.sources import default_sources
from bookgroup.domain.members.schemas import Member
from bookgroup.domain.members.service import MemberService
from bookgroup.domain.messaging.mailer import MailConfig, SmtpMailer
from bookgroup.domain.messaging.service import MessageService
from bookgroup.domain.store import ContentsClient, JsonCollectionStore
from bookgroup.infra import http as http_infra
from bookgroup.infra.github import GitHubConfig, GitHubContentsClient
from bookgroup.settings import settings


def get_http_client() -> httpx.AsyncClient:
	return http_infra.get_client()


def get_contents_client(http: httpx.AsyncClient = Depends(get_http_client)) -> ContentsClient:
	return GitHubContentsClient(GitHubConfig.from_settings(settings), http)


def get_book_store(client: ContentsClient = Depends(get_contents_client)) -> JsonCollectionStore[Book]:
	return JsonCollectionStore(client, settings.books_path, Book, name="books")


def get_member_store(client: ContentsClient = Depends(get_contents_client)) -> JsonCollectionStore[Member]:
	return JsonCollectionStore(client, settings.members_path, Member, name="members")


def get_cover_finder(http: httpx.AsyncClient = Depends(get_http_client)) -> CoverFinder:
	return CoverFinder(default_sources(http))


def get_book_service(
	store: JsonCollectionStore[Book] = Depends(get_book_store),
	finder: CoverFinder = Depends(get_cover_finder),
) -> BookService:
	return BookService(store, finder)


def get_member_service(store: JsonCollectionStore[Member] = Depends(get_member_store)) -> MemberService:
	return MemberService(store)


def get_mailer_factory():
	return lambda: SmtpMailer(MailConfig.from_settings(settings))


def get_message_service(
	members: MemberService = Depends(get_member_service),
	books: JsonCollectionStore[Book] = Depends(get_book_store),
	mailer_factory=Depends(get_mailer_factory),
) -> MessageService:
	return MessageService(members, books, mailer_factory)
