"""Book list endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from bookgroup.api.deps import get_book_service
from bookgroup.api.security_deps import require_admin
from bookgroup.domain.books import schemas
from bookgroup.domain.books.service import BookService
from bookgroup.domain.members.schemas import Member

router = APIRouter(prefix="/api/books", tags=["books"])


@router.get("", response_model=schemas.BookListResponse, response_model_exclude_none=True)
async def list_books_endpoint(service: BookService = Depends(get_book_service)) -> schemas.BookListResponse:
	books, sha = await service.list_books()
	return schemas.BookListResponse(books=books, sha=sha)


@router.post(
	"",
	response_model=schemas.BookMutationResponse,
	response_model_exclude_none=True,
	status_code=status.HTTP_201_CREATED,
)
async def create_book_endpoint(
	payload: schemas.BookCreateRequest,
	service: BookService = Depends(get_book_service),
	_: Member = Depends(require_admin),
) -> schemas.BookMutationResponse:
	book, sha = await service.create_book(payload, payload.sha)
	return schemas.BookMutationResponse(book=book, sha=sha)


@router.put("", response_model=schemas.BookMutationResponse, response_model_exclude_none=True)
async def update_book_endpoint(
	payload: schemas.BookUpdateRequest,
	service: BookService = Depends(get_book_service),
	_: Member = Depends(require_admin),
) -> schemas.BookMutationResponse:
	book, sha = await service.update_book(payload.id, payload, payload.sha)
	return schemas.BookMutationResponse(book=book, sha=sha)


@router.delete("", response_model=schemas.BookDeleteResponse)
async def delete_book_endpoint(
	payload: schemas.BookDeleteRequest,
	service: BookService = Depends(get_book_service),
	_: Member = Depends(require_admin),
) -> schemas.BookDeleteResponse:
	removed, sha = await service.delete_book(payload.id, payload.sha)
	return schemas.BookDeleteResponse(deleted=removed.id, sha=sha)
