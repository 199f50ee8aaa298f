from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.core.settings import AppSettings, get_app_settings
from app.models.book import BookCondition, BookGenre
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.book import BookCreate, BookOut, BookPage, BookUpdate
from app.services.book_service import BookService, get_book_service

router = APIRouter(prefix="/books", tags=["books"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=BookOut,
)
def create_book(
    payload: BookCreate,
    current_user: User = Depends(get_current_user),
    service: BookService = Depends(get_book_service),
) -> BookOut:
    """List a book owned by the caller."""
    book = service.create_book(payload=payload, owner=current_user)
    return BookOut.model_validate(book)


@router.get(
    "",
    response_model=BookPage,
)
def browse_books(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    genre: Optional[BookGenre] = Query(default=None),
    condition: Optional[BookCondition] = Query(default=None),
    q: Optional[str] = Query(default=None, min_length=1),
    settings: AppSettings = Depends(get_app_settings),
    service: BookService = Depends(get_book_service),
) -> BookPage:
    """Return a page of available books, newest first."""
    page_size = limit or settings.books_page_size
    if page_size > settings.books_max_page_size:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "code": "limit_too_large",
                "message": f"limit cannot exceed {settings.books_max_page_size}.",
            },
        )

    books, total, pages = service.browse(
        page=page,
        limit=page_size,
        genre=genre,
        condition=condition,
        search=q,
    )
    return BookPage(
        books=[BookOut.model_validate(book) for book in books],
        page=page,
        pages=pages,
        total=total,
    )


@router.get("/mine", response_model=list[BookOut])
def list_my_books(
    current_user: User = Depends(get_current_user),
    service: BookService = Depends(get_book_service),
) -> list[BookOut]:
    """Return every listing owned by the caller, available or not."""
    return [BookOut.model_validate(book) for book in service.list_mine(current_user)]


@router.get("/user/{user_id}", response_model=list[BookOut])
def list_user_books(
    user_id: str,
    service: BookService = Depends(get_book_service),
) -> list[BookOut]:
    return [BookOut.model_validate(book) for book in service.list_by_owner(user_id)]


@router.get(
    "/{book_id}",
    response_model=BookOut,
)
def get_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> BookOut:
    """Retrieve a single book and count the view."""
    book = service.record_view(book_id)
    return BookOut.model_validate(book)


@router.patch(
    "/{book_id}",
    response_model=BookOut,
)
def update_book(
    book_id: str,
    payload: BookUpdate,
    current_user: User = Depends(get_current_user),
    service: BookService = Depends(get_book_service),
) -> BookOut:
    """Update a listing. Owner-only."""
    book = service.update_book(book_id=book_id, payload=payload, actor=current_user)
    return BookOut.model_validate(book)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_book(
    book_id: str,
    current_user: User = Depends(get_current_user),
    service: BookService = Depends(get_book_service),
) -> Response:
    """Delete a listing. Owner or admin."""
    service.delete_book(book_id=book_id, actor=current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
