from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from books_api.database import get_db
from books_api.schemas.auth import ErrorResponse
from books_api.schemas.book import (
    BookRequest,
    BookResponse,
    BookWithOwnerResponse,
    BookMessageResponse,
)
from books_api.services.book_service import (
    create_book,
    list_books_with_owner,
    list_user_books,
    get_book_or_404,
    update_book,
    delete_book,
)
from books_api.utils.deps import get_current_identity
from books_api.utils.security import Identity

# 所有图书接口都需要 Bearer Token
router = APIRouter(
    prefix="/api/books",
    tags=["books"],
    responses={401: {"model": ErrorResponse}},
)


@router.post(
    "",
    response_model=BookMessageResponse,
    status_code=201,
    summary="Create a book",
    responses={400: {"model": ErrorResponse}},
)
async def create(
    body: BookRequest | None = None,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    body = body or BookRequest()
    book = await create_book(db, identity, body.title, body.author, body.year)
    return BookMessageResponse(
        message="Book added successfully",
        book=BookResponse.model_validate(book),
    )


@router.get("", response_model=list[BookWithOwnerResponse], summary="List all books")
async def list_books(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """所有用户的图书（含所有者），最新在前"""
    return await list_books_with_owner(db)


@router.get("/my", response_model=list[BookResponse], summary="List my books")
async def list_my_books(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    books = await list_user_books(db, identity)
    return [BookResponse.model_validate(b) for b in books]


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Get a book",
    responses={404: {"model": ErrorResponse}},
)
async def get_book(
    book_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    book = await get_book_or_404(db, book_id)
    return BookResponse.model_validate(book)


@router.put(
    "/{book_id}",
    response_model=BookMessageResponse,
    summary="Update a book",
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update(
    book_id: int,
    body: BookRequest | None = None,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """仅图书所有者可修改"""
    body = body or BookRequest()
    book = await update_book(db, identity, book_id, body.title, body.author, body.year)
    return BookMessageResponse(
        message="Book updated successfully",
        book=BookResponse.model_validate(book),
    )


@router.delete(
    "/{book_id}",
    response_model=BookMessageResponse,
    summary="Delete a book",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete(
    book_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """仅图书所有者可删除"""
    book = await delete_book(db, identity, book_id)
    return BookMessageResponse(
        message="Book deleted successfully",
        book=BookResponse.model_validate(book),
    )
