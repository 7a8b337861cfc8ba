import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from books_api.errors import ForbiddenError, NotFoundError, ValidationError
from books_api.models.book import Book
from books_api.models.user import User
from books_api.utils.security import Identity

logger = logging.getLogger(__name__)

BOOK_NOT_FOUND = "Book not found"
TEXT_MAX_LENGTH = 255  # 与 title / author 列宽一致
MAX_BOOK_ID = 2**31 - 1  # books.id 为 32 位整数


def _require_fields(title: str | None, author: str | None, year: int | None) -> None:
    if not title or not title.strip() or not author or not author.strip() or not year:
        raise ValidationError("Missing required fields")
    if len(title) > TEXT_MAX_LENGTH or len(author) > TEXT_MAX_LENGTH:
        raise ValidationError(f"Title and author must be at most {TEXT_MAX_LENGTH} characters")


async def create_book(
    db: AsyncSession,
    identity: Identity,
    title: str | None,
    author: str | None,
    year: int | None,
) -> Book:
    """创建图书，所有者取自已验证的调用者身份"""
    _require_fields(title, author, year)
    book = Book(title=title, author=author, year=year, user_id=identity.user_id)
    db.add(book)
    await db.flush()
    await db.refresh(book)
    logger.info(f"Book {book.id} created by user {identity.user_id}")
    return book


async def list_books_with_owner(db: AsyncSession) -> list[dict]:
    """全部图书 + 所有者用户名，按创建时间倒序"""
    result = await db.execute(
        select(Book, User.username)
        .join(User, Book.user_id == User.id)
        .order_by(Book.created_at.desc(), Book.id.desc())
    )
    return [
        {
            "id": book.id,
            "title": book.title,
            "author": book.author,
            "year": book.year,
            "created_at": book.created_at,
            "updated_at": book.updated_at,
            "owner_id": book.user_id,
            "owner_username": username,
        }
        for book, username in result.all()
    ]


async def list_user_books(db: AsyncSession, identity: Identity) -> list[Book]:
    """当前用户的图书，按创建时间倒序"""
    result = await db.execute(
        select(Book)
        .where(Book.user_id == identity.user_id)
        .order_by(Book.created_at.desc(), Book.id.desc())
    )
    return list(result.scalars().all())


async def get_book_by_id(db: AsyncSession, book_id: int) -> Book | None:
    if not 1 <= book_id <= MAX_BOOK_ID:
        return None  # 超出 books.id 列范围的 id 必然不存在
    result = await db.execute(select(Book).where(Book.id == book_id))
    return result.scalar_one_or_none()


async def get_book_or_404(db: AsyncSession, book_id: int) -> Book:
    book = await get_book_by_id(db, book_id)
    if book is None:
        raise NotFoundError(BOOK_NOT_FOUND)
    return book


async def _get_owned_book(db: AsyncSession, book_id: int, identity: Identity, action: str) -> Book:
    """查找图书并校验所有权：不存在 → 404，非所有者 → 403。

    每次修改都重新判定，不缓存授权结果；校验与后续写入是两条独立语句。
    """
    book = await get_book_or_404(db, book_id)
    if book.user_id != identity.user_id:
        logger.warning(f"User {identity.user_id} tried to {action} book {book_id} owned by {book.user_id}")
        raise ForbiddenError(f"Not authorized to {action} this book")
    return book


async def update_book(
    db: AsyncSession,
    identity: Identity,
    book_id: int,
    title: str | None,
    author: str | None,
    year: int | None,
) -> Book:
    """仅所有者可更新；updated_at 由 ORM 在 flush 时刷新"""
    _require_fields(title, author, year)
    book = await _get_owned_book(db, book_id, identity, "update")
    book.title = title
    book.author = author
    book.year = year
    await db.flush()
    await db.refresh(book)
    return book


async def delete_book(db: AsyncSession, identity: Identity, book_id: int) -> Book:
    """仅所有者可删除（物理删除），返回删除前的记录"""
    book = await _get_owned_book(db, book_id, identity, "delete")
    await db.delete(book)
    await db.flush()
    logger.info(f"Book {book_id} deleted by user {identity.user_id}")
    return book
