from books_api.models.user import User
from books_api.models.book import Book

__all__ = [
    "User",
    "Book",
]
