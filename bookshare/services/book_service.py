from __future__ import annotations

from bookshare.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bookshare.models.book import Book
from bookshare.repositories.book_repo import BookRepo
from bookshare.repositories.request_repo import RequestRepo
from bookshare.utils.transaction import atomic

REQUIRED_MESSAGE = "Title, author, ISBN, and published year are required"


def _text(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _year(value) -> int:
    # bool is an int subclass; floats must be whole numbers
    if isinstance(value, bool):
        raise ValidationError("Published year must be a whole number")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("Published year must be a whole number")
        return int(value)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Published year must be a whole number")


def _book_fields(data: dict) -> dict:
    """Normalise an incoming payload (camelCase or snake_case keys)."""
    fields = {
        "title": _text(data.get("title")),
        "author": _text(data.get("author")),
        "isbn": _text(data.get("isbn")),
        "published_year": data.get("published_year", data.get("publishedYear")),
        "description": _text(data.get("description")),
        "cover_image": _text(data.get("cover_image", data.get("coverImage"))),
    }
    if not fields["title"] or not fields["author"] or not fields["isbn"] or fields["published_year"] in (None, ""):
        raise ValidationError(REQUIRED_MESSAGE)
    fields["published_year"] = _year(fields["published_year"])
    return fields


class BookService:
    """Owner-scoped catalog operations. Availability is never changed here."""

    def __init__(self, session):
        self.session = session
        self.books = BookRepo(session)
        self.requests = RequestRepo(session)

    def list_books(self):
        return self.books.list_all()

    def list_user_books(self, owner_id: int):
        return self.books.list_by_owner(owner_id)

    def list_available(self):
        return self.books.list_available()

    def get_book(self, book_id: int) -> Book:
        book = self.books.get(book_id)
        if not book:
            raise NotFoundError("Book not found")
        return book

    def pending_request_of(self, book_id: int, viewer_id: int):
        return self.requests.find_pending(book_id, viewer_id)

    def pending_requests_of(self, viewer_id: int) -> dict:
        return self.requests.pending_by_requester(viewer_id)

    def create_book(self, data: dict, owner_id: int) -> Book:
        fields = _book_fields(data)

        with atomic(self.session):
            if self.books.get_by_isbn(fields["isbn"]):
                raise ConflictError("Book with this ISBN already exists")
            book = self.books.add(Book(user_id=owner_id, available=True, **fields))
        return book

    def _owned_for_change(self, book_id: int, requester_id: int, action: str) -> Book:
        book = self.books.get(book_id, for_update=True)
        if not book:
            raise NotFoundError("Book not found")
        if book.user_id != requester_id:
            raise ForbiddenError(f"You can only {action} books that you added")
        if not book.available:
            raise ConflictError(f"Cannot {action} a book that is currently borrowed")
        return book

    def update_book(self, book_id: int, data: dict, requester_id: int) -> Book:
        fields = _book_fields(data)

        with atomic(self.session):
            book = self._owned_for_change(book_id, requester_id, "update")
            if self.books.get_by_isbn(fields["isbn"], exclude_id=book.id):
                raise ConflictError("Another book with this ISBN already exists")
            for k, v in fields.items():
                setattr(book, k, v)
        return book

    def delete_book(self, book_id: int, requester_id: int) -> None:
        with atomic(self.session):
            book = self._owned_for_change(book_id, requester_id, "delete")
            if self.requests.has_pending_for_book(book.id):
                raise ConflictError("Cannot delete a book that has pending borrow requests")
            # answered requests and closed loans keep their rows, book reference set to NULL
            self.books.delete(book)
