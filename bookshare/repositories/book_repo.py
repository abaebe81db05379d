from __future__ import annotations

from sqlalchemy import func, select, update

from bookshare.models.book import Book


class BookRepo:
    def __init__(self, session):
        self.session = session

    def get(self, book_id: int, for_update: bool = False):
        q = select(Book).where(Book.id == book_id)
        if for_update:
            q = q.with_for_update().execution_options(populate_existing=True)
        return self.session.execute(q).scalar_one_or_none()

    def get_by_isbn(self, isbn: str, exclude_id: int | None = None):
        q = select(Book).where(Book.isbn == isbn)
        if exclude_id is not None:
            q = q.where(Book.id != exclude_id)
        return self.session.execute(q).scalars().first()

    def list_all(self):
        return self.session.execute(select(Book).order_by(Book.title.asc())).scalars().all()

    def list_by_owner(self, owner_id: int):
        q = select(Book).where(Book.user_id == owner_id).order_by(Book.created_at.desc(), Book.id.desc())
        return self.session.execute(q).scalars().all()

    def list_available(self):
        q = select(Book).where(Book.available.is_(True)).order_by(Book.title.asc())
        return self.session.execute(q).scalars().all()

    def count_by_owner(self, owner_id: int) -> int:
        q = select(func.count(Book.id)).where(Book.user_id == owner_id)
        return self.session.execute(q).scalar_one()

    def add(self, book: Book):
        self.session.add(book)
        self.session.flush()
        return book

    def delete(self, book: Book):
        self.session.delete(book)
        self.session.flush()

    def set_available(self, book_id: int, available: bool) -> bool:
        """Flip availability only if it currently holds the opposite value.

        Returns False when another transaction got there first.
        """
        result = self.session.execute(
            update(Book)
            .where(Book.id == book_id, Book.available == (not available))
            .values(available=available)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1
