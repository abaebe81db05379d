from __future__ import annotations

from datetime import datetime

from flask import current_app

from bookshare.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bookshare.models.borrow_request import ACCEPTED, PENDING, REJECTED, STATUSES, BorrowRequest
from bookshare.repositories.book_repo import BookRepo
from bookshare.repositories.request_repo import RequestRepo
from bookshare.services.lending_service import REQUEST_MODE, LendingService
from bookshare.utils.transaction import atomic


class RequestService:
    def __init__(self, session, lending: LendingService):
        self.session = session
        self.lending = lending
        self.books = BookRepo(session)
        self.requests = RequestRepo(session)

    def create_request(self, book_id: int, requester_id: int, message: str | None = None,
                       now: datetime | None = None) -> BorrowRequest:
        if self.lending.mode != REQUEST_MODE:
            raise ForbiddenError("Borrow requests are disabled, borrow the book directly")
        message = (message or "").strip() or None

        with atomic(self.session):
            # lock the book so an accept cannot slip in between the checks and the insert
            book = self.books.get(book_id, for_update=True)
            if not book:
                raise NotFoundError("Book not found")
            if book.user_id == requester_id:
                raise ForbiddenError("You cannot borrow your own book")
            if not book.available:
                raise ConflictError("Book is not available for borrowing")
            if self.requests.find_pending(book.id, requester_id):
                raise ConflictError("You already have a pending request for this book")

            req = self.requests.add(BorrowRequest(
                book_id=book.id,
                requester_id=requester_id,
                owner_id=book.user_id,
                status=PENDING,
                message=message,
                request_date=now or datetime.utcnow(),
            ))

        current_app.logger.info(f"[lending] Request {req.id} sent by user {requester_id} for book {book_id}")
        return req

    def list_received(self, owner_id: int, status: str = PENDING):
        if status not in STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(STATUSES)}")
        return self.requests.list_received(owner_id, status)

    def list_sent(self, requester_id: int):
        return self.requests.list_sent(requester_id)

    def respond(self, request_id: int, owner_id: int, decision, now: datetime | None = None):
        """Accept or reject a pending request.

        Returns an AcceptResult for an acceptance, the request for a rejection.
        """
        if decision == ACCEPTED:
            return self.lending.accept(request_id, owner_id, now=now)
        if decision == REJECTED:
            return self.lending.reject(request_id, owner_id, now=now)
        raise ValidationError("Status must be 'accepted' or 'rejected'")

    def cancel(self, request_id: int, requester_id: int) -> None:
        with atomic(self.session):
            req = self.requests.get_pending_for_requester(request_id, requester_id)
            if not req or not self.requests.delete_if_pending(req.id):
                raise NotFoundError("Borrow request not found or already processed")

        current_app.logger.info(f"[lending] Request {request_id} cancelled by user {requester_id}")
