from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from flask import current_app

from bookshare.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bookshare.models.borrow_request import ACCEPTED, REJECTED, BorrowRequest
from bookshare.models.loan import Loan
from bookshare.repositories.book_repo import BookRepo
from bookshare.repositories.loan_repo import LoanRepo
from bookshare.repositories.request_repo import RequestRepo
from bookshare.utils.dates import LOAN_PERIOD_DAYS, compute_due_date
from bookshare.utils.transaction import atomic

REQUEST_MODE = "request"
DIRECT_MODE = "direct"


@dataclass
class AcceptResult:
    request: BorrowRequest
    loan: Loan
    auto_rejected: list[BorrowRequest] = field(default_factory=list)


class LendingService:
    """State transitions that touch book availability and loans.

    Every transition runs inside a single transaction: the rows it reads
    are locked (SELECT ... FOR UPDATE) and each write is guarded on the
    state it expects, so two concurrent accepts on the same book cannot
    both succeed.
    """

    def __init__(self, session, loan_days: int = LOAN_PERIOD_DAYS, mode: str = REQUEST_MODE):
        self.session = session
        self.loan_days = loan_days
        self.mode = mode
        self.books = BookRepo(session)
        self.requests = RequestRepo(session)
        self.loans = LoanRepo(session)

    @classmethod
    def from_config(cls, session, config):
        return cls(
            session,
            loan_days=config.get("LOAN_PERIOD_DAYS", LOAN_PERIOD_DAYS),
            mode=config.get("LENDING_MODE", REQUEST_MODE),
        )

    def _new_loan(self, user_id: int, book_id: int, now: datetime, request_id: int | None = None) -> Loan:
        return self.loans.add(Loan(
            user_id=user_id,
            book_id=book_id,
            request_id=request_id,
            borrowed_at=now,
            due_date=compute_due_date(now, self.loan_days),
        ))

    def accept(self, request_id: int, owner_id: int, now: datetime | None = None) -> AcceptResult:
        now = now or datetime.utcnow()

        with atomic(self.session):
            # 1) request still pending, book still available
            req = self.requests.get_pending_for_owner(request_id, owner_id, for_update=True)
            if not req:
                raise NotFoundError("Borrow request not found or already processed")

            book = self.books.get(req.book_id, for_update=True)
            if book is None or not book.available:
                raise ConflictError("Book is no longer available for borrowing")

            # 2) accept
            if not self.requests.mark_if_pending(req.id, ACCEPTED, now):
                raise ConflictError("Borrow request was processed concurrently")

            # 3) open the loan
            loan = self._new_loan(req.requester_id, book.id, now, request_id=req.id)

            # 4) book leaves the shelf
            if not self.books.set_available(book.id, False):
                raise ConflictError("Book is no longer available for borrowing")

            # 5) close out competing requests
            siblings = self.requests.reject_other_pending(book.id, req.id, now)

        if siblings:
            current_app.logger.info(
                f"[lending] Rejecting {len(siblings)} other pending requests for book {book.id}"
            )
        current_app.logger.info(
            f"[lending] Request {req.id} accepted: loan {loan.id} for user {req.requester_id}, due {loan.due_date}"
        )
        return AcceptResult(request=req, loan=loan, auto_rejected=list(siblings))

    def reject(self, request_id: int, owner_id: int, now: datetime | None = None) -> BorrowRequest:
        now = now or datetime.utcnow()

        with atomic(self.session):
            req = self.requests.get_pending_for_owner(request_id, owner_id, for_update=True)
            if not req:
                raise NotFoundError("Borrow request not found or already processed")
            if not self.requests.mark_if_pending(req.id, REJECTED, now):
                raise NotFoundError("Borrow request not found or already processed")

        current_app.logger.info(f"[lending] Request {req.id} rejected by owner {owner_id}")
        return req

    def return_book(self, book_id: int, user_id: int, now: datetime | None = None) -> Loan:
        now = now or datetime.utcnow()

        with atomic(self.session):
            book = self.books.get(book_id, for_update=True)
            if not book:
                raise NotFoundError("Book not found")

            loan = self.loans.find_open(book_id, user_id, for_update=True)
            if not loan or not self.loans.close_if_open(loan.id, now):
                raise ValidationError("You have not borrowed this book")

            if not self.books.set_available(book_id, True):
                # open loan with an available book: refuse rather than persist a broken state
                raise ConflictError("Book availability is out of sync with its loans")

        current_app.logger.info(f"[lending] Book {book_id} returned by user {user_id} (loan {loan.id})")
        return loan

    def borrow(self, book_id: int, user_id: int, now: datetime | None = None) -> Loan:
        """Instant borrow without an approval step (direct lending mode)."""
        if self.mode != DIRECT_MODE:
            raise ForbiddenError("Direct borrowing is disabled, send a borrow request instead")
        now = now or datetime.utcnow()

        with atomic(self.session):
            book = self.books.get(book_id, for_update=True)
            if not book:
                raise NotFoundError("Book not found")
            if book.user_id == user_id:
                raise ForbiddenError("You cannot borrow your own book")
            if not book.available or not self.books.set_available(book_id, False):
                raise ConflictError("Book is not available for borrowing")

            loan = self._new_loan(user_id, book_id, now)

        current_app.logger.info(f"[lending] Book {book_id} borrowed directly by user {user_id} (loan {loan.id})")
        return loan

    def borrowed_books(self, user_id: int):
        return self.loans.list_open_by_user(user_id)

    def loan_history(self, user_id: int):
        return self.loans.list_history_by_user(user_id)

    def stats(self, user_id: int) -> dict:
        return {
            "ownedBooks": self.books.count_by_owner(user_id),
            "borrowedBooks": self.loans.count_open_by_user(user_id),
            "pendingRequests": self.requests.count_pending_for_owner(user_id),
        }
