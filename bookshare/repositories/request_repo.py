from sqlalchemy import delete, func, select, update

from bookshare.models.borrow_request import BorrowRequest, PENDING, REJECTED


class RequestRepo:
    def __init__(self, session):
        self.session = session

    def get_pending_for_owner(self, request_id: int, owner_id: int, for_update: bool = False):
        q = select(BorrowRequest).where(
            BorrowRequest.id == request_id,
            BorrowRequest.owner_id == owner_id,
            BorrowRequest.status == PENDING,
        )
        if for_update:
            q = q.with_for_update().execution_options(populate_existing=True)
        return self.session.execute(q).scalar_one_or_none()

    def get_pending_for_requester(self, request_id: int, requester_id: int):
        q = select(BorrowRequest).where(
            BorrowRequest.id == request_id,
            BorrowRequest.requester_id == requester_id,
            BorrowRequest.status == PENDING,
        )
        return self.session.execute(q).scalar_one_or_none()

    def find_pending(self, book_id: int, requester_id: int):
        q = select(BorrowRequest).where(
            BorrowRequest.book_id == book_id,
            BorrowRequest.requester_id == requester_id,
            BorrowRequest.status == PENDING,
        )
        return self.session.execute(q).scalars().first()

    def pending_by_requester(self, requester_id: int):
        """book_id -> pending request of this requester."""
        q = select(BorrowRequest).where(
            BorrowRequest.requester_id == requester_id,
            BorrowRequest.status == PENDING,
        )
        return {r.book_id: r for r in self.session.execute(q).scalars()}

    def has_pending_for_book(self, book_id: int) -> bool:
        q = select(BorrowRequest.id).where(
            BorrowRequest.book_id == book_id,
            BorrowRequest.status == PENDING,
        ).limit(1)
        return self.session.execute(q).first() is not None

    def list_received(self, owner_id: int, status: str):
        q = (
            select(BorrowRequest)
            .where(BorrowRequest.owner_id == owner_id, BorrowRequest.status == status)
            .order_by(BorrowRequest.request_date.desc(), BorrowRequest.id.desc())
        )
        return self.session.execute(q).scalars().all()

    def list_sent(self, requester_id: int):
        q = (
            select(BorrowRequest)
            .where(BorrowRequest.requester_id == requester_id)
            .order_by(BorrowRequest.request_date.desc(), BorrowRequest.id.desc())
        )
        return self.session.execute(q).scalars().all()

    def count_pending_for_owner(self, owner_id: int) -> int:
        q = select(func.count(BorrowRequest.id)).where(
            BorrowRequest.owner_id == owner_id,
            BorrowRequest.status == PENDING,
        )
        return self.session.execute(q).scalar_one()

    def add(self, req: BorrowRequest):
        self.session.add(req)
        self.session.flush()
        return req

    def mark_if_pending(self, request_id: int, status: str, responded_at) -> bool:
        """Guarded status change: only applies while the row is still pending."""
        result = self.session.execute(
            update(BorrowRequest)
            .where(BorrowRequest.id == request_id, BorrowRequest.status == PENDING)
            .values(status=status, response_date=responded_at)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    def reject_other_pending(self, book_id: int, keep_id: int, responded_at):
        """Reject every other pending request on the book; returns the rejected rows."""
        siblings = self.session.execute(
            select(BorrowRequest).where(
                BorrowRequest.book_id == book_id,
                BorrowRequest.id != keep_id,
                BorrowRequest.status == PENDING,
            )
        ).scalars().all()
        if siblings:
            self.session.execute(
                update(BorrowRequest)
                .where(BorrowRequest.id.in_([r.id for r in siblings]), BorrowRequest.status == PENDING)
                .values(status=REJECTED, response_date=responded_at)
                .execution_options(synchronize_session="evaluate")
            )
        return siblings

    def delete_if_pending(self, request_id: int) -> bool:
        result = self.session.execute(
            delete(BorrowRequest)
            .where(BorrowRequest.id == request_id, BorrowRequest.status == PENDING)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1
