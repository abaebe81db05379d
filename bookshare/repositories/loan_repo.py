from datetime import datetime

from sqlalchemy import func, select, update

from bookshare.models.loan import Loan


class LoanRepo:
    def __init__(self, session):
        self.session = session

    def find_open(self, book_id: int, user_id: int, for_update: bool = False):
        q = select(Loan).where(
            Loan.book_id == book_id,
            Loan.user_id == user_id,
            Loan.returned_at.is_(None),
        )
        if for_update:
            q = q.with_for_update().execution_options(populate_existing=True)
        return self.session.execute(q).scalars().first()

    def list_open_by_user(self, user_id: int):
        q = (
            select(Loan)
            .where(Loan.user_id == user_id, Loan.returned_at.is_(None))
            .order_by(Loan.borrowed_at.desc(), Loan.id.desc())
        )
        return self.session.execute(q).scalars().all()

    def list_history_by_user(self, user_id: int):
        q = select(Loan).where(Loan.user_id == user_id).order_by(Loan.borrowed_at.desc(), Loan.id.desc())
        return self.session.execute(q).scalars().all()

    def list_open(self):
        return self.session.execute(select(Loan).where(Loan.returned_at.is_(None))).scalars().all()

    def count_open_by_user(self, user_id: int) -> int:
        q = select(func.count(Loan.id)).where(Loan.user_id == user_id, Loan.returned_at.is_(None))
        return self.session.execute(q).scalar_one()

    def add(self, loan: Loan):
        self.session.add(loan)
        self.session.flush()
        return loan

    def close_if_open(self, loan_id: int, returned_at: datetime) -> bool:
        result = self.session.execute(
            update(Loan)
            .where(Loan.id == loan_id, Loan.returned_at.is_(None))
            .values(returned_at=returned_at)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1
