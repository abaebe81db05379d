from datetime import datetime
from bookshare.extensions import db


class Loan(db.Model):
    __tablename__ = "borrowed_books"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    # set to NULL if the owner deletes the book; history rows stay
    book_id = db.Column(db.Integer, db.ForeignKey("books.id", ondelete="SET NULL"), nullable=True, index=True)
    # null for loans created by a direct borrow
    request_id = db.Column(db.Integer, db.ForeignKey("borrow_requests.id"), nullable=True)

    borrowed_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    due_date = db.Column(db.DateTime, nullable=False)
    returned_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User", backref="loans")
    book = db.relationship("Book", backref="loans")
    request = db.relationship("BorrowRequest")

    # at most one open loan per book
    __table_args__ = (
        db.Index(
            "uq_open_loan",
            "book_id",
            unique=True,
            sqlite_where=db.text("returned_at IS NULL"),
            postgresql_where=db.text("returned_at IS NULL"),
        ).ddl_if(dialect=("sqlite", "postgresql")),
    )
