from datetime import datetime
from bookshare.extensions import db

PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"

STATUSES = (PENDING, ACCEPTED, REJECTED)


class BorrowRequest(db.Model):
    __tablename__ = "borrow_requests"

    id = db.Column(db.Integer, primary_key=True)

    # set to NULL if the owner deletes the book; history rows stay
    book_id = db.Column(db.Integer, db.ForeignKey("books.id", ondelete="SET NULL"), nullable=True, index=True)
    requester_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    # book owner at request time
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    status = db.Column(db.String(20), nullable=False, default=PENDING, index=True)  # pending/accepted/rejected
    message = db.Column(db.Text, nullable=True)

    request_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    response_date = db.Column(db.DateTime, nullable=True)

    book = db.relationship("Book", backref="borrow_requests")
    requester = db.relationship("User", foreign_keys=[requester_id])
    owner = db.relationship("User", foreign_keys=[owner_id])

    # at most one pending request per (book, requester)
    __table_args__ = (
        db.Index(
            "uq_pending_request",
            "book_id",
            "requester_id",
            unique=True,
            sqlite_where=db.text("status = 'pending'"),
            postgresql_where=db.text("status = 'pending'"),
        ).ddl_if(dialect=("sqlite", "postgresql")),
    )
