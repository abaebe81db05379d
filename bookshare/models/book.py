from datetime import datetime
from bookshare.extensions import db


class Book(db.Model):
    __tablename__ = "books"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False, index=True)
    author = db.Column(db.String(255), nullable=False, index=True)
    isbn = db.Column(db.String(50), unique=True, nullable=False, index=True)
    published_year = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text, nullable=True)
    cover_image = db.Column(db.Text, nullable=True)

    # false <=> an open row in borrowed_books; only LendingService flips it
    available = db.Column(db.Boolean, nullable=False, default=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = db.relationship("User", backref="books")
