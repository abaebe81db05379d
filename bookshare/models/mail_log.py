from datetime import datetime
from bookshare.extensions import db


class MailLog(db.Model):
    __tablename__ = "mail_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    loan_id = db.Column(db.Integer, db.ForeignKey("borrowed_books.id"), nullable=True, index=True)

    mail_type = db.Column(db.String(50), nullable=False)  # password_reset / request_rejected / due_soon / overdue
    to_email = db.Column(db.String(255), nullable=True)
    subject = db.Column(db.String(255), nullable=True)

    success = db.Column(db.Boolean, nullable=False, default=False)
    error = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
