from __future__ import annotations

from flask import current_app
from flask_mail import Message

from bookshare.extensions import mail
from bookshare.models.mail_log import MailLog
from bookshare.repositories.mail_log_repo import MailLogRepo


class MailService:
    def __init__(self, session):
        self.session = session
        self.logs = MailLogRepo(session)

    @staticmethod
    def send_email(to_email: str, subject: str, body: str) -> tuple[bool, str | None]:
        """
        return: (success, error_text)
        """
        try:
            msg = Message(subject=subject, recipients=[to_email], body=body)
            mail.send(msg)
            return True, None
        except Exception as e:
            current_app.logger.warning(f"[mail] Could not send mail to {to_email}: {e}")
            return False, str(e)

    def _deliver(self, mail_type: str, to_email: str | None, subject: str, body: str,
                 user_id: int | None = None, loan_id: int | None = None) -> bool:
        """Send and record one mail. The log row is left for the caller to commit."""
        if not to_email:
            ok, err = False, "missing_email"
        else:
            ok, err = self.send_email(to_email, subject, body)

        self.logs.add(MailLog(
            user_id=user_id,
            loan_id=loan_id,
            mail_type=mail_type,
            to_email=to_email,
            subject=subject,
            success=ok,
            error=err[:500] if err else None,
        ))
        return ok

    def send_password_reset(self, user, reset_url: str) -> bool:
        body = (
            f"Hello {user.name},\n\n"
            "You requested a password reset. Open the link below to choose a new password:\n"
            f"{reset_url}\n\n"
            "The link expires in one hour. If you did not request this, ignore this email.\n"
        )
        return self._deliver("password_reset", user.email, "Password Reset Request", body, user_id=user.id)

    def send_request_rejected(self, req) -> bool:
        requester = req.requester
        title = req.book.title if req.book else "the book"
        body = (
            f"Hello {requester.name if requester else ''},\n\n"
            f"Your request to borrow '{title}' was declined because the book has been lent to someone else.\n"
        )
        return self._deliver(
            "request_rejected",
            requester.email if requester else None,
            "Borrow request declined",
            body,
            user_id=req.requester_id,
        )

    def send_due_soon(self, loan) -> bool:
        body = (
            f"Hello {loan.user.name},\n\n"
            f"'{loan.book.title if loan.book else 'Your book'}' is due back on {loan.due_date:%Y-%m-%d %H:%M} UTC.\n"
        )
        return self._deliver("due_soon", loan.user.email, "Book due soon", body,
                             user_id=loan.user_id, loan_id=loan.id)

    def send_overdue(self, loan) -> bool:
        body = (
            f"Hello {loan.user.name},\n\n"
            f"'{loan.book.title if loan.book else 'Your book'}' was due on {loan.due_date:%Y-%m-%d %H:%M} UTC.\n"
            "Please return it to its owner as soon as possible.\n"
        )
        return self._deliver("overdue", loan.user.email, "Book overdue", body,
                             user_id=loan.user_id, loan_id=loan.id)
