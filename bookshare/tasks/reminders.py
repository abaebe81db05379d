# bookshare/tasks/reminders.py
from datetime import datetime, timedelta
from flask import current_app

from bookshare.extensions import db
from bookshare.repositories.loan_repo import LoanRepo
from bookshare.repositories.mail_log_repo import MailLogRepo
from bookshare.services.mail_service import MailService
from bookshare.utils.dates import is_overdue


def send_loan_reminders(session, now: datetime, due_soon_hours: int = 24) -> dict:
    """
    Mail borrowers about open loans, once per loan and reminder type.
    - overdue: due_date passed, returned_at None
    - due_soon: due_date within due_soon_hours
    Loans and availability are not touched.
    """
    due_soon_limit = now + timedelta(hours=due_soon_hours)
    logs = MailLogRepo(session)
    mailer = MailService(session)

    counts = {"overdue": 0, "due_soon": 0, "skipped": 0}
    for loan in LoanRepo(session).list_open():
        if is_overdue(loan, now):
            kind, send = "overdue", mailer.send_overdue
        elif loan.due_date <= due_soon_limit:
            kind, send = "due_soon", mailer.send_due_soon
        else:
            continue

        if logs.already_sent(loan.id, kind):
            counts["skipped"] += 1
            continue
        if send(loan):
            counts[kind] += 1

    # single commit for the mail log rows
    session.commit()
    return counts


def run_reminder_job(app):
    with app.app_context():
        try:
            counts = send_loan_reminders(
                db.session,
                datetime.utcnow(),
                app.config.get("DUE_SOON_HOURS", 24),
            )
            current_app.logger.info(
                f"[reminders] overdue_sent={counts['overdue']} due_soon_sent={counts['due_soon']} "
                f"already_sent={counts['skipped']}"
            )
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"[reminders] Job failed: {e}")
