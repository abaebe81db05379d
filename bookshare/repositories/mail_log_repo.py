from sqlalchemy import select

from bookshare.models.mail_log import MailLog


class MailLogRepo:
    def __init__(self, session):
        self.session = session

    def already_sent(self, loan_id: int, mail_type: str) -> bool:
        q = select(MailLog.id).where(
            MailLog.loan_id == loan_id,
            MailLog.mail_type == mail_type,
            MailLog.success.is_(True),
        ).limit(1)
        return self.session.execute(q).first() is not None

    def add(self, row: MailLog):
        self.session.add(row)
        return row
