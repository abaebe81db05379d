from sqlalchemy import select

from bookshare.models.user import User


class UserRepo:
    def __init__(self, session):
        self.session = session

    def get_by_email(self, email: str):
        return self.session.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def get_by_id(self, user_id: int):
        return self.session.get(User, user_id)

    def get_by_reset_token(self, token: str, now):
        q = select(User).where(User.reset_token == token, User.reset_token_expiry > now)
        return self.session.execute(q).scalar_one_or_none()

    def add(self, user: User):
        self.session.add(user)
        self.session.flush()
        return user
