from __future__ import annotations

import secrets
from datetime import datetime, timedelta

from flask import current_app
from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash

from bookshare.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from bookshare.models.user import User
from bookshare.repositories.user_repo import UserRepo
from bookshare.services.mail_service import MailService
from bookshare.utils.transaction import atomic


def _normalize_email(email) -> str:
    return (email or "").strip().lower()


class AuthService:
    def __init__(self, session):
        self.session = session
        self.users = UserRepo(session)

    def register(self, name: str, email: str, password: str) -> User:
        name = (name or "").strip()
        email = _normalize_email(email)
        if not name or not email or not password:
            raise ValidationError("All fields are required")

        with atomic(self.session):
            if self.users.get_by_email(email):
                raise ConflictError("User with this email already exists")
            user = self.users.add(User(
                name=name,
                email=email,
                password_hash=generate_password_hash(password),
            ))
        return user

    def login(self, email: str, password: str):
        email = _normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.users.get_by_email(email)
        if not user or not check_password_hash(user.password_hash, password):
            raise AuthenticationError("Invalid credentials")

        token = create_access_token(
            identity=str(user.id),
            additional_claims={"name": user.name, "email": user.email},
        )
        return token, user

    def get_user(self, user_id: int) -> User:
        user = self.users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current and new password are required")

        with atomic(self.session):
            user = self.get_user(user_id)
            if not check_password_hash(user.password_hash, current_password):
                raise AuthenticationError("Current password is incorrect")
            user.password_hash = generate_password_hash(new_password)

    def forgot_password(self, email: str, now: datetime | None = None) -> str:
        """Issue a reset token and mail the link. Returns the token."""
        email = _normalize_email(email)
        if not email:
            raise ValidationError("Email is required")
        now = now or datetime.utcnow()
        ttl = current_app.config.get("RESET_TOKEN_TTL_MINUTES", 60)

        with atomic(self.session):
            user = self.users.get_by_email(email)
            if not user:
                raise NotFoundError("User with this email does not exist")
            user.reset_token = secrets.token_hex(20)
            user.reset_token_expiry = now + timedelta(minutes=ttl)
            token = user.reset_token

        base_url = current_app.config.get("FRONTEND_BASE_URL", "").rstrip("/")
        with atomic(self.session):
            MailService(self.session).send_password_reset(user, f"{base_url}/reset-password?token={token}")
        return token

    def reset_password(self, token: str, password: str, now: datetime | None = None) -> None:
        if not token or not password:
            raise ValidationError("Token and password are required")

        with atomic(self.session):
            user = self.users.get_by_reset_token(token, now or datetime.utcnow())
            if not user:
                raise ValidationError("Invalid or expired token")
            user.password_hash = generate_password_hash(password)
            user.reset_token = None
            user.reset_token_expiry = None
