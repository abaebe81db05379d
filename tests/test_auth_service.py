from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import decode_token

from bookshare.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from bookshare.extensions import db, mail
from bookshare.models.mail_log import MailLog
from bookshare.models.user import User
from bookshare.services.auth_service import AuthService


@pytest.fixture
def auth(ctx):
    return AuthService(db.session)


def test_register_hashes_password_and_normalizes_email(auth):
    user = auth.register("Alice", "  Alice@Example.com ", "secret")

    assert user.email == "alice@example.com"
    assert user.password_hash != "secret"


def test_register_requires_all_fields(auth):
    with pytest.raises(ValidationError):
        auth.register("Alice", "", "secret")


def test_register_duplicate_email(auth):
    auth.register("Alice", "alice@example.com", "secret")
    with pytest.raises(ConflictError):
        auth.register("Other Alice", "ALICE@example.com", "x")


def test_login_issues_token_for_user(auth):
    user = auth.register("Alice", "alice@example.com", "secret")

    token, logged_in = auth.login("alice@example.com", "secret")
    assert logged_in.id == user.id
    claims = decode_token(token)
    assert claims["sub"] == str(user.id)
    assert claims["email"] == "alice@example.com"


@pytest.mark.parametrize("email,password", [("alice@example.com", "wrong"), ("nobody@example.com", "secret")])
def test_login_bad_credentials(auth, email, password):
    auth.register("Alice", "alice@example.com", "secret")
    with pytest.raises(AuthenticationError):
        auth.login(email, password)


def test_change_password(auth):
    user = auth.register("Alice", "alice@example.com", "secret")

    with pytest.raises(AuthenticationError):
        auth.change_password(user.id, "nope", "new-secret")

    auth.change_password(user.id, "secret", "new-secret")
    auth.login("alice@example.com", "new-secret")


def test_get_missing_user(auth):
    with pytest.raises(NotFoundError):
        auth.get_user(99)


def test_forgot_and_reset_password(auth, ctx):
    auth.register("Alice", "alice@example.com", "secret")
    now = datetime(2024, 1, 1, 9, 0)

    with mail.record_messages() as outbox:
        token = auth.forgot_password("alice@example.com", now=now)

    assert len(token) == 40
    assert len(outbox) == 1
    assert outbox[0].recipients == ["alice@example.com"]
    assert f"/reset-password?token={token}" in outbox[0].body

    user = User.query.filter_by(email="alice@example.com").one()
    assert user.reset_token == token
    assert user.reset_token_expiry == now + timedelta(minutes=60)
    log = MailLog.query.one()
    assert (log.mail_type, log.success) == ("password_reset", True)

    auth.reset_password(token, "brand-new", now=now + timedelta(minutes=30))
    auth.login("alice@example.com", "brand-new")

    db.session.expire_all()
    user = db.session.get(User, user.id)
    assert user.reset_token is None
    assert user.reset_token_expiry is None


def test_reset_token_expires(auth):
    auth.register("Alice", "alice@example.com", "secret")
    now = datetime(2024, 1, 1, 9, 0)
    token = auth.forgot_password("alice@example.com", now=now)

    with pytest.raises(ValidationError):
        auth.reset_password(token, "too-late", now=now + timedelta(minutes=61))
    with pytest.raises(ValidationError):
        auth.reset_password("not-a-token", "whatever", now=now)


def test_forgot_password_unknown_email(auth):
    with pytest.raises(NotFoundError):
        auth.forgot_password("ghost@example.com")
