import pytest

from bookshare import create_app
from bookshare.config import TestConfig
from bookshare.extensions import db
from bookshare.services.auth_service import AuthService
from bookshare.services.book_service import BookService
from bookshare.services.lending_service import LendingService
from bookshare.services.request_service import RequestService


class DirectModeConfig(TestConfig):
    LENDING_MODE = "direct"


def _build(config):
    app = create_app(config)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app():
    yield from _build(TestConfig)


@pytest.fixture
def direct_app():
    yield from _build(DirectModeConfig)


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(ctx):
    def _make(name="alice", password="secret"):
        return AuthService(db.session).register(name.title(), f"{name}@example.com", password)
    return _make


@pytest.fixture
def make_book(ctx):
    def _make(owner, isbn="111", title="Dune", year=2020, **extra):
        data = {"title": title, "author": "Frank Herbert", "isbn": isbn, "publishedYear": year}
        data.update(extra)
        return BookService(db.session).create_book(data, owner_id=owner.id)
    return _make


@pytest.fixture
def lending(ctx):
    return LendingService.from_config(db.session, ctx.config)


@pytest.fixture
def requests_svc(ctx, lending):
    return RequestService(db.session, lending)


@pytest.fixture
def api(client):
    """Small HTTP helper: register + login users, call endpoints with their token."""
    class Api:
        def __init__(self):
            self.tokens = {}

        def signup(self, name, password="secret"):
            email = f"{name}@example.com"
            r = client.post("/auth/register", json={"name": name.title(), "email": email, "password": password})
            assert r.status_code == 201, r.get_json()
            r = client.post("/auth/login", json={"email": email, "password": password})
            assert r.status_code == 200, r.get_json()
            self.tokens[name] = r.get_json()["token"]
            return r.get_json()["user"]

        def headers(self, name):
            return {"Authorization": f"Bearer {self.tokens[name]}"}

        def get(self, name, url, **kw):
            return client.get(url, headers=self.headers(name), **kw)

        def post(self, name, url, json=None):
            return client.post(url, headers=self.headers(name), json=json or {})

        def put(self, name, url, json=None):
            return client.put(url, headers=self.headers(name), json=json or {})

        def delete(self, name, url):
            return client.delete(url, headers=self.headers(name))

        def add_book(self, name, isbn="111", title="Dune", year=2020):
            r = self.post(name, "/books/", {
                "title": title, "author": "Frank Herbert", "isbn": isbn, "publishedYear": year,
            })
            assert r.status_code == 201, r.get_json()
            return r.get_json()["data"]

    return Api()
