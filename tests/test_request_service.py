import pytest

from bookshare.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bookshare.extensions import db
from bookshare.models.borrow_request import BorrowRequest
from bookshare.models.loan import Loan
from bookshare.services.lending_service import AcceptResult, LendingService
from bookshare.services.request_service import RequestService
from bookshare.utils.transaction import atomic


@pytest.fixture
def people(make_user, make_book):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    book = make_book(alice)
    return alice, bob, carol, book


def test_create_request_denormalizes_owner(people, requests_svc):
    alice, bob, _carol, book = people
    req = requests_svc.create_request(book.id, bob.id, "  I'll take good care of it  ")

    assert req.status == "pending"
    assert req.owner_id == alice.id
    assert req.requester_id == bob.id
    assert req.message == "I'll take good care of it"
    assert req.request_date is not None
    assert req.response_date is None


def test_cannot_request_own_book(people, requests_svc):
    alice, _bob, _carol, book = people
    with pytest.raises(ForbiddenError):
        requests_svc.create_request(book.id, alice.id)


def test_request_unknown_book(people, requests_svc):
    _alice, bob, _carol, _book = people
    with pytest.raises(NotFoundError):
        requests_svc.create_request(999, bob.id)


def test_only_one_pending_request_per_requester(people, requests_svc):
    _alice, bob, carol, book = people
    requests_svc.create_request(book.id, bob.id)

    with pytest.raises(ConflictError):
        requests_svc.create_request(book.id, bob.id)
    # someone else may still ask
    requests_svc.create_request(book.id, carol.id)

    pending = BorrowRequest.query.filter_by(book_id=book.id, requester_id=bob.id, status="pending").count()
    assert pending == 1


def test_can_request_again_after_rejection(people, requests_svc):
    alice, bob, _carol, book = people
    first = requests_svc.create_request(book.id, bob.id)
    requests_svc.respond(first.id, alice.id, "rejected")

    second = requests_svc.create_request(book.id, bob.id)
    assert second.id != first.id


def test_cannot_request_unavailable_book(people, requests_svc):
    alice, bob, carol, book = people
    req = requests_svc.create_request(book.id, bob.id)
    requests_svc.respond(req.id, alice.id, "accepted")

    with pytest.raises(ConflictError):
        requests_svc.create_request(book.id, carol.id)


def test_list_received_and_sent(people, make_book, requests_svc):
    alice, bob, carol, book = people
    other = make_book(alice, isbn="222", title="Other")
    r1 = requests_svc.create_request(book.id, bob.id)
    r2 = requests_svc.create_request(other.id, carol.id)
    r3 = requests_svc.create_request(other.id, bob.id)
    requests_svc.respond(r2.id, alice.id, "rejected")

    assert {r.id for r in requests_svc.list_received(alice.id)} == {r1.id, r3.id}
    assert [r.id for r in requests_svc.list_received(alice.id, "rejected")] == [r2.id]
    assert requests_svc.list_received(bob.id) == []
    assert {r.id for r in requests_svc.list_sent(bob.id)} == {r1.id, r3.id}


def test_list_received_rejects_unknown_status(people, requests_svc):
    alice = people[0]
    with pytest.raises(ValidationError):
        requests_svc.list_received(alice.id, "approved")


@pytest.mark.parametrize("decision", ["approve", "", None, "ACCEPTED", "pending"])
def test_respond_validates_decision(people, requests_svc, decision):
    alice, bob, _carol, book = people
    req = requests_svc.create_request(book.id, bob.id)

    with pytest.raises(ValidationError):
        requests_svc.respond(req.id, alice.id, decision)
    assert db.session.get(BorrowRequest, req.id).status == "pending"


def test_respond_accept_returns_loan(people, requests_svc):
    alice, bob, _carol, book = people
    req = requests_svc.create_request(book.id, bob.id)

    result = requests_svc.respond(req.id, alice.id, "accepted")
    assert isinstance(result, AcceptResult)
    assert result.loan.book_id == book.id


def test_respond_to_missing_request(people, requests_svc):
    alice = people[0]
    with pytest.raises(NotFoundError):
        requests_svc.respond(12345, alice.id, "rejected")


def test_cancel_by_requester_only(people, requests_svc):
    _alice, bob, carol, book = people
    req = requests_svc.create_request(book.id, bob.id)

    with pytest.raises(NotFoundError):
        requests_svc.cancel(req.id, carol.id)

    requests_svc.cancel(req.id, bob.id)
    assert db.session.get(BorrowRequest, req.id) is None

    with pytest.raises(NotFoundError):
        requests_svc.cancel(req.id, bob.id)


def test_cannot_cancel_answered_request(people, requests_svc):
    alice, bob, _carol, book = people
    req = requests_svc.create_request(book.id, bob.id)
    requests_svc.respond(req.id, alice.id, "accepted")

    with pytest.raises(NotFoundError):
        requests_svc.cancel(req.id, bob.id)
    assert Loan.query.filter_by(request_id=req.id).count() == 1


def test_requests_disabled_in_direct_mode(people):
    _alice, bob, _carol, book = people
    svc = RequestService(db.session, LendingService(db.session, mode="direct"))
    with pytest.raises(ForbiddenError):
        svc.create_request(book.id, bob.id)


def test_database_refuses_second_pending_row(people, requests_svc):
    # racing creates both pass the lookup; the unique index stops the second insert
    alice, bob, _carol, book = people
    requests_svc.create_request(book.id, bob.id)

    with pytest.raises(ConflictError):
        with atomic(db.session):
            db.session.add(BorrowRequest(book_id=book.id, requester_id=bob.id, owner_id=alice.id, status="pending"))

    assert BorrowRequest.query.filter_by(book_id=book.id, requester_id=bob.id).count() == 1


def test_answered_rows_do_not_count_against_pending_index(people, requests_svc):
    alice, bob, _carol, book = people
    first = requests_svc.create_request(book.id, bob.id)
    requests_svc.respond(first.id, alice.id, "rejected")

    with atomic(db.session):
        db.session.add(BorrowRequest(book_id=book.id, requester_id=bob.id, owner_id=alice.id, status="rejected"))
    requests_svc.create_request(book.id, bob.id)

    assert BorrowRequest.query.filter_by(book_id=book.id, requester_id=bob.id).count() == 3
