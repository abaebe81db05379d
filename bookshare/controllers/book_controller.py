from flask import Blueprint, current_app, jsonify

from bookshare.extensions import db
from bookshare.serializers import book_dict, borrowed_book_dict, loan_dict
from bookshare.services.book_service import BookService
from bookshare.services.lending_service import LendingService
from bookshare.services.request_service import RequestService
from bookshare.utils.decorators import user_required
from bookshare.utils.request_body import json_body

book_bp = Blueprint("books", __name__)


def _lending():
    return LendingService.from_config(db.session, current_app.config)


@book_bp.get("/")
@user_required
def list_books(user_id: int):
    books = BookService(db.session).list_books()
    return jsonify({"success": True, "data": [book_dict(b) for b in books]})


@book_bp.get("/available")
@user_required
def list_available(user_id: int):
    svc = BookService(db.session)
    mine = svc.pending_requests_of(user_id)
    return jsonify({"success": True, "data": [
        book_dict(b, pending_request=mine.get(b.id), with_request_status=True, with_owner=True)
        for b in svc.list_available()
    ]})


@book_bp.get("/user")
@user_required
def list_user_books(user_id: int):
    books = BookService(db.session).list_user_books(user_id)
    return jsonify({"success": True, "data": [book_dict(b) for b in books]})


@book_bp.get("/user/stats")
@user_required
def user_stats(user_id: int):
    return jsonify({"success": True, "data": _lending().stats(user_id)})


@book_bp.get("/borrowed")
@user_required
def borrowed_books(user_id: int):
    loans = _lending().borrowed_books(user_id)
    return jsonify({"success": True, "data": [borrowed_book_dict(x) for x in loans]})


@book_bp.get("/history")
@user_required
def loan_history(user_id: int):
    loans = _lending().loan_history(user_id)
    return jsonify({"success": True, "data": [loan_dict(x) for x in loans]})


@book_bp.get("/<int:book_id>")
@user_required
def get_book(book_id: int, user_id: int):
    svc = BookService(db.session)
    b = svc.get_book(book_id)
    pending = svc.pending_request_of(book_id, user_id)
    return jsonify({"success": True, "data": book_dict(b, pending_request=pending, with_request_status=True)})


@book_bp.post("/")
@user_required
def create_book(user_id: int):
    data = json_body()
    b = BookService(db.session).create_book(data, owner_id=user_id)
    return jsonify({"success": True, "data": book_dict(b)}), 201


@book_bp.put("/<int:book_id>")
@user_required
def update_book(book_id: int, user_id: int):
    data = json_body()
    b = BookService(db.session).update_book(book_id, data, requester_id=user_id)
    return jsonify({"success": True, "data": book_dict(b)})


@book_bp.delete("/<int:book_id>")
@user_required
def delete_book(book_id: int, user_id: int):
    BookService(db.session).delete_book(book_id, requester_id=user_id)
    return jsonify({"success": True, "message": "Book deleted successfully"})


@book_bp.post("/<int:book_id>/request")
@user_required
def request_book(book_id: int, user_id: int):
    data = json_body()
    req = RequestService(db.session, _lending()).create_request(book_id, user_id, data.get("message"))
    return jsonify({"success": True, "message": "Borrow request sent successfully", "requestId": req.id}), 201


@book_bp.post("/<int:book_id>/borrow")
@user_required
def borrow_book(book_id: int, user_id: int):
    loan = _lending().borrow(book_id, user_id)
    return jsonify({"success": True, "message": "Book borrowed successfully", "data": loan_dict(loan)}), 201


@book_bp.post("/<int:book_id>/return")
@user_required
def return_book(book_id: int, user_id: int):
    loan = _lending().return_book(book_id, user_id)
    return jsonify({"success": True, "message": "Book returned successfully", "data": loan_dict(loan)})
