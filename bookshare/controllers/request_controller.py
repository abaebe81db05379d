from flask import Blueprint, current_app, request, jsonify

from bookshare.extensions import db
from bookshare.models.borrow_request import ACCEPTED, PENDING
from bookshare.serializers import loan_dict, received_request_dict, request_dict, sent_request_dict
from bookshare.services.lending_service import LendingService
from bookshare.services.mail_service import MailService
from bookshare.services.request_service import RequestService
from bookshare.utils.decorators import user_required
from bookshare.utils.request_body import json_body
from bookshare.utils.transaction import atomic

request_bp = Blueprint("requests", __name__)


def _requests():
    return RequestService(db.session, LendingService.from_config(db.session, current_app.config))


def _notify_auto_rejected(rejected):
    if not rejected or not current_app.config.get("NOTIFY_AUTO_REJECTED"):
        return
    with atomic(db.session):
        mailer = MailService(db.session)
        for r in rejected:
            mailer.send_request_rejected(r)


@request_bp.get("/received")
@user_required
def received(user_id: int):
    status = request.args.get("status", PENDING)
    rows = _requests().list_received(user_id, status)
    return jsonify({"success": True, "data": [received_request_dict(r) for r in rows]})


@request_bp.get("/sent")
@user_required
def sent(user_id: int):
    rows = _requests().list_sent(user_id)
    return jsonify({"success": True, "data": [sent_request_dict(r) for r in rows]})


@request_bp.post("/<int:request_id>/respond")
@user_required
def respond(request_id: int, user_id: int):
    data = json_body()
    decision = data.get("status")
    result = _requests().respond(request_id, user_id, decision)

    if decision == ACCEPTED:
        _notify_auto_rejected(result.auto_rejected)
        return jsonify({
            "success": True,
            "message": "Borrow request accepted successfully",
            "data": {
                "request": request_dict(result.request),
                "loan": loan_dict(result.loan),
                "autoRejected": [r.id for r in result.auto_rejected],
            },
        })
    return jsonify({
        "success": True,
        "message": "Borrow request rejected successfully",
        "data": {"request": request_dict(result)},
    })


@request_bp.delete("/<int:request_id>")
@user_required
def cancel(request_id: int, user_id: int):
    _requests().cancel(request_id, user_id)
    return jsonify({"success": True, "message": "Borrow request cancelled successfully"})
