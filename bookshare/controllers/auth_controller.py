from flask import Blueprint, jsonify

from bookshare.extensions import db
from bookshare.serializers import user_dict
from bookshare.services.auth_service import AuthService
from bookshare.utils.decorators import user_required
from bookshare.utils.request_body import json_body

auth_bp = Blueprint("auth", __name__)


def _auth():
    return AuthService(db.session)


@auth_bp.post("/register")
def register():
    data = json_body()
    user = _auth().register(
        name=data.get("name"),
        email=data.get("email"),
        password=data.get("password"),
    )
    return jsonify({"success": True, "message": "User registered successfully", "user": user_dict(user)}), 201


@auth_bp.post("/login")
def login():
    data = json_body()
    token, user = _auth().login(data.get("email"), data.get("password"))
    return jsonify({"success": True, "token": token, "user": user_dict(user)})


@auth_bp.get("/me")
@user_required
def me(user_id: int):
    user = _auth().get_user(user_id)
    return jsonify({"success": True, "user": user_dict(user)})


@auth_bp.post("/change-password")
@user_required
def change_password(user_id: int):
    data = json_body()
    _auth().change_password(user_id, data.get("currentPassword"), data.get("newPassword"))
    return jsonify({"success": True, "message": "Password updated successfully"})


@auth_bp.post("/forgot-password")
def forgot_password():
    data = json_body()
    _auth().forgot_password(data.get("email"))
    return jsonify({"success": True, "message": "Password reset email sent"})


@auth_bp.post("/reset-password")
def reset_password():
    data = json_body()
    _auth().reset_password(data.get("token"), data.get("password"))
    return jsonify({"success": True, "message": "Password has been reset successfully"})
