"""Signup and login."""
from flask import jsonify, request
from supportdesk.blueprints.auth import auth_bp
from supportdesk.services import user_service


@auth_bp.route("/signup", methods=["POST"])
def signup():
    data = request.get_json(silent=True) or {}
    user = user_service.register_user(
        data.get("name"), data.get("email"), data.get("password")
    )
    return jsonify(success=True, user=user.to_dict()), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    user = user_service.authenticate(data.get("email"), data.get("password"))
    return jsonify(success=True, user=user.to_dict())
