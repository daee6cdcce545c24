from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.http import api_view, json_body, make_token_required
from ..common.validators import PayloadReader
from ..container import Container


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    @api_view
    def auth_register():
        issued = container.auth_service.register(json_body())
        return jsonify(issued.to_dict()), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    @api_view
    def auth_login():
        reader = PayloadReader(json_body())
        email = reader.text("email", required=True, message="Please include a valid email")
        password = reader.text("password", required=True, message="Password is required")
        reader.raise_if_errors()

        issued = container.auth_service.authenticate(email, password)
        return jsonify(issued.to_dict())

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @api_view
    @token_required
    def auth_me():
        return jsonify({"user": g.current_user.to_dict()})
