from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.http import api_view, json_body, make_token_required
from ..container import Container
from .schemas import AddAdvanceCommand, CorrectAdvanceCommand


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)

    @app.route("/api/labor/<int:worker_id>/advance", methods=["POST"], endpoint="add_advance")
    @api_view
    @token_required
    def add_advance(worker_id: int):
        cmd = AddAdvanceCommand.from_payload(json_body())
        return jsonify(container.advance_service.add_advance(g.owner_id, worker_id, cmd).to_dict())

    @app.route("/api/labor/<int:worker_id>/advance", methods=["PUT"], endpoint="correct_advance")
    @api_view
    @token_required
    def correct_advance(worker_id: int):
        cmd = CorrectAdvanceCommand.from_payload(json_body())
        return jsonify(container.advance_service.correct_advance(g.owner_id, worker_id, cmd).to_dict())
